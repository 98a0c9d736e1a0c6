"""
Validate a crash dump and print what was reconstructed.

Usage
-----
    python -m crash_dump_analyzer.scripts.validate_dump <search_dir> [--name cdl_dump.yaml] [--check-progress]

Exit codes: 0 valid, 1 format error (schema, handle, invariant), 2 dump file not found or ambiguous.
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional, Sequence

from crash_dump_analyzer.analysis.progress import check_progress_counters, command_buffer_table
from crash_dump_analyzer.errors import AmbiguousArtifact, ArtifactNotFound, DumpFormatError
from crash_dump_analyzer.ingest.reader_cdl import CdlDumpReader
from crash_dump_analyzer.models.dump import DumpFile
from crash_dump_analyzer.models.reader_config import DEFAULT_DUMP_FILE_NAME, DumpReaderConfig


def summarize(dump: DumpFile) -> List[str]:
    lines = [
        f"dump: {dump.source_path}",
        f"version: {dump.version}  startTime: {dump.start_time}  timeSinceStart: {dump.time_since_start}",
        f"settings: {len(dump.settings)}",
        f"instance: {dump.instance.handle}  application: {dump.instance.application!r}"
        f"  extensions: {len(dump.instance.extensions)}",
    ]
    for i, dev in enumerate(dump.devices):
        n_submits = sum(len(q.submits) for q in dev.queues)
        lines.append(
            f"device[{i}]: {dev.device_name!r} {dev.handle}  queues: {len(dev.queues)}"
            f"  pending submits: {n_submits}"
            f"  incomplete cbs: {len(dev.incomplete_command_buffers)}  all cbs: {len(dev.all_command_buffers)}"
        )
        table = command_buffer_table(dev)
        if not table.empty:
            lines.append(table.drop(columns=["listing"]).to_string(index=False))
    return lines


def main(argv: Optional[Sequence[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Strictly read a crash dump and print a summary.")
    ap.add_argument("search_dir", help="Directory searched recursively for the dump file.")
    ap.add_argument("--name", default=DEFAULT_DUMP_FILE_NAME, help="Dump file name (default: %(default)s).")
    ap.add_argument("--quiet-ignored", action="store_true", help="Do not report deliberately ignored keys.")
    ap.add_argument("--check-progress", action="store_true", help="Also check command buffer progress counters.")
    args = ap.parse_args(argv)

    try:
        cfg = DumpReaderConfig(dump_file_name=args.name, record_ignored_keys=not args.quiet_ignored)
    except ValueError as e:
        ap.error(str(e))

    try:
        dump = CdlDumpReader(cfg).find_and_read(args.search_dir)
    except (ArtifactNotFound, AmbiguousArtifact) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2
    except DumpFormatError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    for line in summarize(dump):
        print(line)
    for w in dump.warnings:
        print(f"WARNING: {w}")

    status = 0
    if args.check_progress:
        for i, dev in enumerate(dump.devices):
            for cb in dev.command_buffers:
                rep = check_progress_counters(cb)
                for w in rep.warnings:
                    print(f"WARNING: device[{i}] {cb.handle}: {w}")
                for e in rep.errors:
                    print(f"ERROR: device[{i}] {cb.handle}: {e}", file=sys.stderr)
                    status = 1
    return status


if __name__ == "__main__":
    raise SystemExit(main())

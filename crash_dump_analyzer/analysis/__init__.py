"""Analysis package.

Design principle:
  - Ingest produces a validated, immutable :class:`~crash_dump_analyzer.models.dump.DumpFile`.
  - Analysis consumes it and produces derived tables and reports; it never re-reads the dump.
"""

from .progress import (
    ProgressReport,
    SubmittedCommandBuffer,
    check_progress_counters,
    command_buffer_table,
    command_table,
    find_command_buffer,
    find_queue,
    iter_submitted_command_buffers,
)

__all__ = [
    "ProgressReport",
    "SubmittedCommandBuffer",
    "check_progress_counters",
    "command_buffer_table",
    "command_table",
    "find_command_buffer",
    "find_queue",
    "iter_submitted_command_buffers",
]

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from crash_dump_analyzer.errors import AmbiguousArtifact, ArtifactNotFound
from crash_dump_analyzer.models.reader_config import DEFAULT_DUMP_FILE_NAME


@dataclass
class DumpDiscovery:
    """
    Locate the single dump file below a search directory.

    STRICT POLICY: exactly one file named `dump_file_name` must exist anywhere
    under the search directory.
      - zero matches -> ArtifactNotFound
      - a second match -> AmbiguousArtifact, raised as soon as it is seen
        (we do not stop at the first hit, so stale dumps are reported)
    """
    dump_file_name: str = DEFAULT_DUMP_FILE_NAME

    def locate(self, search_dir: str | Path) -> Path:
        root = Path(search_dir).expanduser().resolve()
        if not root.exists() or not root.is_dir():
            raise ArtifactNotFound(f"Not a directory: {root}")

        found: Optional[Path] = None
        for p in root.rglob("*"):
            if not p.is_file() or p.name != self.dump_file_name:
                continue
            if found is not None:
                raise AmbiguousArtifact(self.dump_file_name, found, p)
            found = p

        if found is None:
            raise ArtifactNotFound(f"No '{self.dump_file_name}' found under '{root}'.")
        return found


def find_dump_file(search_dir: str | Path, dump_file_name: str = DEFAULT_DUMP_FILE_NAME) -> Path:
    return DumpDiscovery(dump_file_name=dump_file_name).locate(search_dir)

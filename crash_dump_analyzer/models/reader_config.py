"""Reader configuration for crash dump ingestion.

A DumpReaderConfig groups the few knobs of the ingest layer into one frozen
dataclass. It can be:

- Overridden field-by-field via ``dataclasses.replace()``
- Serialized to/from a dict for provenance next to validation reports

The schema itself is not configurable: unknown keys are always fatal.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict


DEFAULT_DUMP_FILE_NAME = "cdl_dump.yaml"


@dataclass(frozen=True)
class DumpReaderConfig:
    """Frozen configuration for locating and reading a dump.

    Fields
    ------
    dump_file_name : str
        Exact file name searched for by the locator.
    encoding : str
        Text encoding of the dump file.
    record_ignored_keys : bool
        If True, every deliberately ignored key (SystemInfo, Queue flags,
        Command parameters/internalState) adds a line to ``DumpFile.warnings``.
    """

    dump_file_name: str = DEFAULT_DUMP_FILE_NAME
    encoding: str = "utf-8"
    record_ignored_keys: bool = True

    def __post_init__(self) -> None:
        if not self.dump_file_name or "/" in self.dump_file_name or "\\" in self.dump_file_name:
            raise ValueError(f"dump_file_name must be a bare file name, got {self.dump_file_name!r}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> DumpReaderConfig:
        """Reconstruct from a dict (e.g. loaded from JSON). Unknown keys raise TypeError."""
        return cls(**dict(d))

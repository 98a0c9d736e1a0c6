"""Ingest package - dump discovery and strict dump reading.

This package handles:
- Locating the single dump file (cdl_dump.yaml) below a search directory
- Loading the YAML document as an ordered node tree
- Mapping the node tree onto the frozen entities of models.dump

Key classes:
- DumpDiscovery: Finds the unique dump file, fails on zero or several
- CdlDumpReader: Validates the document against the closed schema and builds a DumpFile

Design principle:
- Unknown keys are fatal, never skipped
- No partially built entity is ever returned
"""

from .discovery import DumpDiscovery, find_dump_file
from .reader_cdl import CdlDumpReader, load_dump

__all__ = [
    "DumpDiscovery",
    "find_dump_file",
    "CdlDumpReader",
    "load_dump",
]

"""Crash Dump Analyzer -- Python tooling for GPU crash diagnostic dumps.

Reconstructs the last-known driver state written after a device loss or hang:
instance, devices, queues, submissions, command buffers and their recorded
commands.

This package provides tools for:
- Locating the single dump file produced by a capture
- Strictly reading the dump into an immutable object graph
- Checking structural invariants of the reconstructed graph
- Tabulating command buffer progress for analysis and reporting

Key principles:
- Closed schema: an unknown key means format drift and is fatal
- No partial results: the first violation aborts the read
- Handles are value copies: cross references are resolved by lookup

Main subpackages:
- analysis: Progress tables, handle lookups, caller-side counter checks
- ingest: Dump discovery, YAML node model, strict reader
- models: Frozen entities (DumpFile, Device, CommandBuffer, ...) and reader config
"""

__all__ = []

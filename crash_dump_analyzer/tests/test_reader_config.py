"""Tests for DumpReaderConfig."""

from __future__ import annotations

import dataclasses
import json

import pytest

from crash_dump_analyzer.models.reader_config import DEFAULT_DUMP_FILE_NAME, DumpReaderConfig


def test_defaults() -> None:
    cfg = DumpReaderConfig()
    assert cfg.dump_file_name == DEFAULT_DUMP_FILE_NAME == "cdl_dump.yaml"
    assert cfg.encoding == "utf-8"
    assert cfg.record_ignored_keys is True


def test_frozen() -> None:
    cfg = DumpReaderConfig()
    with pytest.raises(dataclasses.FrozenInstanceError):
        cfg.encoding = "latin-1"  # type: ignore[misc]


def test_dict_roundtrip_through_json() -> None:
    cfg = dataclasses.replace(DumpReaderConfig(), record_ignored_keys=False)
    restored = DumpReaderConfig.from_dict(json.loads(json.dumps(cfg.to_dict())))
    assert restored == cfg


def test_from_dict_rejects_unknown_keys() -> None:
    with pytest.raises(TypeError):
        DumpReaderConfig.from_dict({"strict": False})


@pytest.mark.parametrize("name", ["", "a/cdl_dump.yaml", "a\\b.yaml"])
def test_rejects_non_bare_file_name(name: str) -> None:
    with pytest.raises(ValueError):
        DumpReaderConfig(dump_file_name=name)

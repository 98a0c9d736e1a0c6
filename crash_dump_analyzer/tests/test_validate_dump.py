"""Tests for the validate_dump script entry point."""

from __future__ import annotations

import textwrap

import pytest

from crash_dump_analyzer.scripts.validate_dump import main


_DUMP = textwrap.dedent(
    """\
    version: "1.0"
    SystemInfo:
      osName: Linux
    Instance:
      handle: "0x10 [VkInstance]"
      applicationInfo:
        application: demo
    Device:
      handle: "0x20 [VkDevice]"
      deviceName: gpu
      AllCommandBuffers:
        - handle: "0x50 [cb]"
          state: PENDING
          beginValue: 1
          endValue: 2
          topCheckpointValue: 1
          bottomCheckpointValue: 2
    """
)


def _write(tmp_path, text: str = _DUMP) -> None:
    d = tmp_path / "crash"
    d.mkdir()
    (d / "cdl_dump.yaml").write_text(text, encoding="utf-8")


def test_valid_dump(tmp_path, capsys) -> None:
    _write(tmp_path)
    assert main([str(tmp_path)]) == 0
    out = capsys.readouterr().out
    assert "version: 1.0" in out
    assert "'gpu'" in out
    assert "WARNING: Ignored top level key 'SystemInfo'" in out


def test_quiet_ignored(tmp_path, capsys) -> None:
    _write(tmp_path)
    assert main([str(tmp_path), "--quiet-ignored"]) == 0
    assert "WARNING" not in capsys.readouterr().out


def test_check_progress_reports_errors(tmp_path, capsys) -> None:
    _write(tmp_path)
    assert main([str(tmp_path), "--check-progress"]) == 1
    assert "bottomCheckpointValue" in capsys.readouterr().err


def test_format_error_exit_code(tmp_path, capsys) -> None:
    _write(tmp_path, 'version: "1.0"\nunexpected: 1\n')
    assert main([str(tmp_path)]) == 1
    assert "Unknown top level key: unexpected" in capsys.readouterr().err


def test_missing_dump_exit_code(tmp_path, capsys) -> None:
    assert main([str(tmp_path)]) == 2
    assert "ERROR" in capsys.readouterr().err


def test_undecodable_dump_exit_code(tmp_path, capsys) -> None:
    d = tmp_path / "crash"
    d.mkdir()
    (d / "cdl_dump.yaml").write_bytes(b'version: "1.0"\nstartTime: "\xff\xfe"\n')
    assert main([str(tmp_path)]) == 1
    assert "Cannot decode" in capsys.readouterr().err


def test_bad_dump_name_is_usage_error(tmp_path, capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        main([str(tmp_path), "--name", "a/b.yaml"])
    assert exc.value.code == 2
    assert "bare file name" in capsys.readouterr().err

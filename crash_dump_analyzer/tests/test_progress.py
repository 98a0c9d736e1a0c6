"""Tests for progress tables, handle lookups and counter checks."""

from __future__ import annotations

import pytest

from crash_dump_analyzer.analysis.progress import (
    COMMAND_BUFFER_COLUMNS,
    COMMAND_COLUMNS,
    check_progress_counters,
    command_buffer_table,
    command_table,
    find_command_buffer,
    find_queue,
    iter_submitted_command_buffers,
)
from crash_dump_analyzer.errors import InvariantViolation
from crash_dump_analyzer.models.dump import (
    Command,
    CommandBuffer,
    Device,
    DumpFile,
    Handle,
    Queue,
    Submit,
    SubmitInfo,
)


def _cb(value: int, *, checkpoints=(1, 2, 3), **kw) -> CommandBuffer:
    cmds = tuple(Command(id=i, checkpoint_value=c, name=f"cmd{i}") for i, c in enumerate(checkpoints))
    base = dict(
        handle=Handle(value, f"cb{value}"),
        queue=Handle(0x30, "q"),
        begin_value=1,
        end_value=3,
        top_checkpoint_value=2,
        bottom_checkpoint_value=1,
        last_started_command=1,
        last_completed_command=0,
        commands=cmds,
    )
    base.update(kw)
    return CommandBuffer(**base)


def _dump() -> DumpFile:
    q = Queue(
        handle=Handle(0x30, "q"),
        submits=(
            Submit(id=1, submit_infos=(SubmitInfo(id=5, command_buffers=("cbA", "cbB")),)),
            Submit(id=2, submit_infos=(SubmitInfo(id=6, command_buffers=("cbC",)),)),
        ),
    )
    dev0 = Device(device_name="gpu0", queues=(q,), incomplete_command_buffers=(_cb(0x50), _cb(0x51)))
    dev1 = Device(device_name="gpu1", all_command_buffers=(_cb(0x60),))
    return DumpFile(version="1.0", devices=(dev0, dev1))


# -----------------------------------------------------------------------
# Tables
# -----------------------------------------------------------------------


def test_command_buffer_table_incomplete() -> None:
    df = command_buffer_table(_dump().devices[0])
    assert list(df.columns) == COMMAND_BUFFER_COLUMNS
    assert len(df) == 2
    assert set(df["listing"]) == {"incomplete"}
    assert df["handle"].tolist() == [0x50, 0x51]
    assert df["handle_name"].tolist() == ["cb80", "cb81"]
    assert df["n_commands"].tolist() == [3, 3]


def test_command_buffer_table_all_and_empty() -> None:
    df = command_buffer_table(_dump().devices[1])
    assert df["listing"].tolist() == ["all"]
    empty = command_buffer_table(Device())
    assert empty.empty
    assert list(empty.columns) == COMMAND_BUFFER_COLUMNS


def test_command_table() -> None:
    df = command_table(_cb(1, checkpoints=(4, 5)))
    assert list(df.columns) == COMMAND_COLUMNS
    assert df["checkpoint_value"].tolist() == [4, 5]
    assert df["name"].tolist() == ["cmd0", "cmd1"]


# -----------------------------------------------------------------------
# Lookups
# -----------------------------------------------------------------------


def test_find_queue_by_handle_or_value() -> None:
    dump = _dump()
    dev = dump.devices[0]
    cb = dev.incomplete_command_buffers[0]
    assert find_queue(dev, cb.queue) is dev.queues[0]
    assert find_queue(dev, 0x30) is dev.queues[0]
    with pytest.raises(KeyError):
        find_queue(dev, 0x99)


def test_find_command_buffer_across_devices() -> None:
    dump = _dump()
    assert find_command_buffer(dump, 0x60) is dump.devices[1].all_command_buffers[0]
    assert find_command_buffer(dump, Handle(0x51, "ignored")).handle.name == "cb81"
    with pytest.raises(KeyError):
        find_command_buffer(dump, 0x1)


def test_iter_submitted_command_buffers_order() -> None:
    refs = list(iter_submitted_command_buffers(_dump()))
    assert [r.command_buffer for r in refs] == ["cbA", "cbB", "cbC"]
    assert [r.submit.id for r in refs] == [1, 1, 2]
    assert {r.device_index for r in refs} == {0}


# -----------------------------------------------------------------------
# Counter checks
# -----------------------------------------------------------------------


def test_consistent_counters() -> None:
    rep = check_progress_counters(_cb(1))
    assert rep.ok
    assert rep.errors == [] and rep.warnings == []
    rep.raise_if_errors()


def test_unfinished_buffer_skips_end_checks() -> None:
    rep = check_progress_counters(_cb(1, begin_value=5, end_value=0, checkpoints=(9,)))
    assert rep.ok
    assert rep.warnings == []


@pytest.mark.parametrize(
    "kw, fragment",
    [
        (dict(begin_value=4, end_value=3), "beginValue"),
        (dict(bottom_checkpoint_value=3, top_checkpoint_value=2), "bottomCheckpointValue"),
        (dict(last_completed_command=2, last_started_command=1), "lastCompletedCommand"),
        (dict(checkpoints=(1, 3, 2)), "decreases"),
    ],
)
def test_inconsistent_counters(kw, fragment: str) -> None:
    rep = check_progress_counters(_cb(1, **kw))
    assert not rep.ok
    assert any(fragment in e for e in rep.errors)
    with pytest.raises(InvariantViolation):
        rep.raise_if_errors()


def test_command_outside_range_is_warning() -> None:
    rep = check_progress_counters(_cb(1, checkpoints=(1, 2, 7)))
    assert rep.ok
    assert len(rep.warnings) == 1
    assert "index 2" in rep.warnings[0]

"""Command buffer progress: tables, handle lookups and counter checks.

The reader stores execution progress markers exactly as written by the
producer. This module is the consumer side:

- tabulate command buffers and commands as DataFrames for reports
- resolve value-copied handles (e.g. CommandBuffer.queue) to the entity they name
- check the progress counters of a command buffer for consistency

Examples
--------
>>> from crash_dump_analyzer.models.dump import CommandBuffer
>>> check_progress_counters(CommandBuffer(begin_value=1, end_value=5)).ok
True
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Union

import numpy as np
import pandas as pd

from crash_dump_analyzer.errors import InvariantViolation
from crash_dump_analyzer.models.dump import (
    CommandBuffer,
    Device,
    DumpFile,
    Handle,
    Queue,
    Submit,
    SubmitInfo,
)


COMMAND_BUFFER_COLUMNS = [
    "listing",
    "handle",
    "handle_name",
    "state",
    "level",
    "queue",
    "submit_info_id",
    "begin_value",
    "end_value",
    "top_checkpoint_value",
    "bottom_checkpoint_value",
    "last_started_command",
    "last_completed_command",
    "n_commands",
]

COMMAND_COLUMNS = ["id", "checkpoint_value", "name", "state", "message"]


HandleLike = Union[Handle, int]


def _handle_value(handle: HandleLike) -> int:
    return handle.value if isinstance(handle, Handle) else int(handle)


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------

def command_buffer_table(device: Device) -> pd.DataFrame:
    """One row per command buffer of the device, in dump order.

    ``listing`` is "incomplete" or "all" depending on which listing the dump used.
    """
    if device.incomplete_command_buffers:
        listing, cbs = "incomplete", device.incomplete_command_buffers
    else:
        listing, cbs = "all", device.all_command_buffers

    rows = [
        {
            "listing": listing,
            "handle": cb.handle.value,
            "handle_name": cb.handle.name,
            "state": cb.state,
            "level": cb.level,
            "queue": cb.queue.value,
            "submit_info_id": cb.submit_info_id,
            "begin_value": cb.begin_value,
            "end_value": cb.end_value,
            "top_checkpoint_value": cb.top_checkpoint_value,
            "bottom_checkpoint_value": cb.bottom_checkpoint_value,
            "last_started_command": cb.last_started_command,
            "last_completed_command": cb.last_completed_command,
            "n_commands": len(cb.commands),
        }
        for cb in cbs
    ]
    return pd.DataFrame(rows, columns=COMMAND_BUFFER_COLUMNS)


def command_table(command_buffer: CommandBuffer) -> pd.DataFrame:
    rows = [
        {
            "id": cmd.id,
            "checkpoint_value": cmd.checkpoint_value,
            "name": cmd.name,
            "state": cmd.state,
            "message": cmd.message,
        }
        for cmd in command_buffer.commands
    ]
    return pd.DataFrame(rows, columns=COMMAND_COLUMNS)


# ---------------------------------------------------------------------------
# Handle lookups
# ---------------------------------------------------------------------------

def find_queue(device: Device, handle: HandleLike) -> Queue:
    value = _handle_value(handle)
    for q in device.queues:
        if q.handle.value == value:
            return q
    raise KeyError(f"No queue with handle 0x{value:x} on device '{device.device_name}'.")


def find_command_buffer(dump: DumpFile, handle: HandleLike) -> CommandBuffer:
    """Search every device (either listing) for a command buffer by handle value."""
    value = _handle_value(handle)
    for dev in dump.devices:
        for cb in dev.command_buffers:
            if cb.handle.value == value:
                return cb
    raise KeyError(f"No command buffer with handle 0x{value:x}.")


@dataclass(frozen=True)
class SubmittedCommandBuffer:
    """One command buffer reference of a pending submission, with its context."""
    device_index: int
    queue: Queue
    submit: Submit
    submit_info: SubmitInfo
    command_buffer: str


def iter_submitted_command_buffers(dump: DumpFile) -> Iterator[SubmittedCommandBuffer]:
    """Walk devices -> queues -> submits -> submit infos in dump order."""
    for i, dev in enumerate(dump.devices):
        for q in dev.queues:
            for submit in q.submits:
                for info in submit.submit_infos:
                    for name in info.command_buffers:
                        yield SubmittedCommandBuffer(
                            device_index=i, queue=q, submit=submit, submit_info=info, command_buffer=name,
                        )


# ---------------------------------------------------------------------------
# Counter checks
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ProgressReport:
    """
    Result of checking one command buffer.

    errors: inconsistent counters; the dump should not be trusted for this buffer.
    warnings: suspicious but possible values (e.g. command outside [begin, end]).
    """
    ok: bool
    errors: List[str]
    warnings: List[str]

    def raise_if_errors(self) -> None:
        if self.errors:
            msg = "Progress check failed:\n" + "\n".join(f"- {e}" for e in self.errors)
            raise InvariantViolation(msg)


def check_progress_counters(command_buffer: CommandBuffer) -> ProgressReport:
    """
    Check the progress markers of a command buffer.

    Rules (values of 0 mean "not reached yet" for end_value):
      - begin_value <= end_value once the buffer has ended
      - bottom_checkpoint_value <= top_checkpoint_value
      - last_completed_command <= last_started_command
      - command checkpoint values never decrease in recording order
    """
    cb = command_buffer
    errors: List[str] = []
    warnings: List[str] = []

    if cb.end_value and cb.begin_value > cb.end_value:
        errors.append(f"beginValue {cb.begin_value} > endValue {cb.end_value}")
    if cb.bottom_checkpoint_value > cb.top_checkpoint_value:
        errors.append(
            f"bottomCheckpointValue {cb.bottom_checkpoint_value} > topCheckpointValue {cb.top_checkpoint_value}"
        )
    if cb.last_completed_command > cb.last_started_command:
        errors.append(
            f"lastCompletedCommand {cb.last_completed_command} > lastStartedCommand {cb.last_started_command}"
        )

    if cb.commands:
        cp = np.array([c.checkpoint_value for c in cb.commands], dtype=np.int64)
        back = np.where(np.diff(cp) < 0)[0]
        if back.size:
            idx = back[:10].tolist()
            errors.append(f"checkpointValue decreases after command index(es) {idx}")
        if cb.end_value:
            outside = np.where((cp < cb.begin_value) | (cp > cb.end_value))[0]
            if outside.size:
                warnings.append(
                    f"{outside.size} command(s) outside [{cb.begin_value}, {cb.end_value}], "
                    f"first at index {int(outside[0])}"
                )

    return ProgressReport(ok=(len(errors) == 0), errors=errors, warnings=warnings)

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional, Tuple


@dataclass(frozen=True)
class Handle:
    """
    Native object handle as printed in the dump: ``0x<hex> [<name>]``.

    value: 64-bit unsigned handle value
    name: debug name inside the brackets, verbatim (may be empty)
    """
    value: int = 0
    name: str = ""

    @property
    def is_null(self) -> bool:
        return self.value == 0

    def __str__(self) -> str:
        return f"0x{self.value:x} [{self.name}]"


@dataclass(frozen=True)
class Instance:
    """
    Instance section. The applicationInfo sub-map is flattened into this record.

    api_version is kept verbatim: the producer prints it in its own format.
    """
    handle: Handle = Handle()
    application: str = ""
    application_version: int = 0
    engine: str = ""
    engine_version: int = 0
    api_version: str = ""
    extensions: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SemaphoreInfo:
    handle: Handle = Handle()
    type: str = ""
    value: int = 0
    last_value: int = 0


@dataclass(frozen=True)
class SubmitInfo:
    """
    One VkSubmitInfo of a queue submission.

    command_buffers holds the command buffer references exactly as listed in the dump.
    """
    id: int = 0
    state: str = ""
    command_buffers: Tuple[str, ...] = ()
    signal_semaphores: Tuple[SemaphoreInfo, ...] = ()
    wait_semaphores: Tuple[SemaphoreInfo, ...] = ()


@dataclass(frozen=True)
class Submit:
    id: int = 0
    submit_infos: Tuple[SubmitInfo, ...] = ()


@dataclass(frozen=True)
class Queue:
    """Queue with the submissions that had not completed when the dump was written."""
    handle: Handle = Handle()
    queue_family_index: int = 0
    index: int = 0
    submits: Tuple[Submit, ...] = ()


@dataclass(frozen=True)
class Command:
    id: int = 0
    checkpoint_value: int = 0
    name: str = ""
    state: str = ""
    message: str = ""


@dataclass(frozen=True)
class CommandBuffer:
    """
    Command buffer with its recorded commands and execution progress markers.

    queue/fence/command_pool are value copies of handles that live elsewhere in
    the dump; resolving them is a lookup by handle value (see analysis.progress).
    The progress counters are stored as read; the reader does not check them.
    """
    state: str = ""
    handle: Handle = Handle()
    command_pool: Handle = Handle()
    queue: Handle = Handle()
    fence: Handle = Handle()
    submit_info_id: int = 0
    level: str = ""
    simultaneous_use: bool = False
    begin_value: int = 0
    end_value: int = 0
    top_checkpoint_value: int = 0
    bottom_checkpoint_value: int = 0
    last_started_command: int = 0
    last_completed_command: int = 0
    commands: Tuple[Command, ...] = ()


@dataclass(frozen=True)
class Device:
    """
    Device section.

    At most one of incomplete_command_buffers / all_command_buffers is non-empty:
    the producer lists either the command buffers still in flight at crash time,
    or every command buffer it tracks.
    """
    handle: Handle = Handle()
    device_name: str = ""
    api_version: str = ""
    driver_version: str = ""
    vendor_id: int = 0
    device_id: int = 0
    extensions: Tuple[str, ...] = ()
    queues: Tuple[Queue, ...] = ()
    incomplete_command_buffers: Tuple[CommandBuffer, ...] = ()
    all_command_buffers: Tuple[CommandBuffer, ...] = ()

    @property
    def command_buffers(self) -> Tuple[CommandBuffer, ...]:
        """Whichever command buffer listing the dump provided."""
        return self.incomplete_command_buffers or self.all_command_buffers


@dataclass(frozen=True)
class DumpFile:
    """
    Reconstructed content of one crash dump file.

    settings: read-only view; keys are unique.
    warnings: one line per key that was accepted but deliberately not decoded
    (e.g. SystemInfo), with its location in the document.
    """
    version: str = ""
    start_time: str = ""
    time_since_start: str = ""
    settings: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    instance: Instance = Instance()
    devices: Tuple[Device, ...] = ()
    source_path: Optional[Path] = None
    warnings: Tuple[str, ...] = ()

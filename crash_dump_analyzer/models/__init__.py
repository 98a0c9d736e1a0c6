from .dump import (
    Command,
    CommandBuffer,
    Device,
    DumpFile,
    Handle,
    Instance,
    Queue,
    SemaphoreInfo,
    Submit,
    SubmitInfo,
)
from .reader_config import DEFAULT_DUMP_FILE_NAME, DumpReaderConfig

__all__ = [
    "Command",
    "CommandBuffer",
    "Device",
    "DumpFile",
    "Handle",
    "Instance",
    "Queue",
    "SemaphoreInfo",
    "Submit",
    "SubmitInfo",
    "DEFAULT_DUMP_FILE_NAME",
    "DumpReaderConfig",
]

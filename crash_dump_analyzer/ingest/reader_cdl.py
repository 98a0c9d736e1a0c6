from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from crash_dump_analyzer.errors import DuplicateSettingsKey, InvariantViolation, ShapeMismatch, UnknownSchemaKey
from crash_dump_analyzer.ingest.discovery import DumpDiscovery
from crash_dump_analyzer.ingest.document import Node, load_document, parse_document
from crash_dump_analyzer.ingest.tokens import parse_handle, parse_version_string
from crash_dump_analyzer.models.dump import (
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
from crash_dump_analyzer.models.reader_config import DumpReaderConfig


@dataclass
class _ParseContext:
    record_ignored_keys: bool = True
    warnings: List[str] = field(default_factory=list)

    def ignored(self, entity: str, key: str, node: Node) -> None:
        if self.record_ignored_keys:
            self.warnings.append(f"Ignored {entity} key '{key}' at {node.path}")


_Read = Callable[[Node, _ParseContext], Any]


@dataclass(frozen=True)
class _Rule:
    """
    What to do with one key of an entity map.

    mode:
      - "set":    attr = read(value)
      - "append": repeated key, each occurrence appended to attr (in document order)
      - "merge":  read(value) returns a dict of fields merged into the entity
      - "ignore": known key, deliberately not decoded
    """
    attr: Optional[str] = None
    read: Optional[_Read] = None
    mode: str = "set"


_IGNORE = _Rule(mode="ignore")

_Schema = Mapping[str, _Rule]


def _consume(node: Node, entity: str, schema: _Schema, ctx: _ParseContext) -> Dict[str, Any]:
    """
    Walk one entity map and return its fields, ready for the entity constructor.

    Fields are accumulated locally; nothing is built until the whole map has been read.
    """
    if not node.exists:
        raise ShapeMismatch(f"{entity} map", "nothing", path=node.path)
    node.require_map()

    fields: Dict[str, Any] = {}
    appended: Dict[str, List[Any]] = {}
    for key, child in node.items():
        rule = schema.get(key)
        if rule is None:
            raise UnknownSchemaKey(entity, key, path=node.path)
        if rule.mode == "ignore":
            ctx.ignored(entity, key, child)
        elif rule.mode == "append":
            items = appended.setdefault(rule.attr, [])
            items.append(rule.read(child.at(f"{child.path}[{len(items)}]"), ctx))
        elif rule.mode == "merge":
            fields.update(rule.read(child, ctx))
        else:
            fields[rule.attr] = rule.read(child, ctx)

    for attr, items in appended.items():
        fields[attr] = tuple(items)
    return fields


# -------------------------
# Scalars
# -------------------------
def _str(node: Node, ctx: _ParseContext) -> str:
    return node.as_str()


def _u32(node: Node, ctx: _ParseContext) -> int:
    return node.as_uint32()


def _u64(node: Node, ctx: _ParseContext) -> int:
    return node.as_uint64()


def _bool(node: Node, ctx: _ParseContext) -> bool:
    return node.as_bool()


def _handle(node: Node, ctx: _ParseContext) -> Handle:
    return parse_handle(node.as_str(), path=node.path)


def _version(node: Node, ctx: _ParseContext) -> str:
    return parse_version_string(node.as_str())


def _str_list(node: Node, ctx: _ParseContext) -> Tuple[str, ...]:
    return tuple(elem.as_str() for elem in node.require_sequence())


def _sequence_of(read: _Read) -> _Read:
    def _read_all(node: Node, ctx: _ParseContext) -> Tuple[Any, ...]:
        return tuple(read(elem, ctx) for elem in node.require_sequence())
    return _read_all


# -------------------------
# Entities (leaf first)
# -------------------------
def _read_settings(node: Node, ctx: _ParseContext) -> Mapping[str, str]:
    # Free-form producer data: keys are not part of the schema but must be unique.
    node.require_map()
    settings: Dict[str, str] = {}
    for key, value in node.items():
        if key in settings:
            raise DuplicateSettingsKey(key, path=node.path)
        settings[key] = value.as_str()
    return MappingProxyType(settings)


_APP_INFO_SCHEMA: _Schema = {
    "application": _Rule("application", _str),
    "applicationVersion": _Rule("application_version", _u32),
    "engine": _Rule("engine", _str),
    "engineVersion": _Rule("engine_version", _u32),
    "apiVersion": _Rule("api_version", _version),
}


def _read_app_info(node: Node, ctx: _ParseContext) -> Dict[str, Any]:
    return _consume(node, "applicationInfo", _APP_INFO_SCHEMA, ctx)


_INSTANCE_SCHEMA: _Schema = {
    "handle": _Rule("handle", _handle),
    "applicationInfo": _Rule(read=_read_app_info, mode="merge"),
    "extensions": _Rule("extensions", _str_list),
}


def _read_instance(node: Node, ctx: _ParseContext) -> Instance:
    return Instance(**_consume(node, "Instance", _INSTANCE_SCHEMA, ctx))


_SEMAPHORE_INFO_SCHEMA: _Schema = {
    "handle": _Rule("handle", _handle),
    "type": _Rule("type", _str),
    "value": _Rule("value", _u64),
    "lastValue": _Rule("last_value", _u64),
}


def _read_semaphore_info(node: Node, ctx: _ParseContext) -> SemaphoreInfo:
    return SemaphoreInfo(**_consume(node, "SemaphoreInfo", _SEMAPHORE_INFO_SCHEMA, ctx))


_SUBMIT_INFO_SCHEMA: _Schema = {
    "id": _Rule("id", _u64),
    "state": _Rule("state", _str),
    "CommandBuffers": _Rule("command_buffers", _str_list),
    "SignalSemaphores": _Rule("signal_semaphores", _sequence_of(_read_semaphore_info)),
    "WaitSemaphores": _Rule("wait_semaphores", _sequence_of(_read_semaphore_info)),
}


def _read_submit_info(node: Node, ctx: _ParseContext) -> SubmitInfo:
    return SubmitInfo(**_consume(node, "SubmitInfo", _SUBMIT_INFO_SCHEMA, ctx))


_SUBMIT_SCHEMA: _Schema = {
    "id": _Rule("id", _u32),
    "SubmitInfos": _Rule("submit_infos", _sequence_of(_read_submit_info)),
}


def _read_submit(node: Node, ctx: _ParseContext) -> Submit:
    return Submit(**_consume(node, "Submit", _SUBMIT_SCHEMA, ctx))


_QUEUE_SCHEMA: _Schema = {
    "handle": _Rule("handle", _handle),
    "queueFamilyIndex": _Rule("queue_family_index", _u32),
    "index": _Rule("index", _u32),
    "flags": _IGNORE,
    "IncompleteSubmits": _Rule("submits", _sequence_of(_read_submit)),
}


def _read_queue(node: Node, ctx: _ParseContext) -> Queue:
    return Queue(**_consume(node, "Queue", _QUEUE_SCHEMA, ctx))


_COMMAND_SCHEMA: _Schema = {
    "id": _Rule("id", _u32),
    "checkpointValue": _Rule("checkpoint_value", _u32),
    "name": _Rule("name", _str),
    "state": _Rule("state", _str),
    "message": _Rule("message", _str),
    "parameters": _IGNORE,
    "internalState": _IGNORE,
}


def _read_command(node: Node, ctx: _ParseContext) -> Command:
    return Command(**_consume(node, "Command", _COMMAND_SCHEMA, ctx))


_COMMAND_BUFFER_SCHEMA: _Schema = {
    "state": _Rule("state", _str),
    "handle": _Rule("handle", _handle),
    "commandPool": _Rule("command_pool", _handle),
    "queue": _Rule("queue", _handle),
    "fence": _Rule("fence", _handle),
    "submitInfoId": _Rule("submit_info_id", _u64),
    "level": _Rule("level", _str),
    "simultaneousUse": _Rule("simultaneous_use", _bool),
    "beginValue": _Rule("begin_value", _u32),
    "endValue": _Rule("end_value", _u32),
    "topCheckpointValue": _Rule("top_checkpoint_value", _u32),
    "bottomCheckpointValue": _Rule("bottom_checkpoint_value", _u32),
    "lastStartedCommand": _Rule("last_started_command", _u32),
    "lastCompletedCommand": _Rule("last_completed_command", _u32),
    "Commands": _Rule("commands", _sequence_of(_read_command)),
}


def _read_command_buffer(node: Node, ctx: _ParseContext) -> CommandBuffer:
    return CommandBuffer(**_consume(node, "CommandBuffer", _COMMAND_BUFFER_SCHEMA, ctx))


_DEVICE_SCHEMA: _Schema = {
    "handle": _Rule("handle", _handle),
    "deviceName": _Rule("device_name", _str),
    "apiVersion": _Rule("api_version", _version),
    "driverVersion": _Rule("driver_version", _version),
    "vendorID": _Rule("vendor_id", _u32),
    "deviceID": _Rule("device_id", _u32),
    "Queues": _Rule("queues", _sequence_of(_read_queue)),
    "IncompleteCommandBuffers": _Rule("incomplete_command_buffers", _sequence_of(_read_command_buffer)),
    "AllCommandBuffers": _Rule("all_command_buffers", _sequence_of(_read_command_buffer)),
    "extensions": _Rule("extensions", _str_list),
}


def check_device_invariants(device: Device, *, path: str = "") -> None:
    """
    The dump lists either the in-flight command buffers (mid-crash capture) or all
    of them (clean checkpoint), never both.
    """
    if device.incomplete_command_buffers and device.all_command_buffers:
        raise InvariantViolation(
            "Device reports both IncompleteCommandBuffers "
            f"({len(device.incomplete_command_buffers)}) and AllCommandBuffers "
            f"({len(device.all_command_buffers)})",
            path=path,
        )


def _read_device(node: Node, ctx: _ParseContext) -> Device:
    device = Device(**_consume(node, "Device", _DEVICE_SCHEMA, ctx))
    check_device_invariants(device, path=node.path)
    return device


_DUMP_SCHEMA: _Schema = {
    "version": _Rule("version", _str),
    "startTime": _Rule("start_time", _str),
    "timeSinceStart": _Rule("time_since_start", _str),
    "settings": _Rule("settings", _read_settings),
    "SystemInfo": _IGNORE,
    "Instance": _Rule("instance", _read_instance),
    "Device": _Rule("devices", _read_device, mode="append"),
}


class CdlDumpReader:
    """
    STRICT reader for crash diagnostic dumps (cdl_dump.yaml).

    Contract:
      - Every map key must be known for its entity; an unknown key is fatal
        (the producer's format drifted and the dump cannot be trusted).
      - A few known keys are accepted but not decoded: SystemInfo (top level),
        flags (Queue), parameters and internalState (Command). They are reported
        in DumpFile.warnings.
      - Scalars must convert to the field type; handles must match '0x<hex> [<name>]'.
      - settings keys must be unique.
      - A Device may not list both incomplete and all command buffers.
      - No partial result: the first violation raises a DumpFormatError subclass.
    """

    def __init__(self, config: Optional[DumpReaderConfig] = None):
        self.config = config or DumpReaderConfig()

    def read(self, file_path: str | Path) -> DumpFile:
        path = Path(file_path).expanduser().resolve()
        if not path.exists():
            raise FileNotFoundError(str(path))
        root = load_document(path, encoding=self.config.encoding)
        return self._build(root, source_path=path)

    def read_text(self, text: str, *, source: str = "<string>") -> DumpFile:
        return self._build(parse_document(text, source=source), source_path=None)

    def find_and_read(self, search_dir: str | Path) -> DumpFile:
        path = DumpDiscovery(dump_file_name=self.config.dump_file_name).locate(search_dir)
        return self.read(path)

    def _build(self, root: Node, *, source_path: Optional[Path]) -> DumpFile:
        ctx = _ParseContext(record_ignored_keys=self.config.record_ignored_keys)
        fields = _consume(root, "top level", _DUMP_SCHEMA, ctx)
        return DumpFile(**fields, source_path=source_path, warnings=tuple(ctx.warnings))


def load_dump(search_dir: str | Path, config: Optional[DumpReaderConfig] = None) -> DumpFile:
    """Locate the unique dump file under search_dir and read it."""
    return CdlDumpReader(config).find_and_read(search_dir)

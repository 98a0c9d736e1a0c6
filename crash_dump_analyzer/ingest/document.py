from __future__ import annotations

from pathlib import Path
from typing import Iterator, Optional, Tuple
import re

import yaml
from yaml.nodes import MappingNode, ScalarNode, SequenceNode

from crash_dump_analyzer.errors import DumpFormatError, ScalarCoercionFailure, ShapeMismatch


_BOOL_TRUE = {"true", "yes", "on", "y"}
_BOOL_FALSE = {"false", "no", "off", "n"}

_UINT_RE = re.compile(r"^\+?(?:0[xX](?P<hex>[0-9a-fA-F]+)|(?P<dec>[0-9]+))$")

_U32_MAX = (1 << 32) - 1
_U64_MAX = (1 << 64) - 1


def _child_path(parent: str, key: str) -> str:
    return f"{parent}.{key}" if parent else key


class Node:
    """
    Read-only view of one node of a composed YAML document.

    Works on the PyYAML representation graph (yaml.compose) rather than on
    constructed Python objects, so that:
      - map entries are iterated in document order,
      - repeated keys are kept (the dump repeats the top-level 'Device' key),
      - scalars stay raw strings until a typed accessor converts them.

    path is a dotted location used in error messages, e.g. 'Device[0].Queues[1]'.
    """

    __slots__ = ("_raw", "path")

    def __init__(self, raw: Optional[yaml.Node], path: str = "") -> None:
        self._raw = raw
        self.path = path

    def __repr__(self) -> str:
        return f"Node({self.kind}, path={self.path!r})"

    # -------------------------
    # Shape
    # -------------------------
    @property
    def exists(self) -> bool:
        return self._raw is not None

    @property
    def is_map(self) -> bool:
        return isinstance(self._raw, MappingNode)

    @property
    def is_sequence(self) -> bool:
        return isinstance(self._raw, SequenceNode)

    @property
    def is_scalar(self) -> bool:
        return isinstance(self._raw, ScalarNode)

    @property
    def kind(self) -> str:
        if self._raw is None:
            return "nothing"
        if self.is_map:
            return "map"
        if self.is_sequence:
            return "sequence"
        return "scalar"

    def at(self, path: str) -> Node:
        """Same node, reported under another path."""
        return Node(self._raw, path)

    def require_map(self) -> Node:
        if not self.is_map:
            raise ShapeMismatch("map", self.kind, path=self.path)
        return self

    def require_sequence(self) -> Node:
        if not self.is_sequence:
            raise ShapeMismatch("sequence", self.kind, path=self.path)
        return self

    # -------------------------
    # Iteration
    # -------------------------
    def items(self) -> Iterator[Tuple[str, Node]]:
        """Yield (key, value) pairs of a map in document order, duplicates included."""
        self.require_map()
        for key_node, value_node in self._raw.value:
            if not isinstance(key_node, ScalarNode):
                raise ShapeMismatch("scalar key", Node(key_node).kind, path=self.path)
            key = str(key_node.value)
            yield key, Node(value_node, _child_path(self.path, key))

    def __iter__(self) -> Iterator[Node]:
        self.require_sequence()
        for i, elem in enumerate(self._raw.value):
            yield Node(elem, f"{self.path}[{i}]")

    # -------------------------
    # Scalar coercion
    # -------------------------
    def _scalar(self, target: str) -> str:
        if not self.is_scalar:
            raise ShapeMismatch(f"scalar ({target})", self.kind, path=self.path)
        return str(self._raw.value)

    def as_str(self) -> str:
        return self._scalar("string")

    def _as_uint(self, bits: int, limit: int) -> int:
        target = f"uint{bits}"
        raw = self._scalar(target)
        m = _UINT_RE.match(raw.strip())
        if not m:
            raise ScalarCoercionFailure(raw, target, path=self.path)
        value = int(m.group("hex"), 16) if m.group("hex") is not None else int(m.group("dec"), 10)
        if value > limit:
            raise ScalarCoercionFailure(raw, target, path=self.path)
        return value

    def as_uint32(self) -> int:
        return self._as_uint(32, _U32_MAX)

    def as_uint64(self) -> int:
        return self._as_uint(64, _U64_MAX)

    def as_bool(self) -> bool:
        raw = self._scalar("bool")
        vv = raw.strip().lower()
        if vv in _BOOL_TRUE:
            return True
        if vv in _BOOL_FALSE:
            return False
        raise ScalarCoercionFailure(raw, "bool", path=self.path)


def parse_document(text: str, *, source: str = "<string>") -> Node:
    """
    Compose a single YAML document into a root Node.

    An empty document yields a Node whose ``exists`` is False.
    YAML syntax errors (and multi-document streams) raise DumpFormatError.
    """
    try:
        raw = yaml.compose(text, Loader=yaml.SafeLoader)
    except yaml.YAMLError as e:
        raise DumpFormatError(f"Invalid YAML in {source}: {e}") from e
    return Node(raw)


def load_document(path: str | Path, *, encoding: str = "utf-8") -> Node:
    fp = Path(path)
    try:
        text = fp.read_text(encoding=encoding)
    except UnicodeDecodeError as e:
        raise DumpFormatError(f"Cannot decode {fp} as {encoding}: {e}") from e
    return parse_document(text, source=str(fp))

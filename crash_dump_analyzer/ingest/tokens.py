"""Custom scalar grammars used inside the dump.

Handles are printed as an address literal followed by the object's debug name
in brackets, e.g. ``0x7f3a2c10 [VkInstance]``. Version strings (apiVersion,
driverVersion) use a producer-specific format and are kept verbatim.
"""

from __future__ import annotations

import re

from crash_dump_analyzer.errors import MalformedHandleToken
from crash_dump_analyzer.models.dump import Handle


_HANDLE_RE = re.compile(r"(0x[0-9a-fA-F]+) *\[(.*)\]")

_U64_MAX = (1 << 64) - 1


def parse_handle(token: str, *, path: str = "") -> Handle:
    """
    Parse a handle token into a Handle.

    The whole token must match; the name may be empty ('0x0 []').

    Examples
    --------
    >>> parse_handle("0x7f3a2c10 [VkInstance]")
    Handle(value=2134518800, name='VkInstance')
    """
    m = _HANDLE_RE.fullmatch(token)
    if not m:
        raise MalformedHandleToken(token, path=path)
    value = int(m.group(1), 16)
    if value > _U64_MAX:
        raise MalformedHandleToken(token, path=path)
    return Handle(value=value, name=m.group(2))


def parse_version_string(token: str) -> str:
    # Decoding is left to consumers; the reader only checks that it is a scalar.
    return token

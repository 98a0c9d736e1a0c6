"""Exception types raised while locating and reading a crash dump.

Every format error derives from :class:`DumpFormatError` (a ``ValueError``) so
callers can stop on any schema violation with a single ``except`` clause.
Locator errors keep the builtin types the rest of the ingest layer raises
(``FileNotFoundError`` / ``ValueError``).
"""

from __future__ import annotations

from pathlib import Path


def _at(message: str, path: str) -> str:
    return f"{message} (at {path})" if path else message


class DumpFormatError(ValueError):
    """The dump document does not match the expected schema."""

    def __init__(self, message: str, *, path: str = "") -> None:
        super().__init__(_at(message, path))
        self.path = path


class UnknownSchemaKey(DumpFormatError):
    """A map key that is not part of the schema of its entity."""

    def __init__(self, entity: str, key: str, *, path: str = "") -> None:
        super().__init__(f"Unknown {entity} key: {key}", path=path)
        self.entity = entity
        self.key = key


class MalformedHandleToken(DumpFormatError):
    def __init__(self, value: str, *, path: str = "") -> None:
        super().__init__(f"Bad handle value: {value!r}", path=path)
        self.value = value


class ShapeMismatch(DumpFormatError):
    """Expected a map/sequence/scalar node and found something else."""

    def __init__(self, expected: str, found: str, *, path: str = "") -> None:
        super().__init__(f"Expected {expected} node, found {found}", path=path)
        self.expected = expected
        self.found = found


class ScalarCoercionFailure(DumpFormatError):
    def __init__(self, value: str, target: str, *, path: str = "") -> None:
        super().__init__(f"Cannot convert {value!r} to {target}", path=path)
        self.value = value
        self.target = target


class DuplicateSettingsKey(DumpFormatError):
    def __init__(self, key: str, *, path: str = "") -> None:
        super().__init__(f"Duplicate settings key: {key}", path=path)
        self.key = key


class InvariantViolation(DumpFormatError):
    """A structural constraint across sibling fields does not hold."""


class ArtifactNotFound(FileNotFoundError):
    pass


class AmbiguousArtifact(ValueError):
    """More than one dump file was found under the search directory."""

    def __init__(self, file_name: str, first: Path, second: Path) -> None:
        super().__init__(f"More than one '{file_name}' found: '{first}' and '{second}'.")
        self.first = first
        self.second = second

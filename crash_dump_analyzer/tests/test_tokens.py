import pytest

from crash_dump_analyzer.errors import MalformedHandleToken
from crash_dump_analyzer.ingest.tokens import parse_handle, parse_version_string
from crash_dump_analyzer.models.dump import Handle


def test_handle_basic() -> None:
    h = parse_handle("0x7f3a2c10 [VkInstance]")
    assert h == Handle(value=0x7F3A2C10, name="VkInstance")
    assert str(h) == "0x7f3a2c10 [VkInstance]"


@pytest.mark.parametrize(
    "token, value, name",
    [
        ("0x0 []", 0, ""),
        ("0xABCdef[named]", 0xABCDEF, "named"),
        ("0x1   [with spaces inside]", 1, "with spaces inside"),
        ("0xffffffffffffffff [max]", 2**64 - 1, "max"),
        ("0x10 [a [nested] name]", 0x10, "a [nested] name"),
    ],
)
def test_handle_variants(token: str, value: int, name: str) -> None:
    h = parse_handle(token)
    assert (h.value, h.name) == (value, name)


@pytest.mark.parametrize(
    "token",
    [
        "not_a_handle",
        "",
        "0x [x]",
        "1234 [x]",
        "0x12",
        "0x12 [x] trailing",
        " 0x12 [x]",
        "0xzz [x]",
        "0x10000000000000000 [too big]",
    ],
)
def test_handle_rejects(token: str) -> None:
    with pytest.raises(MalformedHandleToken) as exc:
        parse_handle(token, path="Instance.handle")
    assert exc.value.value == token
    assert "Instance.handle" in str(exc.value)


def test_null_handle() -> None:
    assert parse_handle("0x0 []").is_null
    assert not parse_handle("0x1 []").is_null


def test_version_string_is_verbatim() -> None:
    assert parse_version_string("1.3.275 (0x403113)") == "1.3.275 (0x403113)"

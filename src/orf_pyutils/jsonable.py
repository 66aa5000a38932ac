from abc import ABC, abstractmethod
from typing import Any, Self

import orjson

# JSON-compatible types (primitives and recursive containers)
JsonSerializable = (
    int | float | bool | str | None | list["JsonSerializable"] | dict[str, "JsonSerializable"]
)


class Jsonable(ABC):
    """
    Records that round-trip through plain JSON objects with stable field names
    """

    @abstractmethod
    def to_json(self) -> dict[str, Any]: ...

    @classmethod
    @abstractmethod
    def from_json(cls, json: dict[str, Any]) -> Self: ...


def dump_json(value: Jsonable | JsonSerializable, *, indent: bool = False) -> bytes:
    """Serialize a record or plain JSON value with orjson.

    Args:
        value: Record implementing ``Jsonable`` or an already-plain value
        indent: Pretty-print with two-space indentation

    Returns:
        UTF-8 encoded JSON document
    """
    payload = value.to_json() if isinstance(value, Jsonable) else value
    option = orjson.OPT_INDENT_2 if indent else 0
    return orjson.dumps(payload, option=option)


def load_json(data: bytes | str) -> JsonSerializable:
    """Parse a JSON document with orjson.

    Raises:
        orjson.JSONDecodeError: If the document is not valid JSON
    """
    return orjson.loads(data)  # type: ignore[no-any-return]

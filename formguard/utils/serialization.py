"""JSON serialization helpers backed by orjson."""

from typing import Any

import orjson


def dumps(obj: Any, pretty: bool = False) -> str:
    """
    Serialize object to a JSON string.

    Args:
        obj: Object to serialize (dicts, lists, enums, datetimes)
        pretty: Indent output with two spaces

    Returns:
        JSON string
    """
    option = orjson.OPT_INDENT_2 if pretty else 0
    return orjson.dumps(obj, option=option).decode("utf-8")


def loads(s: str | bytes) -> Any:
    """Deserialize a JSON string."""
    return orjson.loads(s)

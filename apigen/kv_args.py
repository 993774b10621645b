"""Command-line ``key:value`` parsing and field type tags.

``parse_kv_args`` turns instance values given on the command line into typed
Python values; ``parse_field_defs`` turns ``name:type`` declarations into a
schema field map.  The closed set of type tags lives in :class:`FieldType`.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from enum import Enum
from typing import Any

from apigen.errors import InvalidArgumentError


class FieldType(str, Enum):
    """Type tag stored in the schema document for every field."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"


DEFAULT_FIELD_DEFS: tuple[str, ...] = ("id:string", "name:string")

_PREFIXED_LITERALS = ("0x", "0o", "0b")
_MAX_SAFE_INTEGER = 2**53 - 1


def classify_value(value: Any) -> FieldType:
    """Return the type tag for a literal value.

    ``bool`` is checked before numbers since it subclasses ``int``.
    Anything that is neither boolean nor numeric is a string.
    """
    if isinstance(value, bool):
        return FieldType.BOOLEAN
    if isinstance(value, (int, float)):
        return FieldType.NUMBER
    return FieldType.STRING


def default_for_type(field_type: FieldType | str) -> Any:
    """Empty value used for a schema field the caller did not supply."""
    tag = FieldType(field_type)
    if tag is FieldType.BOOLEAN:
        return False
    if tag is FieldType.NUMBER:
        return None
    return ""


def parse_kv_args(pairs: Iterable[str] | None = None) -> dict[str, Any]:
    """Parse ``key:value`` tokens into a mapping of typed values.

    Splits on the first colon only, strips one layer of matching quotes and
    infers booleans and finite numbers.  Tokens without a colon are skipped;
    later duplicates overwrite earlier ones.

    Example::

        parse_kv_args(['name:"Worcestershire"', "rating:5", "active:true"])
        -> {"name": "Worcestershire", "rating": 5, "active": True}
    """
    out: dict[str, Any] = {}
    for raw in pairs or ():
        key, sep, value = raw.partition(":")
        if not sep:
            continue
        out[key.strip()] = _coerce(_strip_quotes(value.strip()))
    return out


def parse_field_defs(defs: Iterable[str] | None) -> dict[str, str]:
    """Parse ``name:type`` declarations into a ``{name: type}`` field map.

    A declaration without a type defaults to ``string``.  The ``id`` field is
    always present and always a string.

    Raises:
        InvalidArgumentError: On an empty field name or an unknown type tag.
    """
    fields: dict[str, str] = {"id": FieldType.STRING.value}
    for raw in defs or DEFAULT_FIELD_DEFS:
        name, _, tag = raw.partition(":")
        name = name.strip()
        tag = tag.strip().lower() or FieldType.STRING.value
        if not name:
            raise InvalidArgumentError(f"Field declaration without a name: {raw!r}")
        try:
            fields[name] = FieldType(tag).value
        except ValueError:
            allowed = ", ".join(t.value for t in FieldType)
            raise InvalidArgumentError(
                f"Unknown type {tag!r} for field {name!r} (expected one of: {allowed})"
            ) from None
    fields["id"] = FieldType.STRING.value
    return fields


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def _coerce(value: str) -> Any:
    if value == "true":
        return True
    if value == "false":
        return False
    number = _parse_number(value)
    if number is not None:
        return number
    return value


def _parse_number(value: str) -> int | float | None:
    """Return *value* as a finite number, or ``None``.

    Underscore digit separators are accepted by ``int()``/``float()`` but are
    not numeric literals on the command line, so they stay strings.
    ``0x``/``0o``/``0b`` literals are integers, and integral floats such as
    ``5.0`` or ``1e3`` collapse to ``int`` within the exactly representable
    range.
    """
    if not value or "_" in value:
        return None
    try:
        return int(value)
    except ValueError:
        pass
    if value[:2].lower() in _PREFIXED_LITERALS:
        try:
            return int(value, 0)
        except ValueError:
            return None
    try:
        number = float(value)
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    if number.is_integer() and abs(number) <= _MAX_SAFE_INTEGER:
        return int(number)
    return number

"""Permissive conversion of raw values to the scalar kinds a schema may declare.

Coercion never fails: every function returns a value of its target kind for any
input, following loose-typing cast rules (a numeric string becomes a number, an
unparsable string becomes zero, ``None`` becomes the empty value of the kind).

The strict type checkers used for required fields live here as well, so that the
set of scalar kind names is defined in one place.
"""

import math
import re
from collections.abc import Mapping
from typing import Any, Callable, TypeAlias

import schema

STRING = "string"
INT = "int"
FLOAT = "float"
BOOL = "bool"
ARRAY = "array"

SCALAR_TYPES: tuple[str, ...] = (STRING, INT, FLOAT, BOOL, ARRAY)

ArrayType: TypeAlias = list | dict

# Leading numeric prefix of a string, as accepted by loose numeric casts
_numeric_prefix_re = re.compile(
    r"^[ \t\n\r\v\f]*([-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?)"
)


def is_scalar_type(type_name: str) -> bool:
    """Check whether a base type name denotes one of the scalar kinds."""
    return type_name in SCALAR_TYPES


def _parse_number(value: str) -> float | int:
    match = _numeric_prefix_re.match(value)
    if not match:
        return 0
    text = match.group(1)
    try:
        return int(text)
    except ValueError:
        return float(text)


def to_string(value: Any) -> str:
    if value is None or value is False:
        return ""
    if value is True:
        return "1"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def to_int(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return 0
        return int(value)
    if isinstance(value, str):
        return to_int(_parse_number(value))
    if isinstance(value, (list, tuple, dict)):
        return 1 if value else 0
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return 0


def to_float(value: Any) -> float:
    if value is None:
        return 0.0
    if isinstance(value, (bool, int)):
        return float(value)
    if isinstance(value, float):
        return value
    if isinstance(value, str):
        return float(_parse_number(value))
    if isinstance(value, (list, tuple, dict)):
        return 1.0 if value else 0.0
    try:
        return float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0


def to_bool(value: Any) -> bool:
    # The string "0" is the one falsy string besides the empty string
    if isinstance(value, str) and value == "0":
        return False
    return bool(value)


def to_array(value: Any) -> ArrayType:
    """Wrap a value as a sequence unless it already is one.

    Mappings are kept as (copied) mappings, since a JSON object is the other
    array-like container in decoded data.
    """
    if value is None:
        return []
    if isinstance(value, list):
        return list(value)
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, tuple):
        return list(value)
    return [value]


COERCERS: dict[str, Callable[[Any], Any]] = {
    STRING: to_string,
    INT: to_int,
    FLOAT: to_float,
    BOOL: to_bool,
    ARRAY: to_array,
}

# Strict checks on raw values; bool is excluded from int, since it subclasses int
TYPE_CHECKERS: dict[str, schema.Schema] = {
    STRING: schema.Schema(str),
    INT: schema.Schema(schema.And(int, lambda v: not isinstance(v, bool))),
    FLOAT: schema.Schema(float),
    BOOL: schema.Schema(bool),
    ARRAY: schema.Schema(schema.Or(list, dict)),
}


def coerce(type_name: str, value: Any) -> Any:
    """Coerce a value to the named scalar kind.

    Raises:
        KeyError: if the name is not a scalar kind
    """
    return COERCERS[type_name](value)


def check_type(type_name: str, value: Any) -> bool:
    """Strictly check that a raw value already has the named scalar kind.

    Raises:
        KeyError: if the name is not a scalar kind
    """
    return TYPE_CHECKERS[type_name].is_valid(value)

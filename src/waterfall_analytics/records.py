from __future__ import annotations

import math
from collections.abc import Mapping
from numbers import Real
from typing import Any, Union

Record = Union[Mapping[str, Any], Real]

DEFAULT_KEY_FIELD = "label"
DEFAULT_VALUE_FIELD = "value"
STACKS_FIELD = "stacks"
FALLBACK_KEY_FIELD = "name"


def is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def as_float(value: Any) -> float:
    """Coerce a raw field value to float, returning NaN for anything non-numeric."""
    if isinstance(value, bool) or value is None:
        return math.nan
    if is_number(value):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return math.nan
    return math.nan


def _stack_total(stacks: Any) -> float | None:
    if not isinstance(stacks, (list, tuple)):
        return None
    total = 0.0
    for stack in stacks:
        if isinstance(stack, Mapping):
            raw = stack.get("value")
            total += as_float(raw) if raw is not None else 0.0
    return total


def has_value(record: Any, value_field: str = DEFAULT_VALUE_FIELD) -> bool:
    if is_number(record):
        return True
    if not isinstance(record, Mapping):
        return False
    if value_field in record:
        return True
    return _stack_total(record.get(STACKS_FIELD)) is not None


def value_of(record: Any, value_field: str = DEFAULT_VALUE_FIELD) -> float:
    """Numeric magnitude of a record.

    Bare numbers are their own value. Mappings read ``value_field``, then fall back to the
    sum of a ``stacks`` list, then to ``0.0``.
    """
    if is_number(record):
        return float(record)
    if not isinstance(record, Mapping):
        return math.nan
    if value_field in record:
        return as_float(record[value_field])
    stacked = _stack_total(record.get(STACKS_FIELD))
    if stacked is not None:
        return stacked
    return 0.0


def has_key(record: Any, key_field: str = DEFAULT_KEY_FIELD) -> bool:
    return key_of(record, key_field) is not None


def key_of(record: Any, key_field: str = DEFAULT_KEY_FIELD) -> Any:
    if not isinstance(record, Mapping):
        return None
    if key_field in record:
        return record[key_field]
    if key_field == DEFAULT_KEY_FIELD:
        return record.get(FALLBACK_KEY_FIELD)
    return None


def copy_record(record: Any, value_field: str = DEFAULT_VALUE_FIELD) -> dict[str, Any]:
    """Return a new dict for ``record``; bare numbers become ``{value_field: number}``."""
    if isinstance(record, Mapping):
        return dict(record)
    return {value_field: value_of(record, value_field)}


def passthrough(record: Any) -> Any:
    """Copy mappings, leave scalars untouched."""
    if isinstance(record, Mapping):
        return dict(record)
    return record


def field_value(record: Any, field: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(field)
    return None

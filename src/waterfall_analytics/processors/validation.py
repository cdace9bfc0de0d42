from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from waterfall_analytics.records import (
    DEFAULT_KEY_FIELD,
    DEFAULT_VALUE_FIELD,
    has_key,
    has_value,
    is_number,
    key_of,
    value_of,
)


@dataclass(slots=True, frozen=True)
class ValidationResult:
    is_valid: bool
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"is_valid": self.is_valid, "errors": list(self.errors)}


def _raw_value(record: Mapping[str, Any], value_field: str) -> Any:
    if value_field in record:
        return record[value_field]
    return value_of(record, value_field)


def validate_sequential_data(
    data: Sequence[Any],
    *,
    key_field: str = DEFAULT_KEY_FIELD,
    value_field: str = DEFAULT_VALUE_FIELD,
) -> ValidationResult:
    """Collect structural problems in ``data`` without raising."""
    errors: list[str] = []
    seen: set[Any] = set()
    reported: set[Any] = set()

    for idx, record in enumerate(data):
        if not isinstance(record, Mapping):
            errors.append(f"record {idx}: expected a mapping, got {type(record).__name__}")
            continue

        if not has_key(record, key_field):
            errors.append(f"record {idx}: missing key field '{key_field}'")
        if not has_value(record, value_field):
            errors.append(f"record {idx}: missing value field '{value_field}'")
        else:
            raw = _raw_value(record, value_field)
            if not is_number(raw) or not math.isfinite(float(raw)):
                errors.append(
                    f"record {idx}: value field '{value_field}' is not a finite number: {raw!r}"
                )

        key = key_of(record, key_field)
        if key is None:
            continue
        try:
            duplicate = key in seen
        except TypeError:
            errors.append(f"record {idx}: key field '{key_field}' is not hashable")
            continue
        if duplicate and key not in reported:
            errors.append(f"duplicate key: {key}")
            reported.add(key)
        seen.add(key)

    return ValidationResult(is_valid=not errors, errors=errors)

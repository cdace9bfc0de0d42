from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from waterfall_analytics.errors import IndexOutOfRangeError
from waterfall_analytics.records import (
    DEFAULT_KEY_FIELD,
    DEFAULT_VALUE_FIELD,
    Record,
    key_of,
    passthrough,
    value_of,
)


@dataclass(slots=True, frozen=True)
class DataPair:
    key: Any
    value: Any

    def to_dict(self) -> dict[str, Any]:
        return {"key": self.key, "value": self.value}


def permute_by_indices(data: Sequence[Record], indices: Sequence[int]) -> list[Record]:
    """Select records by position; repeats and omissions are allowed."""
    size = len(data)
    for index in indices:
        if index < 0 or index >= size:
            raise IndexOutOfRangeError(index, size)
    return [passthrough(data[index]) for index in indices]


def create_data_pairs(
    data: Sequence[Record],
    accessor: Callable[[Record], Any] | None = None,
    *,
    key_field: str = DEFAULT_KEY_FIELD,
    value_field: str = DEFAULT_VALUE_FIELD,
) -> list[DataPair]:
    if accessor is None:
        return [DataPair(key_of(record, key_field), value_of(record, value_field)) for record in data]
    return [DataPair(key_of(record, key_field), accessor(record)) for record in data]

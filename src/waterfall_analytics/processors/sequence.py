from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Literal

import numpy as np

from waterfall_analytics.config import DEFAULT_NEUTRAL_EPSILON
from waterfall_analytics.records import (
    DEFAULT_KEY_FIELD,
    DEFAULT_VALUE_FIELD,
    Record,
    key_of,
    value_of,
)

ChangeDirection = Literal["increase", "decrease", "neutral"]
Magnitude = Literal["small", "medium", "large"]

MAGNITUDE_BUCKETS: tuple[Magnitude, ...] = ("small", "medium", "large")


@dataclass(slots=True, frozen=True)
class SequenceAnalysis:
    from_key: Any
    to_key: Any
    change: float
    change_percent: float
    change_direction: ChangeDirection
    magnitude: Magnitude

    def to_dict(self) -> dict[str, Any]:
        return {
            "from": self.from_key,
            "to": self.to_key,
            "change": self.change,
            "change_percent": self.change_percent,
            "change_direction": self.change_direction,
            "magnitude": self.magnitude,
        }


def percent_change(previous: float, change: float) -> float:
    if previous == 0:
        if change == 0:
            return 0.0
        return math.copysign(math.inf, change)
    return change / previous * 100.0


def change_direction(change: float, epsilon: float = DEFAULT_NEUTRAL_EPSILON) -> ChangeDirection:
    if abs(change) < epsilon:
        return "neutral"
    return "increase" if change > 0 else "decrease"


def magnitude_buckets(abs_changes: np.ndarray) -> list[Magnitude]:
    """Tercile of each value within the distribution of all values.

    Ties share the bucket of their first occurrence in sorted order.
    """
    size = abs_changes.size
    if size == 0:
        return []
    ordered = np.sort(abs_changes)
    ranks = np.searchsorted(ordered, abs_changes, side="left")
    tercile = np.clip((ranks * 3) // size, 0, 2)
    return [MAGNITUDE_BUCKETS[int(index)] for index in tercile]


def consecutive_changes(
    data: Sequence[Record], value_field: str = DEFAULT_VALUE_FIELD
) -> np.ndarray:
    if len(data) < 2:
        return np.array([], dtype=float)
    values = np.array([value_of(record, value_field) for record in data], dtype=float)
    return np.diff(values)


def analyze_sequence(
    data: Sequence[Record],
    *,
    key_field: str = DEFAULT_KEY_FIELD,
    value_field: str = DEFAULT_VALUE_FIELD,
    epsilon: float = DEFAULT_NEUTRAL_EPSILON,
) -> list[SequenceAnalysis]:
    """Describe the transition between every pair of adjacent records."""
    if len(data) < 2:
        return []

    changes = consecutive_changes(data, value_field)
    buckets = magnitude_buckets(np.abs(changes))

    analyses: list[SequenceAnalysis] = []
    for idx, change in enumerate(changes.tolist()):
        current, following = data[idx], data[idx + 1]
        analyses.append(
            SequenceAnalysis(
                from_key=key_of(current, key_field),
                to_key=key_of(following, key_field),
                change=float(change),
                change_percent=percent_change(value_of(current, value_field), float(change)),
                change_direction=change_direction(float(change), epsilon),
                magnitude=buckets[idx],
            )
        )
    return analyses

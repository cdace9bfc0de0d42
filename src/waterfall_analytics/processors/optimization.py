from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from waterfall_analytics.config import DEFAULT_NEUTRAL_EPSILON, OptimizationConfig
from waterfall_analytics.processors.sequence import consecutive_changes
from waterfall_analytics.processors.similarity import merge_similar_items
from waterfall_analytics.records import DEFAULT_KEY_FIELD, DEFAULT_VALUE_FIELD, Record, value_of

FLAT_SEGMENTS_MESSAGE = (
    "Most consecutive changes are flat; consider consolidating flat segments into a single step."
)
DIRECTION_MISMATCH_MESSAGE = (
    "The net change runs against most individual changes; consider reordering or "
    "regrouping steps for readability."
)
SIMILAR_ITEMS_MESSAGE = "Several records have near-identical values; consider merging similar items."
LARGE_DATASET_MESSAGE = (
    "Large dataset ({count} records); consider aggregating steps or paginating the chart."
)
ZERO_VALUES_MESSAGE = "Zero-value records detected; consider removing or combining them."
ALTERNATING_MESSAGE = (
    "Alternating positive/negative pattern detected; consider reordering by magnitude."
)


def has_flat_majority(changes: np.ndarray, fraction: float, epsilon: float) -> bool:
    if changes.size == 0:
        return False
    flat = np.abs(changes) < epsilon
    return float(flat.mean()) > fraction


def net_direction_disagrees(changes: np.ndarray, epsilon: float) -> bool:
    """True when the first-to-last change and the majority of steps point opposite ways."""
    if changes.size == 0:
        return False
    net = float(changes.sum())
    if abs(net) < epsilon:
        return False
    increases = int((changes >= epsilon).sum())
    decreases = int((changes <= -epsilon).sum())
    if increases == decreases:
        return False
    majority_up = increases > decreases
    return majority_up != (net > 0)


def has_alternating_pattern(values: Sequence[float], fraction: float) -> bool:
    if len(values) < 3:
        return False
    alternating = 0
    for idx in range(1, len(values) - 1):
        prev, curr, nxt = values[idx - 1], values[idx], values[idx + 1]
        if (prev > 0 > curr and nxt > 0) or (prev < 0 < curr and nxt < 0):
            alternating += 1
    return alternating > len(values) * fraction


def suggest_data_optimizations(
    data: Sequence[Record],
    config: OptimizationConfig | None = None,
    *,
    key_field: str = DEFAULT_KEY_FIELD,
    value_field: str = DEFAULT_VALUE_FIELD,
    epsilon: float = DEFAULT_NEUTRAL_EPSILON,
) -> list[str]:
    """Evaluate each shape heuristic against ``data`` and return the triggered messages."""
    cfg = config or OptimizationConfig()
    changes = consecutive_changes(data, value_field)
    values = [value_of(record, value_field) for record in data]

    suggestions: list[str] = []
    if has_flat_majority(changes, cfg.flat_change_fraction, epsilon):
        suggestions.append(FLAT_SEGMENTS_MESSAGE)
    if net_direction_disagrees(changes, epsilon):
        suggestions.append(DIRECTION_MISMATCH_MESSAGE)
    if data:
        clusters = merge_similar_items(
            data, cfg.similarity_threshold, key_field=key_field, value_field=value_field
        )
        if len(data) - len(clusters) > 1:
            suggestions.append(SIMILAR_ITEMS_MESSAGE)
    if len(data) > cfg.large_dataset_size:
        suggestions.append(LARGE_DATASET_MESSAGE.format(count=len(data)))
    if any(value == 0 for value in values):
        suggestions.append(ZERO_VALUES_MESSAGE)
    if has_alternating_pattern(values, cfg.alternating_fraction):
        suggestions.append(ALTERNATING_MESSAGE)
    return suggestions

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Any

from waterfall_analytics.errors import ConfigurationError
from waterfall_analytics.records import (
    DEFAULT_KEY_FIELD,
    DEFAULT_VALUE_FIELD,
    Record,
    copy_record,
    key_of,
    passthrough,
    value_of,
)

LABEL_JOINER = " + "


def relative_distance(value: float, reference: float) -> float:
    if reference == 0:
        return 0.0 if value == 0 else math.inf
    return abs(value - reference) / abs(reference)


def _representative(
    cluster: list[Record], mean: float, key_field: str, value_field: str
) -> Any:
    if len(cluster) == 1:
        return passthrough(cluster[0])
    merged = copy_record(cluster[0], value_field)
    merged[value_field] = mean
    labels = [key_of(record, key_field) for record in cluster]
    merged[key_field] = LABEL_JOINER.join(str(label) for label in labels if label is not None)
    merged["merged_count"] = len(cluster)
    return merged


def merge_similar_items(
    data: Sequence[Record],
    similarity_threshold: float,
    *,
    key_field: str = DEFAULT_KEY_FIELD,
    value_field: str = DEFAULT_VALUE_FIELD,
) -> list[Any]:
    """Collapse runs of records whose values sit within a relative band of each other.

    Records are sorted by value and swept once; a record joins the open cluster while its
    relative distance to the cluster mean is at most ``similarity_threshold``. Returns one
    record per cluster.
    """
    if not math.isfinite(similarity_threshold) or similarity_threshold < 0:
        raise ConfigurationError(
            f"similarity_threshold must be a finite value >= 0, got {similarity_threshold!r}"
        )
    if not data:
        return []

    values = [value_of(record, value_field) for record in data]
    order = sorted(range(len(data)), key=values.__getitem__)

    merged: list[Any] = []
    cluster: list[Record] = [data[order[0]]]
    total = values[order[0]]
    for position in order[1:]:
        value = values[position]
        mean = total / len(cluster)
        if relative_distance(value, mean) <= similarity_threshold:
            cluster.append(data[position])
            total += value
            continue
        merged.append(_representative(cluster, mean, key_field, value_field))
        cluster = [data[position]]
        total = value
    merged.append(_representative(cluster, total / len(cluster), key_field, value_field))
    return merged

from __future__ import annotations

import pytest

from waterfall_analytics.errors import ConfigurationError
from waterfall_analytics.processors.similarity import merge_similar_items, relative_distance


def _records() -> list[dict[str, object]]:
    return [
        {"label": "a", "value": 100, "kind": "x"},
        {"label": "b", "value": 102, "kind": "y"},
        {"label": "c", "value": 50, "kind": "z"},
        {"label": "d", "value": 51, "kind": "w"},
        {"label": "e", "value": 200, "kind": "v"},
    ]


def test_adjacent_values_collapse_into_cluster_representatives() -> None:
    merged = merge_similar_items(_records(), 0.05)

    assert len(merged) == 3
    assert merged[0] == {"label": "c + d", "value": 50.5, "kind": "z", "merged_count": 2}
    assert merged[1] == {"label": "a + b", "value": 101.0, "kind": "x", "merged_count": 2}
    assert merged[2] == {"label": "e", "value": 200, "kind": "v"}


def test_zero_threshold_only_merges_identical_values() -> None:
    data = [{"label": "a", "value": 3}, {"label": "b", "value": 3}, {"label": "c", "value": 4}]
    merged = merge_similar_items(data, 0.0)
    assert [record["label"] for record in merged] == ["a + b", "c"]


def test_single_pass_compares_against_running_mean() -> None:
    # 10 -> 10.9 joins (9%), mean 10.45; 11.8 is 12.9% away from the mean and starts anew.
    data = [{"label": name, "value": value} for name, value in (("p", 10), ("q", 10.9), ("r", 11.8))]
    merged = merge_similar_items(data, 0.1)
    assert [record["label"] for record in merged] == ["p + q", "r"]


def test_empty_input_and_invalid_threshold() -> None:
    assert merge_similar_items([], 0.1) == []
    with pytest.raises(ConfigurationError):
        merge_similar_items(_records(), -0.1)


def test_relative_distance_with_zero_reference() -> None:
    assert relative_distance(0.0, 0.0) == 0.0
    assert relative_distance(1.0, 0.0) == float("inf")
    assert relative_distance(-90.0, -100.0) == pytest.approx(0.1)

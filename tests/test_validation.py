from __future__ import annotations

import math

from waterfall_analytics.processors.validation import validate_sequential_data


def test_clean_data_is_valid() -> None:
    result = validate_sequential_data(
        [{"label": "start", "value": 100}, {"label": "growth", "value": 25.5}]
    )
    assert result.is_valid
    assert result.errors == []


def test_duplicate_key_is_reported_once() -> None:
    result = validate_sequential_data(
        [
            {"label": "a", "value": 1},
            {"label": "b", "value": 2},
            {"label": "a", "value": 3},
            {"label": "a", "value": 4},
        ]
    )
    assert result.is_valid is False
    assert result.errors == ["duplicate key: a"]


def test_all_failures_are_accumulated() -> None:
    result = validate_sequential_data(
        [
            {"value": 1},
            {"label": "b"},
            {"label": "c", "value": math.nan},
            {"label": "d", "value": math.inf},
            {"label": "e", "value": "12"},
            42,
        ]
    )
    assert result.errors == [
        "record 0: missing key field 'label'",
        "record 1: missing value field 'value'",
        "record 2: value field 'value' is not a finite number: nan",
        "record 3: value field 'value' is not a finite number: inf",
        "record 4: value field 'value' is not a finite number: '12'",
        "record 5: expected a mapping, got int",
    ]
    assert result.to_dict()["is_valid"] is False


def test_custom_fields_name_fallback_and_stacks() -> None:
    assert validate_sequential_data(
        [{"id": 1, "amount": 3}, {"id": 2, "amount": 4}], key_field="id", value_field="amount"
    ).is_valid
    assert validate_sequential_data(
        [{"name": "Q1", "stacks": [{"value": 1}, {"value": 2}]}, {"name": "Q2", "value": 4}]
    ).is_valid

from __future__ import annotations

import dataclasses

import pytest

from waterfall_analytics import (
    AdvancedDataProcessor,
    ConfigurationError,
    IndexOutOfRangeError,
    create_advanced_data_processor,
)
from waterfall_analytics.config import AnalysisConfig, AnomalyConfig, SequenceConfig


def test_factory_binds_field_names_to_every_operation() -> None:
    processor = create_advanced_data_processor(key_field="step", value_field="amount")
    data = [{"step": "a", "amount": 10}, {"step": "b", "amount": 30}, {"step": "a", "amount": 5}]

    assert isinstance(processor, AdvancedDataProcessor)
    assert [item.to_key for item in processor.analyze_sequence(data)] == ["b", "a"]
    assert [pair.value for pair in processor.create_data_pairs(data)] == [10.0, 30.0, 5.0]
    assert processor.validate_sequential_data(data).errors == ["duplicate key: a"]
    assert processor.merge_similar_items(data, 0.0) == [
        {"step": "a", "amount": 5},
        {"step": "a", "amount": 10},
        {"step": "b", "amount": 30},
    ]
    ordered = processor.optimize_data_order(data, {"strategy": "value"})
    assert [record["amount"] for record in ordered] == [5, 10, 30]
    assert [record["amount"] for record in processor.optimize_data_order(data)] == [5, 10, 30]
    assert processor.merge_datasets([data], {"merge_strategy": "sum"}) == [
        {"step": "a", "amount": 15.0},
        {"step": "b", "amount": 30.0},
    ]


def test_explicit_option_fields_override_bound_fields() -> None:
    processor = create_advanced_data_processor(key_field="step", value_field="amount")
    data = [{"step": "x", "amount": 5, "weight": 1}, {"step": "y", "amount": 2, "weight": 9}]

    ordered = processor.optimize_data_order(data, {"field": "weight", "direction": "descending"})
    assert [record["step"] for record in ordered] == ["y", "x"]
    merged = processor.merge_datasets([data], {"merge_strategy": "sum", "key_field": "weight"})
    assert [record["step"] for record in merged] == ["x", "y"]


def test_processor_delegates_option_driven_operations() -> None:
    processor = create_advanced_data_processor()
    data = [{"label": "x", "value": 3}, {"label": "y", "value": 1}]

    assert processor.optimize_data_order(data, {"field": "value"})[0]["label"] == "y"
    assert processor.permute_by_indices(data, [1]) == [{"label": "y", "value": 1}]
    assert processor.generate_custom_ticks((0, 97)) == [0, 20, 40, 60, 80, 100]
    assert processor.merge_datasets([data, data], {"merge_strategy": "sum"}) == [
        {"label": "x", "value": 6},
        {"label": "y", "value": 2},
    ]
    with pytest.raises(IndexOutOfRangeError):
        processor.permute_by_indices([10, 20, 30], [5])
    with pytest.raises(ConfigurationError):
        processor.merge_datasets([data], {"merge_strategy": "unknown"})


def test_config_tunables_reach_the_operations() -> None:
    cfg = AnalysisConfig(
        sequence=SequenceConfig(neutral_epsilon=1.0),
        anomalies=AnomalyConfig(iqr_multiplier=10.0),
    )
    processor = create_advanced_data_processor(cfg)
    (analysis,) = processor.analyze_sequence([{"value": 1.0}, {"value": 1.5}])
    assert analysis.change_direction == "neutral"
    assert processor.detect_data_anomalies([1, 2, 3, 4, 9]) == []
    assert create_advanced_data_processor().detect_data_anomalies([1, 2, 3, 4, 9])


def test_processor_is_immutable() -> None:
    processor = create_advanced_data_processor()
    with pytest.raises(dataclasses.FrozenInstanceError):
        processor.key_field = "other"  # type: ignore[misc]

from __future__ import annotations

import pytest

from waterfall_analytics.config import AnalysisConfig, WaterfallConfig
from waterfall_analytics.waterfall import (
    create_waterfall_sequence_analyzer,
    create_waterfall_tick_generator,
    critical_records,
    cumulative_flow,
)


def _income_statement() -> list[dict[str, object]]:
    return [
        {"label": "Start", "value": 100},
        {"label": "Sales", "value": 50},
        {"label": "Costs", "value": -80},
        {"label": "Tax", "value": -10},
        {"label": "Other", "value": 5},
    ]


def test_sequence_report_combines_flow_cumulative_and_critical_paths() -> None:
    report = create_waterfall_sequence_analyzer(_income_statement())

    assert len(report.flow_analysis) == 4
    assert [step.cumulative for step in report.cumulative_flow] == [100, 150, 70, 60, 65]
    assert [step.change for step in report.cumulative_flow] == [100, 50, -80, -10, 5]
    assert [step.step for step in report.cumulative_flow] == [0, 1, 2, 3, 4]
    assert report.critical_paths == ["Start", "Costs", "Sales"]
    assert report.critical_transitions == ["Sales → Costs"]
    assert report.optimization_suggestions == []

    payload = report.to_dict()
    assert payload["flow_analysis"][1]["magnitude"] == "large"
    assert payload["cumulative_flow"][-1] == {"step": 4, "cumulative": 65.0, "change": 5.0}


def test_critical_path_count_comes_from_config() -> None:
    cfg = AnalysisConfig(waterfall=WaterfallConfig(critical_path_count=1))
    report = create_waterfall_sequence_analyzer(_income_statement(), config=cfg)
    assert report.critical_paths == ["Start"]

    assert critical_records(_income_statement(), 0) == []


def test_critical_records_keep_input_order_on_ties() -> None:
    data = [{"label": "a", "value": -5}, {"label": "b", "value": 5}, {"label": "c", "value": 1}]
    assert [record["label"] for record in critical_records(data, 2)] == ["a", "b"]


def test_sequence_report_for_short_inputs() -> None:
    report = create_waterfall_sequence_analyzer([{"label": "only", "value": 3}])
    assert report.flow_analysis == []
    assert [step.cumulative for step in cumulative_flow([{"value": 3}])] == [3.0]
    assert report.critical_paths == ["only"]


def test_tick_report_marks_ticks_near_critical_values() -> None:
    report = create_waterfall_tick_generator((0, 150), _income_statement())

    assert report.ticks == [0, 50, 100, 150]
    assert report.labels == ["0", "50", "100", "150"]
    assert report.key_markers == [50, 100]


def test_tick_report_formats_labels_and_compacts_large_values() -> None:
    formatted = create_waterfall_tick_generator((0, 150), _income_statement(), label_format=",.1f")
    assert formatted.labels == ["0.0", "50.0", "100.0", "150.0"]

    large = create_waterfall_tick_generator((0, 2_500_000), [])
    assert large.ticks == [0, 1_000_000, 2_000_000, 3_000_000]
    assert large.labels == ["0", "1.0M", "2.0M", "3.0M"]
    assert large.key_markers == []


def test_tick_report_rejects_non_finite_domain() -> None:
    with pytest.raises(ValueError, match="finite"):
        create_waterfall_tick_generator((0, float("inf")), _income_statement())

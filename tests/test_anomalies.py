from __future__ import annotations

import math

import numpy as np
import pytest

from waterfall_analytics.processors.anomalies import detect_data_anomalies, iqr_bounds


def test_iqr_bounds_match_tukey_fences() -> None:
    bounds = iqr_bounds(np.array([1.0, 2.0, 3.0, 4.0, 5.0]))
    assert bounds.q1 == pytest.approx(2.0)
    assert bounds.q3 == pytest.approx(4.0)
    assert bounds.iqr == pytest.approx(2.0)
    assert bounds.lower == pytest.approx(-1.0)
    assert bounds.upper == pytest.approx(7.0)


def test_flags_records_outside_both_fences() -> None:
    data = [{"label": f"s{idx}", "value": value} for idx, value in enumerate([10, 11, 12, 13, 14, 90, -60])]
    flagged = detect_data_anomalies(data)

    assert [record["label"] for record in flagged] == ["s5", "s6"]
    assert flagged[0]["anomaly_bound"] == "upper"
    assert flagged[1]["anomaly_bound"] == "lower"
    assert flagged[0]["anomaly_limit"] > 14
    assert "anomaly_bound" not in data[5]


def test_fewer_than_four_points_returns_empty() -> None:
    assert detect_data_anomalies([{"value": 1}, {"value": 1000}, {"value": 2}]) == []
    assert detect_data_anomalies([1, 2, math.nan, 1000]) == []


def test_multiplier_and_scalar_records() -> None:
    data = [1, 2, 3, 4, 9]
    assert detect_data_anomalies(data) == [{"value": 9.0, "anomaly_bound": "upper", "anomaly_limit": 7.0}]
    assert detect_data_anomalies(data, iqr_multiplier=3.0) == []

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np

from waterfall_analytics.records import DEFAULT_VALUE_FIELD, Record, copy_record, value_of

DEFAULT_IQR_MULTIPLIER = 1.5
MIN_QUARTILE_POINTS = 4


@dataclass(slots=True, frozen=True)
class IqrBounds:
    q1: float
    q3: float
    lower: float
    upper: float

    @property
    def iqr(self) -> float:
        return self.q3 - self.q1


def iqr_bounds(values: np.ndarray, multiplier: float = DEFAULT_IQR_MULTIPLIER) -> IqrBounds:
    q1, q3 = np.quantile(values.astype(float), [0.25, 0.75])
    spread = float(q3 - q1)
    return IqrBounds(
        q1=float(q1),
        q3=float(q3),
        lower=float(q1) - multiplier * spread,
        upper=float(q3) + multiplier * spread,
    )


def detect_data_anomalies(
    data: Sequence[Record],
    *,
    value_field: str = DEFAULT_VALUE_FIELD,
    iqr_multiplier: float = DEFAULT_IQR_MULTIPLIER,
    min_points: int = MIN_QUARTILE_POINTS,
) -> list[dict[str, Any]]:
    """Flag records whose value falls outside the Tukey fences of the dataset.

    Each flagged record is returned as a copy carrying ``anomaly_bound`` ("lower" or
    "upper") and ``anomaly_limit``. Non-finite values neither shape the fences nor get
    flagged.
    """
    values = np.array([value_of(record, value_field) for record in data], dtype=float)
    finite = np.isfinite(values)
    if int(finite.sum()) < max(min_points, MIN_QUARTILE_POINTS):
        return []

    bounds = iqr_bounds(values[finite], iqr_multiplier)
    flagged: list[dict[str, Any]] = []
    for record, value, is_finite in zip(data, values.tolist(), finite.tolist()):
        if not is_finite:
            continue
        if value < bounds.lower:
            bound, limit = "lower", bounds.lower
        elif value > bounds.upper:
            bound, limit = "upper", bounds.upper
        else:
            continue
        augmented = copy_record(record, value_field)
        augmented["anomaly_bound"] = bound
        augmented["anomaly_limit"] = limit
        flagged.append(augmented)
    return flagged

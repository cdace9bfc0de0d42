from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from waterfall_analytics.config import AnalysisConfig
from waterfall_analytics.options import TickGenerationOptions
from waterfall_analytics.processor import create_advanced_data_processor
from waterfall_analytics.processors.sequence import SequenceAnalysis
from waterfall_analytics.processors.ticks import format_ticks, resolve_domain
from waterfall_analytics.records import (
    DEFAULT_KEY_FIELD,
    DEFAULT_VALUE_FIELD,
    Record,
    key_of,
    value_of,
)

LOGGER = logging.getLogger(__name__)

TRANSITION_ARROW = " → "


@dataclass(slots=True, frozen=True)
class CumulativeStep:
    step: int
    cumulative: float
    change: float

    def to_dict(self) -> dict[str, Any]:
        return {"step": self.step, "cumulative": self.cumulative, "change": self.change}


@dataclass(slots=True, frozen=True)
class WaterfallSequenceReport:
    flow_analysis: list[SequenceAnalysis]
    cumulative_flow: list[CumulativeStep]
    critical_paths: list[Any]
    critical_transitions: list[str]
    optimization_suggestions: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {
            "flow_analysis": [analysis.to_dict() for analysis in self.flow_analysis],
            "cumulative_flow": [step.to_dict() for step in self.cumulative_flow],
            "critical_paths": list(self.critical_paths),
            "critical_transitions": list(self.critical_transitions),
            "optimization_suggestions": list(self.optimization_suggestions),
        }


@dataclass(slots=True, frozen=True)
class WaterfallTickReport:
    ticks: list[float]
    labels: list[str]
    key_markers: list[float]

    def to_dict(self) -> dict[str, Any]:
        return {
            "ticks": list(self.ticks),
            "labels": list(self.labels),
            "key_markers": list(self.key_markers),
        }


def cumulative_flow(
    data: Sequence[Record], value_field: str = DEFAULT_VALUE_FIELD
) -> list[CumulativeStep]:
    steps: list[CumulativeStep] = []
    running = 0.0
    for idx, record in enumerate(data):
        change = value_of(record, value_field)
        running += change
        steps.append(CumulativeStep(step=idx, cumulative=running, change=change))
    return steps


def critical_records(
    data: Sequence[Record], count: int, value_field: str = DEFAULT_VALUE_FIELD
) -> list[Record]:
    """Top ``count`` records by absolute value, largest first; ties keep input order."""
    if count <= 0:
        return []
    magnitudes = [abs(value_of(record, value_field)) for record in data]
    ranked = sorted(range(len(data)), key=magnitudes.__getitem__, reverse=True)
    return [data[idx] for idx in ranked[:count]]


def create_waterfall_sequence_analyzer(
    data: Sequence[Record],
    *,
    config: AnalysisConfig | None = None,
    key_field: str = DEFAULT_KEY_FIELD,
    value_field: str = DEFAULT_VALUE_FIELD,
) -> WaterfallSequenceReport:
    cfg = config or AnalysisConfig()
    processor = create_advanced_data_processor(cfg, key_field=key_field, value_field=value_field)

    flow_analysis = processor.analyze_sequence(data)
    critical = critical_records(data, cfg.waterfall.critical_path_count, value_field)
    transitions = [
        f"{analysis.from_key}{TRANSITION_ARROW}{analysis.to_key}"
        for analysis in flow_analysis
        if analysis.magnitude == "large"
    ]
    report = WaterfallSequenceReport(
        flow_analysis=flow_analysis,
        cumulative_flow=cumulative_flow(data, value_field),
        critical_paths=[key_of(record, key_field) for record in critical],
        critical_transitions=transitions,
        optimization_suggestions=processor.suggest_data_optimizations(data),
    )
    LOGGER.debug(
        "Waterfall sequence: %d steps, %d critical paths, %d suggestions",
        len(report.cumulative_flow),
        len(report.critical_paths),
        len(report.optimization_suggestions),
    )
    return report


def create_waterfall_tick_generator(
    domain: Sequence[float],
    data_points: Sequence[Record],
    *,
    config: AnalysisConfig | None = None,
    value_field: str = DEFAULT_VALUE_FIELD,
    label_format: str | None = None,
) -> WaterfallTickReport:
    cfg = config or AnalysisConfig()
    waterfall_cfg = cfg.waterfall
    processor = create_advanced_data_processor(cfg, value_field=value_field)

    lo, hi = resolve_domain(domain)
    span = hi - lo
    count = min(max(len(data_points), waterfall_cfg.min_tick_count), waterfall_cfg.max_tick_count)
    fmt = label_format or waterfall_cfg.label_format
    options = TickGenerationOptions(
        count=count,
        nice=True,
        include_zero=True,
        threshold=span * waterfall_cfg.merge_threshold_fraction,
        format=fmt,
    )
    ticks = processor.generate_custom_ticks((lo, hi), options)

    tolerance = span * waterfall_cfg.key_marker_tolerance_fraction
    critical_values = [
        value_of(record, value_field)
        for record in critical_records(data_points, waterfall_cfg.critical_path_count, value_field)
    ]
    key_markers = [
        tick
        for tick in ticks
        if any(abs(value - tick) <= tolerance for value in critical_values)
    ]
    return WaterfallTickReport(
        ticks=ticks,
        labels=format_ticks(ticks, options.format),
        key_markers=key_markers,
    )

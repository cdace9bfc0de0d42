from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from waterfall_analytics.config import AnalysisConfig
from waterfall_analytics.options import (
    DataMergeOptions,
    DataOrderingOptions,
    TickGenerationOptions,
)
from waterfall_analytics.processors.anomalies import detect_data_anomalies
from waterfall_analytics.processors.merge import merge_datasets
from waterfall_analytics.processors.optimization import suggest_data_optimizations
from waterfall_analytics.processors.ordering import optimize_data_order
from waterfall_analytics.processors.reshape import (
    DataPair,
    create_data_pairs,
    permute_by_indices,
)
from waterfall_analytics.processors.sequence import SequenceAnalysis, analyze_sequence
from waterfall_analytics.processors.similarity import merge_similar_items
from waterfall_analytics.processors.ticks import generate_custom_ticks
from waterfall_analytics.processors.validation import ValidationResult, validate_sequential_data
from waterfall_analytics.records import DEFAULT_KEY_FIELD, DEFAULT_VALUE_FIELD, Record


@dataclass(frozen=True)
class AdvancedDataProcessor:
    """Stateless bundle of the record processors bound to one field convention."""

    config: AnalysisConfig = field(default_factory=AnalysisConfig)
    key_field: str = DEFAULT_KEY_FIELD
    value_field: str = DEFAULT_VALUE_FIELD

    @staticmethod
    def _bind(options: Any, **defaults: Any) -> Any:
        """Fill field names the caller left out with the ones this processor is bound to."""
        if options is None or isinstance(options, Mapping):
            return {**defaults, **(options or {})}
        return options

    def analyze_sequence(self, data: Sequence[Record]) -> list[SequenceAnalysis]:
        return analyze_sequence(
            data,
            key_field=self.key_field,
            value_field=self.value_field,
            epsilon=self.config.sequence.neutral_epsilon,
        )

    def optimize_data_order(
        self,
        data: Sequence[Record],
        options: DataOrderingOptions | Mapping[str, Any] | None = None,
    ) -> list[Record]:
        return optimize_data_order(data, self._bind(options, field=self.value_field))

    def merge_datasets(
        self,
        datasets: Sequence[Sequence[Record]],
        options: DataMergeOptions | Mapping[str, Any],
    ) -> list[dict[str, Any]]:
        return merge_datasets(
            datasets,
            self._bind(options, key_field=self.key_field, value_field=self.value_field),
        )

    def generate_custom_ticks(
        self,
        domain: Sequence[float],
        options: TickGenerationOptions | Mapping[str, Any] | None = None,
    ) -> list[float]:
        return generate_custom_ticks(domain, options)

    def create_data_pairs(
        self,
        data: Sequence[Record],
        accessor: Callable[[Record], Any] | None = None,
    ) -> list[DataPair]:
        return create_data_pairs(
            data, accessor, key_field=self.key_field, value_field=self.value_field
        )

    def permute_by_indices(self, data: Sequence[Record], indices: Sequence[int]) -> list[Record]:
        return permute_by_indices(data, indices)

    def merge_similar_items(
        self, data: Sequence[Record], similarity_threshold: float
    ) -> list[Any]:
        return merge_similar_items(
            data,
            similarity_threshold,
            key_field=self.key_field,
            value_field=self.value_field,
        )

    def validate_sequential_data(self, data: Sequence[Any]) -> ValidationResult:
        return validate_sequential_data(
            data, key_field=self.key_field, value_field=self.value_field
        )

    def detect_data_anomalies(self, data: Sequence[Record]) -> list[dict[str, Any]]:
        return detect_data_anomalies(
            data,
            value_field=self.value_field,
            iqr_multiplier=self.config.anomalies.iqr_multiplier,
            min_points=self.config.anomalies.min_points,
        )

    def suggest_data_optimizations(self, data: Sequence[Record]) -> list[str]:
        return suggest_data_optimizations(
            data,
            self.config.optimization,
            key_field=self.key_field,
            value_field=self.value_field,
            epsilon=self.config.sequence.neutral_epsilon,
        )


def create_advanced_data_processor(
    config: AnalysisConfig | None = None,
    *,
    key_field: str = DEFAULT_KEY_FIELD,
    value_field: str = DEFAULT_VALUE_FIELD,
) -> AdvancedDataProcessor:
    return AdvancedDataProcessor(
        config=config or AnalysisConfig(),
        key_field=key_field,
        value_field=value_field,
    )

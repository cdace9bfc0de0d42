from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator

DEFAULT_NEUTRAL_EPSILON = 1e-9


class SequenceConfig(BaseModel):
    neutral_epsilon: float = Field(default=DEFAULT_NEUTRAL_EPSILON, ge=0.0)


class AnomalyConfig(BaseModel):
    iqr_multiplier: float = Field(default=1.5, gt=0.0)
    min_points: int = Field(default=4, ge=4)


class OptimizationConfig(BaseModel):
    flat_change_fraction: float = Field(default=0.5, ge=0.0, le=1.0)
    similarity_threshold: float = Field(default=0.05, ge=0.0)
    large_dataset_size: int = Field(default=50, ge=1)
    alternating_fraction: float = Field(default=0.3, ge=0.0, le=1.0)


class WaterfallConfig(BaseModel):
    critical_path_count: int = Field(default=3, ge=0)
    min_tick_count: int = Field(default=4, ge=1)
    max_tick_count: int = Field(default=10, ge=1)
    merge_threshold_fraction: float = Field(default=0.01, ge=0.0, lt=1.0)
    key_marker_tolerance_fraction: float = Field(default=0.02, ge=0.0, lt=1.0)
    label_format: str | None = None

    @model_validator(mode="after")
    def _check_tick_bounds(self) -> WaterfallConfig:
        if self.max_tick_count < self.min_tick_count:
            raise ValueError("max_tick_count must be >= min_tick_count")
        return self


class AnalysisConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    sequence: SequenceConfig = Field(default_factory=SequenceConfig)
    anomalies: AnomalyConfig = Field(default_factory=AnomalyConfig)
    optimization: OptimizationConfig = Field(default_factory=OptimizationConfig)
    waterfall: WaterfallConfig = Field(default_factory=WaterfallConfig)


DEFAULT_CONFIG_PATH = Path("configs/default.yaml")


def load_config(path: Path) -> AnalysisConfig:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    return AnalysisConfig.model_validate(data)

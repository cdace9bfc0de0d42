from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from waterfall_analytics.errors import ConfigurationError
from waterfall_analytics.records import DEFAULT_KEY_FIELD, DEFAULT_VALUE_FIELD

MergeStrategy = Literal["combine", "override", "average", "sum"]
ConflictResolution = Literal["first", "last", "max", "min"]
OrderDirection = Literal["ascending", "descending"]
OrderStrategy = Literal["value", "cumulative", "magnitude", "alphabetical"]

DEFAULT_TICK_COUNT = 5


class DataMergeOptions(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    merge_strategy: MergeStrategy
    conflict_resolution: ConflictResolution = "last"
    key_field: str = DEFAULT_KEY_FIELD
    value_field: str = DEFAULT_VALUE_FIELD


class TickGenerationOptions(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    count: int | None = Field(default=None, ge=1)
    step: float | None = Field(default=None, gt=0.0, allow_inf_nan=False)
    nice: bool = True
    format: str | None = None
    threshold: float = Field(default=0.0, ge=0.0, allow_inf_nan=False)
    include_zero: bool = False

    @model_validator(mode="before")
    @classmethod
    def _default_count(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("count") is None and data.get("step") is None:
            return {**data, "count": DEFAULT_TICK_COUNT}
        return data


class DataOrderingOptions(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    field: str = DEFAULT_VALUE_FIELD
    direction: OrderDirection = "ascending"
    strategy: OrderStrategy = "value"
    group_by: str | None = None


OptionsT = TypeVar("OptionsT", bound=BaseModel)


def _describe(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(piece) for piece in item.get("loc", ())) or "options"
        parts.append(f"{location}: {item.get('msg', 'invalid value')}")
    return "; ".join(parts)


def coerce_options(model: type[OptionsT], options: OptionsT | Mapping[str, Any] | None) -> OptionsT:
    """Validate ``options`` into ``model``; failures surface as ConfigurationError."""
    if isinstance(options, model):
        return options
    try:
        return model.model_validate(dict(options or {}))
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid {model.__name__}: {_describe(exc)}") from exc

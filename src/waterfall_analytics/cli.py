from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import typer

from waterfall_analytics.config import DEFAULT_CONFIG_PATH, AnalysisConfig, load_config
from waterfall_analytics.errors import ConfigurationError
from waterfall_analytics.io.read import load_records
from waterfall_analytics.io.write import dump_summary, write_summary
from waterfall_analytics.logging import configure_logging
from waterfall_analytics.processor import create_advanced_data_processor
from waterfall_analytics.processors.ticks import format_ticks
from waterfall_analytics.records import DEFAULT_KEY_FIELD, DEFAULT_VALUE_FIELD
from waterfall_analytics.waterfall import (
    create_waterfall_sequence_analyzer,
    create_waterfall_tick_generator,
)

LOGGER = logging.getLogger(__name__)

app = typer.Typer(no_args_is_help=True, add_completion=False)


def _load_app_config(config_path: Path | None) -> AnalysisConfig:
    if config_path is None:
        if DEFAULT_CONFIG_PATH.exists():
            return load_config(DEFAULT_CONFIG_PATH)
        return AnalysisConfig()
    return load_config(config_path)


def _emit(payload: Any, out: Path | None) -> None:
    if out is not None:
        written = write_summary(payload, out)
        typer.echo(f"Summary written to: {written}")
        return
    typer.echo(dump_summary(payload))


@app.command()
def sequence(
    records: Path = typer.Option(..., exists=True, readable=True, resolve_path=True),
    key_field: str = typer.Option(DEFAULT_KEY_FIELD, help="Record field holding the step label."),
    value_field: str = typer.Option(DEFAULT_VALUE_FIELD, help="Record field holding the step value."),
    config: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
    out: Path | None = typer.Option(None, resolve_path=True),
) -> None:
    """Analyze step-to-step flow, cumulative totals and critical steps of a waterfall."""
    configure_logging()
    cfg = _load_app_config(config)
    data = load_records(records)
    LOGGER.info("Loaded %d records from %s", len(data), records)
    report = create_waterfall_sequence_analyzer(
        data, config=cfg, key_field=key_field, value_field=value_field
    )
    _emit(report.to_dict(), out)


@app.command()
def ticks(
    lo: float = typer.Option(..., help="Lower domain bound."),
    hi: float = typer.Option(..., help="Upper domain bound."),
    count: int | None = typer.Option(None, min=1),
    step: float | None = typer.Option(None),
    nice: bool = typer.Option(True, help="Round the step to 1, 2 or 5 times a power of ten."),
    threshold: float = typer.Option(0.0, min=0.0, help="Merge ticks closer than this."),
    include_zero: bool = typer.Option(False, help="Insert 0 when it lies in the domain."),
    fmt: str | None = typer.Option(None, "--format", help="Python format spec for labels."),
    records: Path | None = typer.Option(
        None,
        exists=True,
        readable=True,
        resolve_path=True,
        help="Waterfall records; switches to waterfall-tuned ticks with key markers.",
    ),
    value_field: str = typer.Option(DEFAULT_VALUE_FIELD),
    config: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
) -> None:
    """Generate axis ticks for a numeric domain."""
    configure_logging()
    cfg = _load_app_config(config)
    try:
        if records is not None:
            report = create_waterfall_tick_generator(
                (lo, hi),
                load_records(records),
                config=cfg,
                value_field=value_field,
                label_format=fmt,
            )
            _emit(report.to_dict(), None)
            return
        processor = create_advanced_data_processor(cfg)
        generated = processor.generate_custom_ticks(
            (lo, hi),
            {
                "count": count,
                "step": step,
                "nice": nice,
                "threshold": threshold,
                "include_zero": include_zero,
                "format": fmt,
            },
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    _emit({"ticks": generated, "labels": format_ticks(generated, fmt)}, None)


@app.command()
def validate(
    records: Path = typer.Option(..., exists=True, readable=True, resolve_path=True),
    key_field: str = typer.Option(DEFAULT_KEY_FIELD),
    value_field: str = typer.Option(DEFAULT_VALUE_FIELD),
) -> None:
    """Report structural problems in a record file; exits non-zero when any are found."""
    configure_logging()
    processor = create_advanced_data_processor(key_field=key_field, value_field=value_field)
    result = processor.validate_sequential_data(load_records(records))
    _emit(result.to_dict(), None)
    if not result.is_valid:
        raise typer.Exit(code=1)


@app.command()
def anomalies(
    records: Path = typer.Option(..., exists=True, readable=True, resolve_path=True),
    value_field: str = typer.Option(DEFAULT_VALUE_FIELD),
    config: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
) -> None:
    """List records outside the interquartile fences."""
    configure_logging()
    cfg = _load_app_config(config)
    processor = create_advanced_data_processor(cfg, value_field=value_field)
    flagged = processor.detect_data_anomalies(load_records(records))
    _emit({"n_anomalies": len(flagged), "anomalies": flagged}, None)


@app.command()
def merge(
    records: list[Path] = typer.Option(..., exists=True, readable=True, resolve_path=True),
    strategy: str = typer.Option("sum", help="combine, override, average or sum."),
    conflict: str = typer.Option("last", help="first, last, max or min."),
    key_field: str = typer.Option(DEFAULT_KEY_FIELD),
    value_field: str = typer.Option(DEFAULT_VALUE_FIELD),
    out: Path | None = typer.Option(None, resolve_path=True),
) -> None:
    """Merge several record files by key."""
    configure_logging()
    datasets = [load_records(path) for path in records]
    processor = create_advanced_data_processor(key_field=key_field, value_field=value_field)
    try:
        merged = processor.merge_datasets(
            datasets,
            {
                "merge_strategy": strategy,
                "conflict_resolution": conflict,
                "key_field": key_field,
                "value_field": value_field,
            },
        )
    except ConfigurationError as exc:
        raise typer.BadParameter(str(exc)) from exc
    _emit(merged, out)


@app.command()
def order(
    records: Path = typer.Option(..., exists=True, readable=True, resolve_path=True),
    field: str = typer.Option(DEFAULT_VALUE_FIELD),
    direction: str = typer.Option("ascending", help="ascending or descending."),
    strategy: str = typer.Option("value", help="value, cumulative, magnitude or alphabetical."),
    group_by: str | None = typer.Option(None),
    out: Path | None = typer.Option(None, resolve_path=True),
) -> None:
    """Reorder records for display."""
    configure_logging()
    processor = create_advanced_data_processor()
    try:
        ordered = processor.optimize_data_order(
            load_records(records),
            {"field": field, "direction": direction, "strategy": strategy, "group_by": group_by},
        )
    except ConfigurationError as exc:
        raise typer.BadParameter(str(exc)) from exc
    _emit(ordered, out)

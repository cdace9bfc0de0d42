from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from waterfall_analytics.options import DataOrderingOptions, coerce_options
from waterfall_analytics.records import Record, field_value, passthrough, value_of


def _sort_keys(group: list[Record], options: DataOrderingOptions) -> list[Any]:
    field = options.field
    strategy = options.strategy
    if strategy == "value":
        return [value_of(record, field) for record in group]
    if strategy == "cumulative":
        running = 0.0
        cumulative: list[float] = []
        for record in group:
            running += value_of(record, field)
            cumulative.append(running)
        return cumulative
    if strategy == "magnitude":
        return [abs(value_of(record, field)) for record in group]
    if strategy == "alphabetical":
        keys = []
        for record in group:
            raw = field_value(record, field)
            keys.append("" if raw is None else str(raw))
        return keys
    raise AssertionError(f"unhandled ordering strategy: {strategy}")


def group_records(data: Sequence[Record], group_by: str | None) -> list[list[Record]]:
    """Partition records by ``group_by`` keeping first-seen group order."""
    if not group_by:
        return [list(data)]
    groups: dict[Any, list[Record]] = {}
    for record in data:
        groups.setdefault(field_value(record, group_by), []).append(record)
    return list(groups.values())


def optimize_data_order(
    data: Sequence[Record],
    options: DataOrderingOptions | Mapping[str, Any] | None = None,
) -> list[Record]:
    """Stable-sort records per group using the configured strategy and direction."""
    resolved = coerce_options(DataOrderingOptions, options)
    descending = resolved.direction == "descending"

    ordered: list[Record] = []
    for group in group_records(data, resolved.group_by):
        keys = _sort_keys(group, resolved)
        # sorted() keeps equal keys in input order for reverse=True as well.
        positions = sorted(range(len(group)), key=keys.__getitem__, reverse=descending)
        ordered.extend(passthrough(group[position]) for position in positions)
    return ordered

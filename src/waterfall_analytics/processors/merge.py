from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from waterfall_analytics.options import ConflictResolution, DataMergeOptions, coerce_options
from waterfall_analytics.records import Record, copy_record, is_number, key_of, value_of

LOGGER = logging.getLogger(__name__)


@dataclass
class _MergeSlot:
    record: dict[str, Any]
    count: int
    total: float


def resolve_conflict(existing: Any, incoming: Any, resolution: ConflictResolution) -> Any:
    if resolution == "first":
        return existing
    if resolution == "last":
        return incoming
    if resolution == "max":
        if is_number(existing) and is_number(incoming):
            return max(existing, incoming)
        return incoming
    if resolution == "min":
        if is_number(existing) and is_number(incoming):
            return min(existing, incoming)
        return incoming
    raise AssertionError(f"unhandled conflict resolution: {resolution}")


def combine_records(
    existing: Mapping[str, Any],
    incoming: Mapping[str, Any],
    resolution: ConflictResolution,
) -> dict[str, Any]:
    """Union of both records' fields; differing values go through ``resolution``."""
    combined = dict(existing)
    for field, value in incoming.items():
        if field not in combined:
            combined[field] = value
        elif combined[field] != value:
            combined[field] = resolve_conflict(combined[field], value, resolution)
    return combined


def _seed(record: Record, options: DataMergeOptions) -> dict[str, Any]:
    seeded = copy_record(record, options.value_field)
    seeded[options.value_field] = value_of(record, options.value_field)
    return seeded


def _absorb(slot: _MergeSlot, record: Record, options: DataMergeOptions) -> None:
    value = value_of(record, options.value_field)
    slot.count += 1
    slot.total += value
    strategy = options.merge_strategy
    if strategy == "combine":
        slot.record = combine_records(slot.record, _seed(record, options), options.conflict_resolution)
    elif strategy == "override":
        slot.record = _seed(record, options)
    elif strategy == "average":
        slot.record[options.value_field] = slot.total / slot.count
    elif strategy == "sum":
        slot.record[options.value_field] = slot.total
    else:
        raise AssertionError(f"unhandled merge strategy: {strategy}")


def merge_datasets(
    datasets: Sequence[Sequence[Record]],
    options: DataMergeOptions | Mapping[str, Any],
) -> list[dict[str, Any]]:
    """Merge records sharing a key across datasets, keeping first-seen key order.

    Returns one record per distinct key value.
    """
    resolved = coerce_options(DataMergeOptions, options)

    slots: dict[Any, _MergeSlot] = {}
    n_records = 0
    for dataset_idx, dataset in enumerate(datasets):
        for record_idx, record in enumerate(dataset):
            n_records += 1
            key = key_of(record, resolved.key_field)
            try:
                slot = slots.get(key)
            except TypeError as exc:
                raise ValueError(
                    f"dataset {dataset_idx} record {record_idx}: "
                    f"key field '{resolved.key_field}' is not hashable: {key!r}"
                ) from exc
            if slot is None:
                seeded = _seed(record, resolved)
                slots[key] = _MergeSlot(
                    record=seeded, count=1, total=seeded[resolved.value_field]
                )
                continue
            _absorb(slot, record, resolved)

    LOGGER.debug(
        "Merged %d records from %d datasets into %d keys using %s",
        n_records,
        len(datasets),
        len(slots),
        resolved.merge_strategy,
    )
    return [slot.record for slot in slots.values()]

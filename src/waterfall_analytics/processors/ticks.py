from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from typing import Any

from waterfall_analytics.errors import ConfigurationError
from waterfall_analytics.options import TickGenerationOptions, coerce_options

LOGGER = logging.getLogger(__name__)

MAX_TICKS = 10_000
NICE_MULTIPLIERS = (1.0, 2.0, 5.0, 10.0)
_EXTRA_DIGITS = 6
_ROUNDNESS_EXPONENTS = range(15, -13, -1)


def nice_step(raw_step: float) -> float:
    """Round ``raw_step`` up to the nearest 1, 2 or 5 times a power of ten."""
    if raw_step <= 0 or not math.isfinite(raw_step):
        raise ValueError(f"raw_step must be finite and > 0, got {raw_step!r}")
    exponent = math.floor(math.log10(raw_step))
    base = 10.0**exponent
    for multiplier in NICE_MULTIPLIERS:
        candidate = multiplier * base
        if candidate >= raw_step:
            return candidate
    return 10.0 * base


def _step_digits(step: float) -> int:
    return max(0, -math.floor(math.log10(step))) + _EXTRA_DIGITS


def roundness(value: float) -> float:
    """Exponent of the largest power of ten that divides ``value``; zero is roundest."""
    if value == 0:
        return math.inf
    for exponent in _ROUNDNESS_EXPONENTS:
        scaled = value / 10.0**exponent
        nearest = round(scaled)
        if nearest != 0 and math.isclose(scaled, nearest, rel_tol=0.0, abs_tol=1e-9):
            return float(exponent)
    return -math.inf


def merge_close_ticks(ticks: Sequence[float], threshold: float) -> list[float]:
    """Collapse neighbouring ticks closer than ``threshold``.

    Interior conflicts keep the rounder tick. The first and last ticks always survive so
    the covered range is unchanged.
    """
    if threshold <= 0 or len(ticks) < 2:
        return list(ticks)
    last_index = len(ticks) - 1
    kept = [ticks[0]]
    for idx in range(1, len(ticks)):
        tick = ticks[idx]
        if tick - kept[-1] >= threshold:
            kept.append(tick)
            continue
        previous_is_first = len(kept) == 1
        if idx == last_index:
            if previous_is_first:
                kept.append(tick)
            else:
                kept[-1] = tick
        elif not previous_is_first and roundness(tick) > roundness(kept[-1]):
            kept[-1] = tick
    return kept


def resolve_domain(domain: Sequence[float]) -> tuple[float, float]:
    if len(domain) != 2:
        raise ValueError(f"domain must have exactly two bounds, got {len(domain)}")
    lo, hi = float(domain[0]), float(domain[1])
    if not (math.isfinite(lo) and math.isfinite(hi)):
        raise ValueError(f"domain bounds must be finite, got [{lo}, {hi}]")
    return (lo, hi) if lo <= hi else (hi, lo)


def generate_custom_ticks(
    domain: Sequence[float],
    options: TickGenerationOptions | Mapping[str, Any] | None = None,
) -> list[float]:
    """Ascending, unique axis ticks covering ``domain``."""
    resolved = coerce_options(TickGenerationOptions, options)
    lo, hi = resolve_domain(domain)

    if resolved.step is not None:
        step = float(resolved.step)
    elif hi == lo:
        return [lo]
    else:
        step = (hi - lo) / float(resolved.count or 1)
        if resolved.nice:
            step = nice_step(step)

    if (hi - lo) / step > MAX_TICKS:
        raise ConfigurationError(
            f"step {step!r} would produce more than {MAX_TICKS} ticks for domain [{lo}, {hi}]"
        )

    digits = _step_digits(step)
    index = math.floor(lo / step)
    if round(index * step, digits) > lo:
        index -= 1
    ticks = [round(index * step, digits)]
    while ticks[-1] < hi:
        index += 1
        ticks.append(round(index * step, digits))

    if resolved.include_zero and lo <= 0.0 <= hi and 0.0 not in ticks:
        ticks.append(0.0)

    ticks = sorted(set(ticks))
    merged = merge_close_ticks(ticks, resolved.threshold)
    LOGGER.debug("Generated %d ticks (step=%s) for domain [%s, %s]", len(merged), step, lo, hi)
    return merged


def format_tick(value: float, fmt: str | None = None) -> str:
    """Render a tick with a format spec, or in compact K/M/B notation."""
    if fmt:
        return format(value, fmt)
    if value == 0:
        return "0"
    magnitude = abs(value)
    if magnitude >= 1e9:
        return f"{value / 1e9:.1f}B"
    if magnitude >= 1e6:
        return f"{value / 1e6:.1f}M"
    if magnitude >= 1e3:
        return f"{value / 1e3:.1f}K"
    if magnitude < 1 or not float(value).is_integer():
        return f"{value:g}"
    return f"{value:.0f}"


def format_ticks(ticks: Sequence[float], fmt: str | None = None) -> list[str]:
    return [format_tick(tick, fmt) for tick in ticks]

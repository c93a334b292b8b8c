"""
Context Builder: bars + ChecklistConfig -> BarContext.

Computes the upstream series (fast/slow EMA of closes, session VWAP,
anchored VWAP) and packs the current and previous values for one bar
into a BarContext.

The classifier must not be invoked with incomplete inputs, so this stage
withholds the context (returns None) when:
    - fewer than MIN_HISTORY_BARS bars are available up to the index
    - the anchored VWAP at the index or the bar before it is missing or
      non-finite (anchor not yet established)

Pure function; no I/O.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

from checklist_core.contracts import Bar, BarContext
from checklist_core.indicators import anchored_vwap_series, ema_series, session_vwap_series

if TYPE_CHECKING:
    from config.checklist_config import ChecklistConfig


MIN_HISTORY_BARS = 3


@dataclass(frozen=True)
class UpstreamSeries:
    """Per-bar indicator values aligned with the input bars."""

    fast_ema: list[float]
    slow_ema: list[float]
    session_vwap: list[float]
    anchored_vwap: list[float | None]

    def __len__(self) -> int:
        return len(self.fast_ema)


def compute_series(bars: Sequence[Bar], config: ChecklistConfig) -> UpstreamSeries:
    """Compute every upstream series over *bars* (oldest first)."""
    closes = [b.close for b in bars]
    tz = config.session_tz
    return UpstreamSeries(
        fast_ema=ema_series(closes, config.indicators.fast_ema_period),
        slow_ema=ema_series(closes, config.indicators.slow_ema_period),
        session_vwap=session_vwap_series(bars, tz),
        anchored_vwap=anchored_vwap_series(
            bars, config.anchor.mode, tz, anchor_ts=config.anchor.timestamp,
        ),
    )


def _finite(value: float | None) -> bool:
    return value is not None and math.isfinite(value)


def context_at(
    bars: Sequence[Bar],
    series: UpstreamSeries,
    index: int,
    tick_size: float,
) -> BarContext | None:
    """Build the BarContext for bars[index], or None if it must be withheld."""
    if index < 0:
        index += len(bars)
    if index < MIN_HISTORY_BARS - 1 or index >= len(bars):
        return None

    avwap_current = series.anchored_vwap[index]
    avwap_previous = series.anchored_vwap[index - 1]
    if not (_finite(avwap_current) and _finite(avwap_previous)):
        return None

    return BarContext(
        price=bars[index].close,
        fast_average=series.fast_ema[index],
        slow_average=series.slow_ema[index],
        fast_average_previous=series.fast_ema[index - 1],
        session_average=series.session_vwap[index],
        anchored_average_current=avwap_current,
        anchored_average_previous=avwap_previous,
        tick_size=tick_size,
    )


def build_bar_context(
    bars: Sequence[Bar],
    config: ChecklistConfig,
    index: int = -1,
) -> BarContext | None:
    """Build the BarContext for one bar using only bars up to and including it.

    Parameters
    ----------
    bars:
        Ordered bar history (oldest first).
    config:
        Checklist configuration (EMA periods, session timezone, anchor, tick size).
    index:
        Bar to evaluate; negative values count from the end (default: last bar).
    """
    if index < 0:
        index += len(bars)
    if index < 0 or index >= len(bars):
        return None
    history = bars[: index + 1]
    series = compute_series(history, config)
    return context_at(history, series, index, config.instrument.tick_size)

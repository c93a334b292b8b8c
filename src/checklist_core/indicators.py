"""
Upstream series: EMA, session VWAP, anchored VWAP.

These are the collaborator series the classifier consumes; the classifier
itself never computes them. Every output value at index i depends only
on bars[0..i] (no lookahead), so a series computed once over a full
history equals the series recomputed bar by bar.

VWAP accumulates typical price * volume over a window:

    VWAP = sum((H + L + C) / 3 * V) / sum(V)

When the window has no volume yet, the typical price of the current bar
is used instead.

Pure functions; no I/O.
"""

from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from typing import Callable, Hashable, Sequence

from checklist_core.contracts import AnchorMode, Bar


def ema_series(values: Sequence[float], period: int) -> list[float]:
    """Exponential moving average, alpha = 2 / (period + 1), seeded with values[0]."""
    if period < 1:
        raise ValueError(f"EMA period must be >= 1, got {period}")
    alpha = 2.0 / (period + 1)
    out: list[float] = []
    for value in values:
        if not out:
            out.append(float(value))
        else:
            out.append(alpha * value + (1 - alpha) * out[-1])
    return out


def _local(ts: datetime, tz: tzinfo) -> datetime:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(tz)


def session_key(ts: datetime, tz: tzinfo) -> Hashable:
    """Calendar date of *ts* in the session timezone."""
    return _local(ts, tz).date()


def week_key(ts: datetime, tz: tzinfo) -> Hashable:
    """ISO (year, week) of *ts* in the session timezone."""
    iso = _local(ts, tz).isocalendar()
    return (iso[0], iso[1])


def _vwap_with_resets(
    bars: Sequence[Bar],
    key_fn: Callable[[Bar], Hashable],
) -> list[float]:
    """Cumulative VWAP that restarts whenever key_fn(bar) changes."""
    out: list[float] = []
    pv_sum = 0.0
    vol_sum = 0.0
    current_key: Hashable = object()
    for bar in bars:
        key = key_fn(bar)
        if key != current_key:
            current_key = key
            pv_sum = 0.0
            vol_sum = 0.0
        typical = bar.typical_price()
        pv_sum += typical * bar.volume
        vol_sum += bar.volume
        out.append(pv_sum / vol_sum if vol_sum > 0 else typical)
    return out


def session_vwap_series(bars: Sequence[Bar], tz: tzinfo) -> list[float]:
    """Session VWAP, reset at the first bar of each session date in *tz*."""
    return _vwap_with_resets(bars, lambda b: session_key(b.timestamp, tz))


def anchored_vwap_series(
    bars: Sequence[Bar],
    mode: AnchorMode,
    tz: tzinfo,
    anchor_ts: datetime | None = None,
) -> list[float | None]:
    """VWAP accumulated from an anchor bar.

    WEEK_OPEN     anchor restarts at the first bar of each ISO week (in *tz*)
    TIMESTAMP     anchor is the first bar at or after *anchor_ts*; earlier
                  entries are None (anchor not yet established)
    WINDOW_START  anchor is bars[0]
    """
    if mode == AnchorMode.WEEK_OPEN:
        return list(_vwap_with_resets(bars, lambda b: week_key(b.timestamp, tz)))

    if mode == AnchorMode.WINDOW_START:
        return list(_vwap_with_resets(bars, lambda b: 0))

    if mode == AnchorMode.TIMESTAMP:
        if anchor_ts is None:
            raise ValueError("anchor_ts is required for TIMESTAMP anchor mode")
        if anchor_ts.tzinfo is None:
            anchor_ts = anchor_ts.replace(tzinfo=timezone.utc)
        start = next(
            (i for i, b in enumerate(bars) if _local(b.timestamp, timezone.utc) >= anchor_ts),
            len(bars),
        )
        established = _vwap_with_resets(bars[start:], lambda b: 0)
        return [None] * start + list(established)

    raise ValueError(f"Unsupported anchor mode: {mode!r}")

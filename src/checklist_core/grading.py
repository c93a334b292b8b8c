"""
Entry Grader: TrendRegime + BarContext + GradingParameters -> EntryQuality.

Long and short are graded independently with mirrored polarity. Each
grader is a cascade of guard clauses, first match wins:

    1. FORBIDDEN  hard floor; nothing below can override it
    2. OPTIMAL    best regime, aligned anchor, distance inside [min, max]
    3. FAVORABLE  acceptable regime, aligned anchor, 0 < distance <= max + 5
    4. RISKY      unconditional default

The short FAVORABLE band admits BULL as well as BEAR (transitional
regimes). This is not the mirror image of the long side and must stay as is.

Pure functions; no I/O.
"""

from __future__ import annotations

from checklist_core.contracts import (
    BarContext,
    Direction,
    EntryQuality,
    GradingParameters,
    TrendRegime,
)

FAVORABLE_EXTENSION_TICKS = 5

_LONG_FAVORABLE_REGIMES = frozenset({TrendRegime.STRONG_BULL, TrendRegime.BULL})
_SHORT_FAVORABLE_REGIMES = frozenset({TrendRegime.BEAR, TrendRegime.BULL})


# ---------------------------------------------------------------------------
# Shared distance helpers
# ---------------------------------------------------------------------------


def distance_in_ticks(ctx: BarContext) -> float:
    """|price - anchored average| expressed in ticks.

    ``ctx.tick_size`` must be positive; that is the caller's precondition.
    """
    return abs(ctx.price - ctx.anchored_average_current) / ctx.tick_size


def within_ideal_distance(distance_ticks: float, params: GradingParameters) -> bool:
    """min <= distance <= max, both ends inclusive."""
    return params.min_distance_ticks <= distance_ticks <= params.max_distance_ticks


def within_reasonable_distance(distance_ticks: float, params: GradingParameters) -> bool:
    """0 < distance <= max + FAVORABLE_EXTENSION_TICKS."""
    return 0 < distance_ticks <= params.max_distance_ticks + FAVORABLE_EXTENSION_TICKS


# ---------------------------------------------------------------------------
# Long
# ---------------------------------------------------------------------------


def grade_long(regime: TrendRegime, ctx: BarContext, params: GradingParameters) -> EntryQuality:
    """Grade a potential long entry."""
    anchor_up_or_flat = ctx.anchored_average_current >= ctx.anchored_average_previous
    anchor_down = ctx.anchored_average_current < ctx.anchored_average_previous
    price_above_anchor = ctx.price >= ctx.anchored_average_current
    price_above_session = ctx.price > ctx.session_average
    price_below_session = ctx.price < ctx.session_average

    if regime == TrendRegime.BEAR or not price_above_anchor or anchor_down or price_below_session:
        return EntryQuality.FORBIDDEN

    distance = distance_in_ticks(ctx)

    if (
        regime == TrendRegime.STRONG_BULL
        and price_above_anchor
        and anchor_up_or_flat
        and price_above_session
        and within_ideal_distance(distance, params)
    ):
        return EntryQuality.OPTIMAL

    if (
        regime in _LONG_FAVORABLE_REGIMES
        and price_above_anchor
        and anchor_up_or_flat
        and within_reasonable_distance(distance, params)
    ):
        return EntryQuality.FAVORABLE

    return EntryQuality.RISKY


# ---------------------------------------------------------------------------
# Short (mirror, with the widened FAVORABLE regime set)
# ---------------------------------------------------------------------------


def grade_short(regime: TrendRegime, ctx: BarContext, params: GradingParameters) -> EntryQuality:
    """Grade a potential short entry."""
    anchor_down_or_flat = ctx.anchored_average_current <= ctx.anchored_average_previous
    anchor_up = ctx.anchored_average_current > ctx.anchored_average_previous
    price_below_anchor = ctx.price <= ctx.anchored_average_current
    price_below_session = ctx.price < ctx.session_average
    price_above_session = ctx.price > ctx.session_average

    if regime == TrendRegime.STRONG_BULL or not price_below_anchor or anchor_up or price_above_session:
        return EntryQuality.FORBIDDEN

    distance = distance_in_ticks(ctx)

    if (
        regime == TrendRegime.BEAR
        and price_below_anchor
        and anchor_down_or_flat
        and price_below_session
        and within_ideal_distance(distance, params)
    ):
        return EntryQuality.OPTIMAL

    if (
        regime in _SHORT_FAVORABLE_REGIMES
        and price_below_anchor
        and anchor_down_or_flat
        and within_reasonable_distance(distance, params)
    ):
        return EntryQuality.FAVORABLE

    return EntryQuality.RISKY


def grade(
    direction: Direction,
    regime: TrendRegime,
    ctx: BarContext,
    params: GradingParameters,
) -> EntryQuality:
    """Dispatch to the long or short grader."""
    if direction == Direction.LONG:
        return grade_long(regime, ctx, params)
    return grade_short(regime, ctx, params)

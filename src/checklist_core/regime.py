"""
Regime Classifier: BarContext -> TrendRegime.

Uses the fast/slow EMA pair, the fast EMA slope (vs previous bar) and
price vs session VWAP. Pure function; no I/O, no failure modes.

Rules are evaluated in order, first match wins:
    1. STRONG_BULL  price > fast, fast > slow, price > session, fast rising
    2. BEAR         price < fast, fast < slow, price < session, fast falling
    3. BULL         price > fast, fast > slow
    4. BEAR         price < fast, fast < slow
    5. NEUTRAL      otherwise

Equality (e.g. price == fast) is neither above nor below and falls
through toward NEUTRAL.
"""

from __future__ import annotations

from checklist_core.contracts import BarContext, TrendRegime


def is_bull_structure(ctx: BarContext) -> bool:
    """Price above the fast EMA and fast EMA above the slow EMA."""
    return ctx.price > ctx.fast_average and ctx.fast_average > ctx.slow_average


def is_bear_structure(ctx: BarContext) -> bool:
    """Price below the fast EMA and fast EMA below the slow EMA."""
    return ctx.price < ctx.fast_average and ctx.fast_average < ctx.slow_average


def classify_regime(ctx: BarContext) -> TrendRegime:
    """Classify the trend regime for the current bar."""
    fast_slope_up = ctx.fast_average > ctx.fast_average_previous
    fast_slope_down = ctx.fast_average < ctx.fast_average_previous
    price_above_session = ctx.price > ctx.session_average
    price_below_session = ctx.price < ctx.session_average

    bull = is_bull_structure(ctx)
    bear = is_bear_structure(ctx)

    if bull and price_above_session and fast_slope_up:
        return TrendRegime.STRONG_BULL

    if bear and price_below_session and fast_slope_down:
        return TrendRegime.BEAR

    if bull:
        return TrendRegime.BULL

    # Weak bear: structure only, without the session/slope confirmation.
    if bear:
        return TrendRegime.BEAR

    return TrendRegime.NEUTRAL

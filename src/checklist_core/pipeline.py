"""
Pipeline orchestrator: chains Context Builder -> Regime -> Graders.

Single entry point for processing one bar, plus a replay helper that walks
a bar history in order. Matches the evaluation order:

    1. Context Builder:  bars -> BarContext (or withheld)
    2. Regime:           BarContext -> TrendRegime
    3. Graders:          TrendRegime + BarContext -> EntryQuality (long, short)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

from checklist_core.context_builder import compute_series, context_at
from checklist_core.contracts import Bar, BarContext, ChecklistResult, GradingParameters
from checklist_core.grading import distance_in_ticks, grade_long, grade_short
from checklist_core.regime import classify_regime

if TYPE_CHECKING:
    from config.checklist_config import ChecklistConfig

logger = logging.getLogger("avwap.pipeline")


def evaluate_bar(
    ctx: BarContext,
    params: GradingParameters,
    *,
    bar: Bar | None = None,
    bar_index: int | None = None,
) -> ChecklistResult:
    """Classify the regime, then grade both directions, for one BarContext."""
    regime = classify_regime(ctx)
    return ChecklistResult(
        regime=regime,
        long_quality=grade_long(regime, ctx, params),
        short_quality=grade_short(regime, ctx, params),
        distance_ticks=distance_in_ticks(ctx),
        context=ctx,
        timestamp=bar.timestamp if bar is not None else None,
        bar_index=bar_index,
    )


def run_checklist(
    bars: Sequence[Bar],
    config: ChecklistConfig,
    index: int = -1,
) -> ChecklistResult | None:
    """Evaluate one bar (default: the last). Returns None when evaluation is withheld.

    Only bars up to and including *index* are consulted.
    """
    if index < 0:
        index += len(bars)
    if index < 0 or index >= len(bars):
        return None

    history = bars[: index + 1]
    series = compute_series(history, config)
    ctx = context_at(history, series, index, config.instrument.tick_size)
    if ctx is None:
        logger.debug("Evaluation withheld for bar %d (insufficient history or anchor)", index)
        return None
    return evaluate_bar(ctx, config.grading_parameters(), bar=history[index], bar_index=index)


def replay_checklist(bars: Sequence[Bar], config: ChecklistConfig) -> list[ChecklistResult]:
    """Evaluate every bar in order; withheld bars are skipped.

    Series are computed once. Each series value only depends on earlier
    bars, so the result equals calling run_checklist bar by bar.
    """
    series = compute_series(bars, config)
    params = config.grading_parameters()
    tick_size = config.instrument.tick_size

    results: list[ChecklistResult] = []
    skipped = 0
    for i, bar in enumerate(bars):
        ctx = context_at(bars, series, i, tick_size)
        if ctx is None:
            skipped += 1
            continue
        results.append(evaluate_bar(ctx, params, bar=bar, bar_index=i))

    logger.info("Replayed %d bars (%d evaluated, %d withheld)", len(bars), len(results), skipped)
    return results

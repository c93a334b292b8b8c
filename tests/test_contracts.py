"""Tests for checklist-core contracts: enum ordering, parameter validation, immutability."""

from dataclasses import FrozenInstanceError
from datetime import datetime, timezone

import pytest

from checklist_core.contracts import (
    Bar,
    BarContext,
    ChecklistResult,
    Direction,
    EntryQuality,
    GradingParameters,
    TrendRegime,
)


def _context() -> BarContext:
    return BarContext(
        price=100.0,
        fast_average=99.5,
        slow_average=99.0,
        fast_average_previous=99.4,
        session_average=99.2,
        anchored_average_current=98.0,
        anchored_average_previous=97.9,
        tick_size=0.25,
    )


class TestEntryQuality:

    def test_rank_order(self) -> None:
        ranks = [q.rank for q in (EntryQuality.FORBIDDEN, EntryQuality.RISKY, EntryQuality.FAVORABLE, EntryQuality.OPTIMAL)]
        assert ranks == [1, 2, 3, 4]

    def test_rank_orders_unlike_strings(self) -> None:
        # Alphabetically FAVORABLE < FORBIDDEN; by grade it is the other way round.
        assert EntryQuality.FAVORABLE.rank > EntryQuality.FORBIDDEN.rank

    def test_str_enum_values(self) -> None:
        assert EntryQuality("OPTIMAL") is EntryQuality.OPTIMAL
        assert TrendRegime("STRONG_BULL") is TrendRegime.STRONG_BULL


class TestGradingParameters:

    def test_valid(self) -> None:
        p = GradingParameters(min_distance_ticks=3, max_distance_ticks=20)
        assert p.min_distance_ticks == 3
        assert p.max_distance_ticks == 20

    def test_min_above_max_is_allowed(self) -> None:
        p = GradingParameters(min_distance_ticks=30, max_distance_ticks=20)
        assert p.min_distance_ticks > p.max_distance_ticks

    @pytest.mark.parametrize("min_t,max_t", [(0, 20), (3, 0), (-1, 5)])
    def test_bounds_below_one_rejected(self, min_t: int, max_t: int) -> None:
        with pytest.raises(ValueError, match="must be >= 1"):
            GradingParameters(min_distance_ticks=min_t, max_distance_ticks=max_t)


class TestFrozen:

    def test_bar_context_frozen(self) -> None:
        ctx = _context()
        with pytest.raises(FrozenInstanceError):
            ctx.price = 1.0  # type: ignore[misc]

    def test_bar_typical_price(self) -> None:
        bar = Bar(100.0, 103.0, 97.0, 102.0, 1_000, datetime(2024, 1, 2, tzinfo=timezone.utc), "SPY")
        assert bar.typical_price() == pytest.approx(100.666666, rel=1e-6)


def test_result_quality_for() -> None:
    result = ChecklistResult(
        regime=TrendRegime.STRONG_BULL,
        long_quality=EntryQuality.OPTIMAL,
        short_quality=EntryQuality.FORBIDDEN,
        distance_ticks=8.0,
        context=_context(),
    )
    assert result.quality_for(Direction.LONG) == EntryQuality.OPTIMAL
    assert result.quality_for(Direction.SHORT) == EntryQuality.FORBIDDEN

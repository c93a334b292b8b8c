"""Tests for the regime classifier: cascade order, equality handling, properties."""

import itertools

import pytest

from checklist_core.contracts import BarContext, TrendRegime
from checklist_core.regime import classify_regime, is_bear_structure, is_bull_structure


def _ctx(
    price: float = 100.0,
    fast: float = 100.0,
    slow: float = 100.0,
    fast_prev: float = 100.0,
    session: float = 100.0,
) -> BarContext:
    return BarContext(
        price=price,
        fast_average=fast,
        slow_average=slow,
        fast_average_previous=fast_prev,
        session_average=session,
        anchored_average_current=100.0,
        anchored_average_previous=100.0,
        tick_size=0.25,
    )


class TestScenarios:

    def test_strong_bull(self) -> None:
        ctx = _ctx(price=105, fast=104, slow=100, fast_prev=102, session=103)
        assert classify_regime(ctx) == TrendRegime.STRONG_BULL

    def test_bull_when_price_below_session(self) -> None:
        ctx = _ctx(price=105, fast=104, slow=100, fast_prev=102, session=106)
        assert classify_regime(ctx) == TrendRegime.BULL

    def test_bull_when_fast_flat(self) -> None:
        ctx = _ctx(price=105, fast=104, slow=100, fast_prev=104, session=103)
        assert classify_regime(ctx) == TrendRegime.BULL

    def test_strong_bear(self) -> None:
        ctx = _ctx(price=95, fast=96, slow=100, fast_prev=98, session=97)
        assert classify_regime(ctx) == TrendRegime.BEAR

    def test_weak_bear_structure_only(self) -> None:
        """Bear structure without session/slope confirmation is still BEAR."""
        ctx = _ctx(price=95, fast=96, slow=100, fast_prev=95, session=94)
        assert classify_regime(ctx) == TrendRegime.BEAR

    def test_neutral_mixed_structure(self) -> None:
        ctx = _ctx(price=105, fast=104, slow=106, fast_prev=102, session=103)
        assert classify_regime(ctx) == TrendRegime.NEUTRAL

    def test_neutral_all_equal(self) -> None:
        assert classify_regime(_ctx()) == TrendRegime.NEUTRAL


class TestEquality:
    """Equal values are neither above nor below."""

    def test_price_equals_fast(self) -> None:
        ctx = _ctx(price=104, fast=104, slow=100, fast_prev=102, session=103)
        assert classify_regime(ctx) == TrendRegime.NEUTRAL

    def test_fast_equals_slow(self) -> None:
        ctx = _ctx(price=95, fast=100, slow=100, fast_prev=101, session=97)
        assert classify_regime(ctx) == TrendRegime.NEUTRAL

    def test_price_equals_session_downgrades_strong_bull(self) -> None:
        ctx = _ctx(price=105, fast=104, slow=100, fast_prev=102, session=105)
        assert classify_regime(ctx) == TrendRegime.BULL


class TestStructurePredicates:

    def test_bull_structure(self) -> None:
        assert is_bull_structure(_ctx(price=105, fast=104, slow=100)) is True
        assert is_bull_structure(_ctx(price=103, fast=104, slow=100)) is False

    def test_bear_structure(self) -> None:
        assert is_bear_structure(_ctx(price=95, fast=96, slow=100)) is True
        assert is_bear_structure(_ctx(price=97, fast=96, slow=100)) is False


# ---------------------------------------------------------------------------
# Properties over a small grid of inputs
# ---------------------------------------------------------------------------

_LEVELS = (99.0, 100.0, 101.0)
_GRID = [
    _ctx(price=p, fast=f, slow=s, fast_prev=fp, session=sv)
    for p, f, s, fp, sv in itertools.product(_LEVELS, repeat=5)
]


@pytest.mark.parametrize("ctx", _GRID)
def test_always_one_regime(ctx: BarContext) -> None:
    assert classify_regime(ctx) in set(TrendRegime)


@pytest.mark.parametrize("ctx", _GRID)
def test_deterministic(ctx: BarContext) -> None:
    assert classify_regime(ctx) == classify_regime(ctx)


def test_strong_bull_implies_bull_structure() -> None:
    strong = [ctx for ctx in _GRID if classify_regime(ctx) == TrendRegime.STRONG_BULL]
    assert strong, "grid should contain at least one STRONG_BULL context"
    assert all(is_bull_structure(ctx) for ctx in strong)


def test_bear_implies_bear_structure() -> None:
    bears = [ctx for ctx in _GRID if classify_regime(ctx) == TrendRegime.BEAR]
    assert bears
    assert all(is_bear_structure(ctx) for ctx in bears)

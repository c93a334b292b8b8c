"""Pytest fixtures: bar sequences and a small checklist config for deterministic tests."""

from datetime import datetime, timedelta, timezone

import pytest

from checklist_core.contracts import AnchorMode, Bar
from config.checklist_config import (
    AnchorConfig,
    ChecklistConfig,
    GradingConfig,
    IndicatorConfig,
    InstrumentConfig,
    SessionConfig,
)

# Tuesday 2024-01-02 09:30 ET (UTC-5 in January)
SESSION_OPEN_UTC = datetime(2024, 1, 2, 14, 30, tzinfo=timezone.utc)


def _bar(i: int, close: float, symbol: str = "SPY", volume: int = 1_000, start: datetime = SESSION_OPEN_UTC) -> Bar:
    """15m bar whose typical price equals its close (symmetric high/low)."""
    return Bar(
        open=close,
        high=close + 1.0,
        low=close - 1.0,
        close=close,
        volume=volume,
        timestamp=start + timedelta(minutes=15 * i),
        symbol=symbol,
    )


@pytest.fixture
def symbol() -> str:
    return "SPY"


@pytest.fixture
def make_bar():
    return _bar


@pytest.fixture
def checklist_cfg() -> ChecklistConfig:
    """Short EMA periods so a handful of bars is enough history."""
    return ChecklistConfig(
        version="0.1",
        indicators=IndicatorConfig(fast_ema_period=3, slow_ema_period=5),
        grading=GradingConfig(min_distance_ticks=3, max_distance_ticks=20),
        instrument=InstrumentConfig(tick_size=0.01),
        session=SessionConfig(timezone="America/New_York"),
        anchor=AnchorConfig(mode=AnchorMode.WEEK_OPEN),
    )


@pytest.fixture
def uptrend_bars(symbol: str) -> list[Bar]:
    """Twelve 15m bars in one session, each close 0.10 above the prior."""
    return [_bar(i, 100.0 + 0.1 * i, symbol) for i in range(12)]


@pytest.fixture
def downtrend_bars(symbol: str) -> list[Bar]:
    """Twelve 15m bars in one session, each close 0.10 below the prior."""
    return [_bar(i, 100.0 - 0.1 * i, symbol) for i in range(12)]


@pytest.fixture
def flat_bars(symbol: str) -> list[Bar]:
    """Six identical 15m bars: every average equals price."""
    return [_bar(i, 100.0, symbol) for i in range(6)]

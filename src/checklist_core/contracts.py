"""
Data contracts for checklist-core: Bar, BarContext, GradingParameters,
TrendRegime, EntryQuality, ChecklistResult.

checklist-core consumes BarContext and produces TrendRegime + EntryQuality.
No I/O; these are plain dataclasses and closed enums.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class TrendRegime(str, Enum):
    """Directional market bias at the current bar."""

    STRONG_BULL = "STRONG_BULL"
    BULL = "BULL"
    NEUTRAL = "NEUTRAL"
    BEAR = "BEAR"


class EntryQuality(str, Enum):
    """Entry grade for one direction, ordered worst -> best.

    Compare with ``rank`` rather than the string value.
    """

    FORBIDDEN = "FORBIDDEN"
    RISKY = "RISKY"
    FAVORABLE = "FAVORABLE"
    OPTIMAL = "OPTIMAL"

    @property
    def rank(self) -> int:
        """1 (FORBIDDEN) .. 4 (OPTIMAL)."""
        return _QUALITY_RANK[self]


_QUALITY_RANK = {
    EntryQuality.FORBIDDEN: 1,
    EntryQuality.RISKY: 2,
    EntryQuality.FAVORABLE: 3,
    EntryQuality.OPTIMAL: 4,
}


class Direction(str, Enum):
    """Side being graded."""

    LONG = "LONG"
    SHORT = "SHORT"


class AnchorMode(str, Enum):
    """Where the anchored VWAP starts accumulating."""

    WEEK_OPEN = "WEEK_OPEN"
    TIMESTAMP = "TIMESTAMP"
    WINDOW_START = "WINDOW_START"


# ---------------------------------------------------------------------------
# Bars
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Bar:
    """OHLCV bar; timestamps in UTC. No indicator fields."""

    open: float
    high: float
    low: float
    close: float
    volume: int
    timestamp: datetime
    symbol: str
    bar_index: int | None = None

    def typical_price(self) -> float:
        """(high + low + close) / 3, the VWAP price input."""
        return (self.high + self.low + self.close) / 3


# ---------------------------------------------------------------------------
# Per-bar evaluation inputs / outputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BarContext:
    """Already-computed inputs for one completed bar.

    The previous-bar values are plain fields; the core owns no rolling buffer.
    """

    price: float
    fast_average: float
    slow_average: float
    fast_average_previous: float
    session_average: float
    anchored_average_current: float
    anchored_average_previous: float
    tick_size: float


@dataclass(frozen=True)
class GradingParameters:
    """Ideal distance band (in ticks) from the anchored average.

    Both bounds must be >= 1. No ordering between them is enforced:
    min > max just means the OPTIMAL band is empty.
    """

    min_distance_ticks: int
    max_distance_ticks: int

    def __post_init__(self) -> None:
        if self.min_distance_ticks < 1:
            raise ValueError(f"min_distance_ticks must be >= 1, got {self.min_distance_ticks}")
        if self.max_distance_ticks < 1:
            raise ValueError(f"max_distance_ticks must be >= 1, got {self.max_distance_ticks}")


@dataclass(frozen=True)
class ChecklistResult:
    """Output of one bar's evaluation: regime plus both entry grades."""

    regime: TrendRegime
    long_quality: EntryQuality
    short_quality: EntryQuality
    distance_ticks: float
    context: BarContext
    timestamp: datetime | None = None
    bar_index: int | None = None

    def quality_for(self, direction: Direction) -> EntryQuality:
        if direction == Direction.LONG:
            return self.long_quality
        return self.short_quality

"""
Fetch OHLCV bars from a data source. Configurable adapter; synchronous.

Fetchers only deliver completed bars. Indicator series are computed later
by the checklist core, never by the fetcher.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from checklist_core.contracts import Bar


@dataclass
class FetchResult:
    """Result of a fetch: bars and optional next cursor for pagination."""

    bars: list[Bar]
    symbol: str
    timeframe: str
    next_cursor: str | None = None


class BarFetcher(Protocol):
    """Protocol for bar fetchers. Implement per provider."""

    def fetch(
        self,
        symbol: str,
        timeframe: str,
        *,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int | None = None,
        cursor: str | None = None,
    ) -> FetchResult:
        """Fetch bars; normalize timestamps to UTC. Returns FetchResult."""
        ...


@dataclass
class StaticBarFetcher:
    """Serves a fixed list of bars, filtered by time window.

    Used in tests and for offline runs (bars loaded elsewhere).
    """

    bars: list[Bar] = field(default_factory=list)

    def fetch(
        self,
        symbol: str,
        timeframe: str,
        *,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int | None = None,
        cursor: str | None = None,
    ) -> FetchResult:
        selected = [
            b for b in self.bars
            if b.symbol == symbol
            and (start is None or b.timestamp >= start)
            and (end is None or b.timestamp <= end)
        ]
        if limit is not None:
            selected = selected[:limit]
        return FetchResult(bars=selected, symbol=symbol, timeframe=timeframe)

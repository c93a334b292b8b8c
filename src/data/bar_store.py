"""
Persist and load OHLCV bars (SQLite). Timestamps in UTC.

The store is the local stand-in for the host platform's bar series:
the checklist reads completed bars from here, oldest first.
"""

import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Sequence

from checklist_core.contracts import Bar

_COLUMNS = "ts_utc, open, high, low, close, volume"


def _utc_ts(ts: datetime) -> datetime:
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def _parse_ts(ts_utc: str) -> datetime:
    # SQLite has no native datetime; we store ISO strings
    ts = datetime.fromisoformat(ts_utc.replace("Z", "+00:00"))
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


class BarStore:
    """SQLite-backed bar storage. One file per path."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _conn(self) -> sqlite3.Connection:
        return sqlite3.connect(str(self._path))

    def _init_schema(self) -> None:
        with self._conn() as c:
            c.execute(
                """
                CREATE TABLE IF NOT EXISTS bars (
                    symbol TEXT NOT NULL,
                    timeframe TEXT NOT NULL,
                    ts_utc TEXT NOT NULL,
                    open REAL NOT NULL,
                    high REAL NOT NULL,
                    low REAL NOT NULL,
                    close REAL NOT NULL,
                    volume INTEGER NOT NULL,
                    PRIMARY KEY (symbol, timeframe, ts_utc)
                )
                """
            )

    def write_bars(self, symbol: str, timeframe: str, bars: Sequence[Bar]) -> int:
        """Upsert bars (by symbol, timeframe, ts_utc). Returns the number written."""
        rows = [
            (symbol, timeframe, _utc_ts(b.timestamp).isoformat(), b.open, b.high, b.low, b.close, b.volume)
            for b in bars
        ]
        with self._conn() as c:
            c.executemany(
                """
                INSERT OR REPLACE INTO bars (symbol, timeframe, ts_utc, open, high, low, close, volume)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                rows,
            )
        return len(rows)

    def get_bars(
        self,
        symbol: str,
        timeframe: str,
        *,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> list[Bar]:
        """Return bars in ascending time order. All timestamps in UTC."""
        q = f"SELECT {_COLUMNS} FROM bars WHERE symbol = ? AND timeframe = ?"
        params: list = [symbol, timeframe]
        if since is not None:
            q += " AND ts_utc >= ?"
            params.append(_utc_ts(since).isoformat())
        if until is not None:
            q += " AND ts_utc <= ?"
            params.append(_utc_ts(until).isoformat())
        q += " ORDER BY ts_utc ASC"
        with self._conn() as c:
            rows = c.execute(q, params).fetchall()
        return self._rows_to_bars(rows, symbol)

    def get_last_bars(self, symbol: str, timeframe: str, n: int) -> list[Bar]:
        """Return the last n bars (by time) in ascending order."""
        with self._conn() as c:
            rows = c.execute(
                f"SELECT {_COLUMNS} FROM bars WHERE symbol = ? AND timeframe = ? "
                "ORDER BY ts_utc DESC LIMIT ?",
                (symbol, timeframe, n),
            ).fetchall()
        return self._rows_to_bars(list(reversed(rows)), symbol)

    def count_bars(self, symbol: str, timeframe: str) -> int:
        """Return the total number of bars stored for a symbol/timeframe pair."""
        with self._conn() as c:
            row = c.execute(
                "SELECT COUNT(*) FROM bars WHERE symbol = ? AND timeframe = ?",
                (symbol, timeframe),
            ).fetchone()
        return row[0] if row else 0

    def latest_timestamp(self, symbol: str, timeframe: str) -> datetime | None:
        """Timestamp of the newest stored bar, or None if the series is empty."""
        with self._conn() as c:
            row = c.execute(
                "SELECT MAX(ts_utc) FROM bars WHERE symbol = ? AND timeframe = ?",
                (symbol, timeframe),
            ).fetchone()
        if not row or row[0] is None:
            return None
        return _parse_ts(row[0])

    def _rows_to_bars(self, rows: list, symbol: str) -> list[Bar]:
        return [
            Bar(
                open=o,
                high=h,
                low=l,
                close=c,
                volume=vol,
                timestamp=_parse_ts(ts_utc),
                symbol=symbol,
                bar_index=i,
            )
            for i, (ts_utc, o, h, l, c, vol) in enumerate(rows)
        ]

"""Tests for upstream series: EMA, session VWAP, anchored VWAP, no lookahead."""

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from checklist_core.contracts import AnchorMode, Bar
from checklist_core.indicators import (
    anchored_vwap_series,
    ema_series,
    session_key,
    session_vwap_series,
    week_key,
)

NY = ZoneInfo("America/New_York")


def _bar(ts: datetime, close: float, volume: int = 1_000) -> Bar:
    return Bar(close, close + 1.0, close - 1.0, close, volume, ts, "SPY")


def _utc(y: int, m: int, d: int, h: int = 15, mi: int = 0) -> datetime:
    return datetime(y, m, d, h, mi, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# EMA
# ---------------------------------------------------------------------------


class TestEma:

    def test_seeded_with_first_value(self) -> None:
        assert ema_series([10.0, 20.0], 3) == [10.0, 15.0]

    def test_period_one_tracks_input(self) -> None:
        assert ema_series([1.0, 5.0, 2.0], 1) == [1.0, 5.0, 2.0]

    def test_alpha(self) -> None:
        out = ema_series([0.0, 10.0, 10.0], 4)  # alpha = 0.4
        assert out[1] == pytest.approx(4.0)
        assert out[2] == pytest.approx(6.4)

    def test_empty(self) -> None:
        assert ema_series([], 20) == []

    def test_period_below_one_rejected(self) -> None:
        with pytest.raises(ValueError, match="period"):
            ema_series([1.0], 0)


# ---------------------------------------------------------------------------
# Session / week keys
# ---------------------------------------------------------------------------


class TestKeys:

    def test_session_key_uses_local_date(self) -> None:
        # 03:00 UTC on Jan 3 is still Jan 2 in New York.
        assert str(session_key(_utc(2024, 1, 3, 3), NY)) == "2024-01-02"

    def test_week_key_friday_vs_monday(self) -> None:
        friday = _utc(2024, 1, 5)
        monday = _utc(2024, 1, 8)
        assert week_key(friday, NY) != week_key(monday, NY)

    def test_week_key_same_week(self) -> None:
        assert week_key(_utc(2024, 1, 8), NY) == week_key(_utc(2024, 1, 12), NY)

    def test_naive_timestamp_treated_as_utc(self) -> None:
        naive = datetime(2024, 1, 3, 3, 0)
        assert session_key(naive, NY) == session_key(_utc(2024, 1, 3, 3), NY)


# ---------------------------------------------------------------------------
# Session VWAP
# ---------------------------------------------------------------------------


class TestSessionVwap:

    def test_volume_weighted(self) -> None:
        bars = [_bar(_utc(2024, 1, 2, 15), 100.0, 1_000), _bar(_utc(2024, 1, 2, 16), 110.0, 3_000)]
        out = session_vwap_series(bars, NY)
        assert out[0] == pytest.approx(100.0)
        assert out[1] == pytest.approx(107.5)

    def test_resets_each_session(self) -> None:
        bars = [
            _bar(_utc(2024, 1, 2, 15), 100.0),
            _bar(_utc(2024, 1, 2, 16), 110.0),
            _bar(_utc(2024, 1, 3, 15), 120.0),
        ]
        out = session_vwap_series(bars, NY)
        assert out[1] == pytest.approx(105.0)
        assert out[2] == pytest.approx(120.0)

    def test_zero_volume_falls_back_to_typical_price(self) -> None:
        bars = [_bar(_utc(2024, 1, 2, 15), 100.0, 0), _bar(_utc(2024, 1, 2, 16), 102.0, 0)]
        assert session_vwap_series(bars, NY) == [pytest.approx(100.0), pytest.approx(102.0)]


# ---------------------------------------------------------------------------
# Anchored VWAP
# ---------------------------------------------------------------------------


class TestAnchoredVwap:

    def _week_bars(self) -> list[Bar]:
        # Thu, Fri, then Mon, Tue of the next ISO week.
        return [
            _bar(_utc(2024, 1, 4), 100.0),
            _bar(_utc(2024, 1, 5), 110.0),
            _bar(_utc(2024, 1, 8), 90.0),
            _bar(_utc(2024, 1, 9), 100.0),
        ]

    def test_week_open_resets_on_new_week(self) -> None:
        out = anchored_vwap_series(self._week_bars(), AnchorMode.WEEK_OPEN, NY)
        assert out == [
            pytest.approx(100.0),
            pytest.approx(105.0),
            pytest.approx(90.0),
            pytest.approx(95.0),
        ]

    def test_week_open_spans_sessions(self) -> None:
        bars = self._week_bars()
        anchored = anchored_vwap_series(bars, AnchorMode.WEEK_OPEN, NY)
        session = session_vwap_series(bars, NY)
        assert anchored[1] != session[1]

    def test_window_start_never_resets(self) -> None:
        out = anchored_vwap_series(self._week_bars(), AnchorMode.WINDOW_START, NY)
        assert out[-1] == pytest.approx(100.0)

    def test_timestamp_anchor_none_before_anchor(self) -> None:
        bars = self._week_bars()
        out = anchored_vwap_series(bars, AnchorMode.TIMESTAMP, NY, anchor_ts=_utc(2024, 1, 5))
        assert out[0] is None
        assert out[1] == pytest.approx(110.0)
        assert out[3] == pytest.approx(100.0)

    def test_timestamp_anchor_after_all_bars(self) -> None:
        out = anchored_vwap_series(self._week_bars(), AnchorMode.TIMESTAMP, NY, anchor_ts=_utc(2025, 1, 1))
        assert out == [None, None, None, None]

    def test_timestamp_anchor_required(self) -> None:
        with pytest.raises(ValueError, match="anchor_ts"):
            anchored_vwap_series(self._week_bars(), AnchorMode.TIMESTAMP, NY)


def test_series_have_no_lookahead() -> None:
    """A prefix of the history yields a prefix of every series."""
    start = _utc(2024, 1, 4, 14, 30)
    bars = [_bar(start + timedelta(hours=6 * i), 100.0 + (i % 5) - 2, 1_000 + 100 * i) for i in range(20)]
    full_session = session_vwap_series(bars, NY)
    full_anchor = anchored_vwap_series(bars, AnchorMode.WEEK_OPEN, NY)
    full_ema = ema_series([b.close for b in bars], 5)
    for k in (1, 7, 13):
        assert session_vwap_series(bars[:k], NY) == full_session[:k]
        assert anchored_vwap_series(bars[:k], AnchorMode.WEEK_OPEN, NY) == full_anchor[:k]
        assert ema_series([b.close for b in bars[:k]], 5) == full_ema[:k]

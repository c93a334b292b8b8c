"""
Live checklist scheduler: market-aware loop that ingests bars and
re-grades the latest bar at each bar close.

US equity regular session: 9:30 AM – 4:00 PM Eastern.
Sleeps overnight and on weekends.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import click

from checklist_core.contracts import Bar, ChecklistResult, Direction
from checklist_core.pipeline import run_checklist
from cli.output import format_scan
from cli.structured_log import StructuredEventLogger
from config.checklist_config import ChecklistConfig
from config.loader import AppConfig
from data.bar_store import BarStore
from data.fetcher import BarFetcher
from journal import JournalWriter

logger = logging.getLogger("avwap.scheduler")

ET = ZoneInfo("America/New_York")

MARKET_OPEN_H, MARKET_OPEN_M = 9, 30
MARKET_CLOSE_H, MARKET_CLOSE_M = 16, 0
BAR_BUFFER_SECONDS = 30
HISTORY_DAYS = 30


def parse_tf_minutes(timeframe: str) -> int:
    """Convert a timeframe string like '15m' or '1h' to minutes."""
    tf = timeframe.strip().lower()
    if tf.endswith("m"):
        return int(tf[:-1])
    if tf.endswith("h"):
        return int(tf[:-1]) * 60
    raise ValueError(f"Unsupported timeframe for live mode: {timeframe!r} (use e.g. '15m', '1h')")


def _market_open_time(day: datetime) -> datetime:
    return day.replace(hour=MARKET_OPEN_H, minute=MARKET_OPEN_M, second=0, microsecond=0)


def _market_close_time(day: datetime) -> datetime:
    return day.replace(hour=MARKET_CLOSE_H, minute=MARKET_CLOSE_M, second=0, microsecond=0)


def is_market_open(now: datetime) -> bool:
    """True if *now* (ET-aware) falls within regular market hours on a weekday."""
    if now.weekday() >= 5:
        return False
    return _market_open_time(now) <= now < _market_close_time(now)


def next_market_open(now: datetime) -> datetime:
    """Return the next market-open datetime (ET-aware), skipping weekends."""
    today_open = _market_open_time(now)
    if now < today_open and now.weekday() < 5:
        return today_open

    candidate = _market_open_time(now + timedelta(days=1))
    while candidate.weekday() >= 5:
        candidate += timedelta(days=1)
    return candidate


def next_bar_close(
    now: datetime,
    tf_minutes: int,
    market_open: datetime,
    market_close: datetime,
) -> datetime:
    """
    Return the next bar-close timestamp aligned to *tf_minutes* intervals
    starting from market open, capped at market close.
    """
    elapsed = (now - market_open).total_seconds()
    interval = tf_minutes * 60
    bars_elapsed = int(elapsed // interval) + 1
    candidate = market_open + timedelta(seconds=bars_elapsed * interval)
    return min(candidate, market_close)


@dataclass
class CycleContext:
    """Everything one evaluation cycle needs; built once by the live loop."""

    cfg: AppConfig
    checklist_cfg: ChecklistConfig
    fetcher: BarFetcher
    store: BarStore
    events: StructuredEventLogger
    journal: JournalWriter | None = None


def completed_bars(bars: list[Bar], timeframe: str, now: datetime) -> list[Bar]:
    """Drop bars whose interval has not fully elapsed at *now*."""
    span = timedelta(minutes=parse_tf_minutes(timeframe))
    return [b for b in bars if b.timestamp + span <= now]


def _report_grade_changes(
    events: StructuredEventLogger,
    previous: ChecklistResult | None,
    current: ChecklistResult,
) -> None:
    if previous is None:
        return
    for direction in Direction:
        before = previous.quality_for(direction)
        after = current.quality_for(direction)
        if before != after:
            events.grade_changed(direction.value, before.value, after.value, current.regime.value)


def run_cycle(
    cycle: CycleContext,
    now: datetime,
    previous: ChecklistResult | None = None,
) -> ChecklistResult | None:
    """Single evaluation cycle: ingest the last day, re-grade the latest completed bar.

    A bar still forming at *now* is neither stored nor graded.
    Returns the new result, or None when evaluation is withheld.
    """
    cfg = cycle.cfg
    fetched = cycle.fetcher.fetch(cfg.symbol, cfg.timeframe, start=now - timedelta(days=1), end=now)
    closed = completed_bars(fetched.bars, cfg.timeframe, now)
    if closed:
        cycle.store.write_bars(cfg.symbol, cfg.timeframe, closed)
    cycle.events.cycle_start(bar_close=now.isoformat(), bars_ingested=len(closed))

    history = cycle.store.get_bars(cfg.symbol, cfg.timeframe, since=now - timedelta(days=HISTORY_DAYS))
    bars = completed_bars(history, cfg.timeframe, now)
    result = run_checklist(bars, cycle.checklist_cfg)
    if result is None:
        reason = f"withheld ({len(bars)} bars in history)"
        cycle.events.bar_skipped(reason)
        if cycle.journal:
            cycle.journal.withheld(cfg.symbol, cfg.timeframe, reason)
        click.echo(f"[{now:%H:%M:%S}] Evaluation withheld; {len(bars)} bar(s) in history.")
        return None

    cycle.events.checklist_evaluated(
        bar_ts=result.timestamp.isoformat() if result.timestamp else "",
        regime=result.regime.value,
        long_quality=result.long_quality.value,
        short_quality=result.short_quality.value,
        distance_ticks=result.distance_ticks,
    )
    _report_grade_changes(cycle.events, previous, result)
    if cycle.journal:
        cycle.journal.checklist(cfg.symbol, cfg.timeframe, result)

    click.echo(format_scan(
        result, bars[-1], cfg.symbol, cfg.timeframe,
        show_dashboard=cycle.checklist_cfg.display.show_dashboard,
        plot_values=cycle.checklist_cfg.display.enable_plots,
    ))
    return result


def run_live_loop(cycle: CycleContext) -> None:
    """
    Main loop: sleep until each bar close, ingest, evaluate, repeat.
    Ctrl+C for graceful shutdown.
    """
    cfg = cycle.cfg
    tf_minutes = parse_tf_minutes(cfg.timeframe)
    cycles = 0
    last_result: ChecklistResult | None = None

    click.echo(f"Live checklist started: {cfg.symbol} {cfg.timeframe}")
    click.echo(f"Market hours: {MARKET_OPEN_H}:{MARKET_OPEN_M:02d}–"
               f"{MARKET_CLOSE_H}:{MARKET_CLOSE_M:02d} ET  |  Ctrl+C to stop\n")

    try:
        while True:
            now = datetime.now(ET)

            if not is_market_open(now):
                nxt = next_market_open(now)
                wait = (nxt - now).total_seconds()
                cycle.events.market_closed(next_open=nxt.isoformat(), wait_hours=wait / 3600)
                click.echo(f"[{now:%H:%M:%S} ET] Market closed. "
                           f"Sleeping until {nxt:%Y-%m-%d %H:%M} ET ({wait / 3600:.1f}h)")
                time.sleep(wait)
                continue

            nxt_bar = next_bar_close(now, tf_minutes, _market_open_time(now), _market_close_time(now))
            wake_at = nxt_bar + timedelta(seconds=BAR_BUFFER_SECONDS)
            wait = max(0, (wake_at - now).total_seconds())

            click.echo(f"[{now:%H:%M:%S} ET] Next bar close: {nxt_bar:%H:%M:%S} ET "
                       f"(sleeping {wait:.0f}s)")
            if wait > 0:
                time.sleep(wait)

            try:
                result = run_cycle(cycle, datetime.now(ET), previous=last_result)
            except Exception as exc:
                logger.exception("Checklist cycle failed")
                cycle.events.error(message="cycle failed", detail=repr(exc))
            else:
                if result is not None:
                    last_result = result
            cycles += 1

    except KeyboardInterrupt:
        cycle.events.shutdown(cycles)
        click.echo(f"\n\nShutting down after {cycles} cycle(s). Goodbye.")

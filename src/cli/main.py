"""
CLI entry point: avwap ingest | scan | replay | watch | health.

Every command loads config from --config (default config.yaml) and the
checklist parameters from --checklist-config (default
docs/config/checklist.default.json plus any per-symbol override).
Output is for human review only; nothing here places orders.
"""

import logging
import sys
from datetime import datetime, timedelta, timezone

import click
from dotenv import load_dotenv

from config import load_config

load_dotenv()

logger = logging.getLogger("avwap")


def _setup_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s  %(message)s",
        stream=sys.stderr,
    )


def _load_checklist(ctx: click.Context, symbol: str):
    from config.checklist_config import load_checklist_config

    return load_checklist_config(ctx.obj["checklist_config_path"], symbol=symbol)


def _parse_utc(value: str) -> datetime:
    """ISO date/datetime; an explicit offset is kept, naive values are UTC."""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as exc:
        raise click.BadParameter(f"not an ISO date or datetime: {value!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@click.group()
@click.option("--config", "config_path", default="config.yaml", help="Path to config file.")
@click.option(
    "--checklist-config",
    "checklist_config_path",
    default=None,
    help="Path to checklist JSON config (default: docs/config/checklist.default.json).",
)
@click.pass_context
def cli(ctx: click.Context, config_path: str, checklist_config_path: str | None) -> None:
    """avwap-checklist: trend regime and long/short entry quality around an anchored VWAP."""
    _setup_logging()
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["checklist_config_path"] = checklist_config_path


# ---------- avwap ingest ----------


@cli.command()
@click.option("--days", default=30, type=int, help="Number of calendar days to fetch.")
@click.option("--start", "start_str", default=None, help="Start date (ISO, e.g. 2024-01-01).")
@click.option("--end", "end_str", default=None, help="End date (ISO, e.g. 2024-02-01).")
@click.pass_context
def ingest(ctx: click.Context, days: int, start_str: str | None, end_str: str | None) -> None:
    """Fetch bars from Alpaca and store locally."""
    cfg = load_config(ctx.obj["config_path"])
    from data import get_alpaca_fetcher
    from data.bar_store import BarStore

    fetcher = get_alpaca_fetcher(cfg.data.api_key, cfg.data.api_secret, feed=cfg.data.feed)
    store = BarStore(cfg.data.bar_store_path)

    end_dt = _parse_utc(end_str) if end_str else datetime.now(timezone.utc)
    start_dt = _parse_utc(start_str) if start_str else end_dt - timedelta(days=days)

    click.echo(f"Fetching {cfg.symbol} {cfg.timeframe} bars from {start_dt.date()} to {end_dt.date()} ...")
    result = fetcher.fetch(cfg.symbol, cfg.timeframe, start=start_dt, end=end_dt)
    if result.bars:
        store.write_bars(cfg.symbol, cfg.timeframe, result.bars)
        click.echo(f"Stored {len(result.bars)} bars in {cfg.data.bar_store_path}")
        click.echo(f"  Range: {result.bars[0].timestamp.isoformat()} -> {result.bars[-1].timestamp.isoformat()}")
        click.echo(f"  Total bars in store: {store.count_bars(cfg.symbol, cfg.timeframe)}")
    else:
        click.echo("No bars returned. Check symbol, timeframe, date range, and API keys.")


# ---------- avwap scan ----------


@cli.command()
@click.option("--window", default=None, type=int, help="Only use the last N stored bars (default: all).")
@click.option("--plot-values", is_flag=True, default=False, help="Also print numeric plot values and colours.")
@click.option("--journal", "write_journal", is_flag=True, default=False, help="Append the result to the journal.")
@click.pass_context
def scan(ctx: click.Context, window: int | None, plot_values: bool, write_journal: bool) -> None:
    """Grade the latest stored bar: regime plus long/short entry quality."""
    cfg = load_config(ctx.obj["config_path"])
    from checklist_core.pipeline import run_checklist
    from cli.output import format_scan, format_withheld
    from data.bar_store import BarStore
    from journal import JournalWriter

    store = BarStore(cfg.data.bar_store_path)
    bars = store.get_last_bars(cfg.symbol, cfg.timeframe, window) if window else store.get_bars(cfg.symbol, cfg.timeframe)
    if not bars:
        click.echo("No bars in store. Run 'avwap ingest' first.")
        return

    checklist_cfg = _load_checklist(ctx, cfg.symbol)
    result = run_checklist(bars, checklist_cfg)
    if result is None:
        click.echo(format_withheld(cfg.symbol, cfg.timeframe, len(bars)))
        return

    click.echo(format_scan(
        result, bars[-1], cfg.symbol, cfg.timeframe,
        show_dashboard=checklist_cfg.display.show_dashboard,
        plot_values=plot_values or checklist_cfg.display.enable_plots,
    ))

    if write_journal:
        JournalWriter(cfg.journal.path, echo_stdout=cfg.journal.echo_stdout).checklist(
            cfg.symbol, cfg.timeframe, result,
        )


# ---------- avwap replay ----------


@cli.command()
@click.option("--last", "last_n", default=None, type=click.IntRange(min=1), help="Only replay the last N bars (default: all bars in store).")
@click.option("--journal", "write_journal", is_flag=True, default=False, help="Append every evaluated bar to the journal.")
@click.pass_context
def replay(ctx: click.Context, last_n: int | None, write_journal: bool) -> None:
    """Replay stored bars through the checklist and summarize regimes and grades."""
    cfg = load_config(ctx.obj["config_path"])
    from checklist_core.pipeline import replay_checklist
    from cli.output import format_replay_summary
    from data.bar_store import BarStore
    from journal import JournalWriter

    store = BarStore(cfg.data.bar_store_path)
    bars = store.get_bars(cfg.symbol, cfg.timeframe)
    if not bars:
        click.echo("No bars in store. Run 'avwap ingest' first.")
        return
    if last_n is not None:
        bars = bars[-last_n:]

    checklist_cfg = _load_checklist(ctx, cfg.symbol)
    results = replay_checklist(bars, checklist_cfg)

    if write_journal:
        journal = JournalWriter(cfg.journal.path, echo_stdout=cfg.journal.echo_stdout)
        for r in results:
            journal.checklist(cfg.symbol, cfg.timeframe, r)
        click.echo(f"Journaled {len(results)} evaluations to {cfg.journal.path}")

    click.echo(format_replay_summary(results, cfg.symbol, cfg.timeframe, len(bars)))


# ---------- avwap watch ----------


@cli.command()
@click.option("--journal/--no-journal", "write_journal", default=True, help="Journal each evaluation (default: on).")
@click.pass_context
def watch(ctx: click.Context, write_journal: bool) -> None:
    """Run continuously, re-grading the latest bar at each bar close during market hours."""
    cfg = load_config(ctx.obj["config_path"])
    from cli.scheduler import CycleContext, run_live_loop
    from cli.structured_log import StructuredEventLogger
    from data import get_alpaca_fetcher
    from data.bar_store import BarStore
    from journal import JournalWriter

    cycle = CycleContext(
        cfg=cfg,
        checklist_cfg=_load_checklist(ctx, cfg.symbol),
        fetcher=get_alpaca_fetcher(cfg.data.api_key, cfg.data.api_secret, feed=cfg.data.feed),
        store=BarStore(cfg.data.bar_store_path),
        events=StructuredEventLogger(
            cfg.symbol,
            enabled=cfg.alerting.structured_logs,
            webhook_url=cfg.alerting.webhook_url,
        ),
        journal=JournalWriter(cfg.journal.path, echo_stdout=cfg.journal.echo_stdout) if write_journal else None,
    )
    run_live_loop(cycle)


# ---------- avwap health ----------


@cli.command()
@click.pass_context
def health(ctx: click.Context) -> None:
    """Check system health: config, checklist config, bar data.

    Exit code 0 = healthy, 1 = unhealthy.
    """
    checks: list[tuple[str, bool, str]] = []

    try:
        cfg = load_config(ctx.obj["config_path"])
        checks.append(("config", True, f"loaded ({cfg.symbol} {cfg.timeframe})"))
    except Exception as e:
        checks.append(("config", False, str(e)))
        _print_health(checks)
        raise SystemExit(1)

    try:
        checklist_cfg = _load_checklist(ctx, cfg.symbol)
        g = checklist_cfg.grading
        checks.append((
            "checklist_config",
            True,
            f"validated (tick={checklist_cfg.instrument.tick_size:g}, "
            f"distance {g.min_distance_ticks}-{g.max_distance_ticks} ticks, "
            f"anchor={checklist_cfg.anchor.mode.value})",
        ))
    except Exception as e:
        checks.append(("checklist_config", False, str(e)))

    try:
        from data.bar_store import BarStore
        store = BarStore(cfg.data.bar_store_path)
        bar_count = store.count_bars(cfg.symbol, cfg.timeframe)
        latest = store.latest_timestamp(cfg.symbol, cfg.timeframe)
        if bar_count > 0 and latest is not None:
            checks.append(("bars", True, f"{bar_count} {cfg.timeframe} bars, latest {latest.isoformat()}"))
        else:
            checks.append(("bars", False, f"no {cfg.timeframe} bars for {cfg.symbol}"))
    except Exception as e:
        checks.append(("bars", False, str(e)))

    _print_health(checks)
    healthy = all(ok for _, ok, _ in checks)
    raise SystemExit(0 if healthy else 1)


def _print_health(checks: list[tuple[str, bool, str]]) -> None:
    for name, ok, detail in checks:
        status = "OK" if ok else "FAIL"
        click.echo(f"  [{status}] {name}: {detail}")
    healthy = all(ok for _, ok, _ in checks)
    click.echo(f"\nHealth: {'HEALTHY' if healthy else 'UNHEALTHY'}")


if __name__ == "__main__":
    cli()

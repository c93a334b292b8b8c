"""
Human-readable checklist output for the terminal.

This is the rendering side of the checklist: the core only produces enums,
and everything about colours, plot values and text layout lives here.
"""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING, Sequence

from checklist_core.contracts import EntryQuality, TrendRegime

if TYPE_CHECKING:
    from checklist_core.contracts import Bar, ChecklistResult


_QUALITY_COLORS = {
    EntryQuality.OPTIMAL: "DarkGreen",
    EntryQuality.FAVORABLE: "LimeGreen",
    EntryQuality.RISKY: "Orange",
    EntryQuality.FORBIDDEN: "Red",
}


def quality_color(quality: EntryQuality) -> str:
    """Brush name used for plots: OPTIMAL DarkGreen ... FORBIDDEN Red."""
    return _QUALITY_COLORS.get(quality, "Gray")


def quality_plot_value(quality: EntryQuality) -> float:
    """Numeric plot value: FORBIDDEN 1 .. OPTIMAL 4."""
    return float(quality.rank)


def format_dashboard(result: ChecklistResult) -> str:
    """Three-line dashboard panel: long grade, short grade, regime."""
    return "\n".join([
        f"LONG  : {result.long_quality.value}",
        f"SHORT : {result.short_quality.value}",
        f"Regime: {result.regime.value} | Price vs AVWAP/VWAP",
    ])


def format_scan(
    result: ChecklistResult,
    bar: Bar,
    symbol: str,
    timeframe: str,
    *,
    show_dashboard: bool = True,
    plot_values: bool = False,
) -> str:
    """Full scan output: dashboard plus the inputs behind it."""
    ctx = result.context
    lines: list[str] = [f"=== AVWAP Checklist: {symbol} {timeframe} @ {bar.timestamp.isoformat()} ==="]

    if show_dashboard:
        lines.append("")
        lines.extend("  " + row for row in format_dashboard(result).splitlines())

    lines.append("")
    lines.append(f"  Price    : {ctx.price:.2f}")
    lines.append(f"  EMA fast : {ctx.fast_average:.2f} (prev {ctx.fast_average_previous:.2f})  |  EMA slow: {ctx.slow_average:.2f}")
    lines.append(f"  VWAP     : {ctx.session_average:.2f} (session)")
    lines.append(f"  AVWAP    : {ctx.anchored_average_current:.2f} (prev {ctx.anchored_average_previous:.2f})")
    lines.append(f"  Distance : {result.distance_ticks:.1f} ticks (tick {ctx.tick_size:g})")

    if plot_values:
        lines.append("")
        lines.append(
            f"  Plot     : long={quality_plot_value(result.long_quality):.0f} ({quality_color(result.long_quality)})"
            f"  short={quality_plot_value(result.short_quality):.0f} ({quality_color(result.short_quality)})"
        )

    lines.append("===")
    return "\n".join(lines)


def format_withheld(symbol: str, timeframe: str, bar_count: int) -> str:
    return (
        f"=== AVWAP Checklist: {symbol} {timeframe} ===\n"
        f"  Evaluation withheld: not enough history or anchored VWAP not established "
        f"({bar_count} bar(s) loaded).\n"
        "==="
    )


def format_replay_summary(
    results: Sequence[ChecklistResult],
    symbol: str,
    timeframe: str,
    bars_total: int,
) -> str:
    """Regime and grade frequency tables for a replay."""
    lines = [
        f"=== Checklist Replay: {symbol} {timeframe} ===",
        f"Bars loaded      : {bars_total}",
        f"Bars evaluated   : {len(results)}",
        f"Bars withheld    : {bars_total - len(results)}",
    ]
    if results and results[0].timestamp and results[-1].timestamp:
        lines.append(f"Period           : {results[0].timestamp.isoformat()} → {results[-1].timestamp.isoformat()}")
    lines.append("")

    regimes = Counter(r.regime for r in results)
    lines.append("--- Regime ---")
    for regime in TrendRegime:
        lines.append(f"  {regime.value:12s} {regimes.get(regime, 0):>5d}")
    lines.append("")

    long_counts = Counter(r.long_quality for r in results)
    short_counts = Counter(r.short_quality for r in results)
    lines.append("--- Entry Quality ---")
    lines.append(f"  {'':12s} {'LONG':>5s} {'SHORT':>6s}")
    for quality in sorted(EntryQuality, key=lambda q: q.rank, reverse=True):
        lines.append(f"  {quality.value:12s} {long_counts.get(quality, 0):>5d} {short_counts.get(quality, 0):>6d}")

    lines.append("===")
    return "\n".join(lines)

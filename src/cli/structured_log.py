"""
Structured JSON event logger for the live checklist loop.

One JSON object per line (stderr by default), easy to ship to a log
aggregator. Every record carries ``ts``, ``event`` and ``symbol``.

Optional webhook: when a URL is configured, ``grade_changed`` and ``error``
records are also POSTed there so a human reviewer hears about grade moves
without tailing logs.
"""

from __future__ import annotations

import json
import logging
import sys
import urllib.request
from datetime import datetime, timezone
from typing import Any, TextIO

logger = logging.getLogger("avwap.events")

_ALERT_EVENTS = frozenset({"grade_changed", "error"})
WEBHOOK_TIMEOUT_SECONDS = 5


def post_json(url: str, record: dict[str, Any], timeout: float = WEBHOOK_TIMEOUT_SECONDS) -> None:
    """POST *record* as JSON. Network errors propagate to the caller."""
    req = urllib.request.Request(
        url,
        data=json.dumps(record).encode("utf-8"),
        headers={"Content-Type": "application/json"},
        method="POST",
    )
    urllib.request.urlopen(req, timeout=timeout)


class StructuredEventLogger:
    """Write checklist loop events as JSON lines; forward alerts to a webhook."""

    def __init__(
        self,
        symbol: str,
        *,
        enabled: bool = True,
        webhook_url: str = "",
        stream: TextIO | None = None,
    ) -> None:
        self._symbol = symbol
        self._enabled = enabled
        self._webhook_url = (webhook_url or "").strip()
        self._stream = stream or sys.stderr

    def _record(self, event_type: str, fields: dict[str, Any]) -> dict[str, Any]:
        return {
            "ts": datetime.now(timezone.utc).isoformat(),
            "event": event_type,
            "symbol": self._symbol,
            **fields,
        }

    def _emit(self, event_type: str, **fields: Any) -> dict[str, Any]:
        record = self._record(event_type, fields)
        if self._enabled:
            print(json.dumps(record), file=self._stream, flush=True)

        if self._webhook_url and event_type in _ALERT_EVENTS:
            try:
                post_json(self._webhook_url, record)
            except Exception as exc:
                # Alert delivery must not break the loop.
                logger.warning("Webhook POST failed for %s: %s", event_type, exc)

        return record

    # -- loop lifecycle -----------------------------------------------------

    def cycle_start(self, bar_close: str, bars_ingested: int) -> dict[str, Any]:
        return self._emit("cycle_start", bar_close=bar_close, bars_ingested=bars_ingested)

    def market_closed(self, next_open: str, wait_hours: float) -> dict[str, Any]:
        return self._emit("market_closed", next_open=next_open, wait_hours=round(wait_hours, 1))

    def shutdown(self, cycles: int) -> dict[str, Any]:
        return self._emit("shutdown", cycles=cycles)

    def error(self, message: str, detail: str = "") -> dict[str, Any]:
        return self._emit("error", message=message, detail=detail)

    # -- checklist outcomes -------------------------------------------------

    def checklist_evaluated(
        self,
        bar_ts: str,
        regime: str,
        long_quality: str,
        short_quality: str,
        distance_ticks: float,
    ) -> dict[str, Any]:
        return self._emit(
            "checklist_evaluated",
            bar_ts=bar_ts,
            regime=regime,
            long=long_quality,
            short=short_quality,
            distance_ticks=round(distance_ticks, 2),
        )

    def bar_skipped(self, reason: str) -> dict[str, Any]:
        return self._emit("bar_skipped", reason=reason)

    def grade_changed(self, direction: str, previous: str, current: str, regime: str) -> dict[str, Any]:
        return self._emit(
            "grade_changed",
            direction=direction,
            previous=previous,
            current=current,
            regime=regime,
        )

"""
Structured journal: append-only JSON lines. One ``checklist`` event per evaluated bar.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

from checklist_core.contracts import ChecklistResult


def _serialize(obj: Any) -> Any:
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if hasattr(obj, "__dict__") and not isinstance(obj, type):
        return {k: _serialize(v) for k, v in vars(obj).items() if not k.startswith("_")}
    if isinstance(obj, dict):
        return {k: _serialize(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_serialize(x) for x in obj]
    return obj


class JournalWriter:
    """Append-only journal. Each line is a JSON object with event type and payload."""

    def __init__(self, path: str | Path, *, echo_stdout: bool = False) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._echo = echo_stdout

    def _write(self, event_type: str, payload: dict) -> None:
        record = {"ts_utc": datetime.now(timezone.utc).isoformat(), "event": event_type, **payload}
        line = json.dumps(_serialize(record)) + "\n"
        with open(self._path, "a") as f:
            f.write(line)
        if self._echo:
            print(line.rstrip())

    def checklist(self, symbol: str, timeframe: str, result: ChecklistResult, **extra: Any) -> None:
        """Record one bar's regime and long/short grades with the inputs that produced them."""
        self._write(
            "checklist",
            {
                "symbol": symbol,
                "timeframe": timeframe,
                "bar_ts": result.timestamp,
                "bar_index": result.bar_index,
                "regime": result.regime,
                "long_quality": result.long_quality,
                "short_quality": result.short_quality,
                "distance_ticks": round(result.distance_ticks, 4),
                "context": result.context,
                **extra,
            },
        )

    def withheld(self, symbol: str, timeframe: str, reason: str, **extra: Any) -> None:
        """Record a bar the checklist declined to evaluate."""
        self._write("withheld", {"symbol": symbol, "timeframe": timeframe, "reason": reason, **extra})

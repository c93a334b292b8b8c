"""
checklist-core: pure AVWAP entry checklist engine.

No I/O, no network, no side effects. Consumes per-bar context, produces a
trend regime and long/short entry-quality grades. Fully deterministic and
unit-testable.
"""

from checklist_core.contracts import (
    Bar,
    BarContext,
    ChecklistResult,
    Direction,
    EntryQuality,
    GradingParameters,
    TrendRegime,
)
from checklist_core.grading import grade_long, grade_short
from checklist_core.pipeline import evaluate_bar, replay_checklist, run_checklist
from checklist_core.regime import classify_regime

__all__ = [
    "Bar",
    "BarContext",
    "ChecklistResult",
    "classify_regime",
    "Direction",
    "EntryQuality",
    "evaluate_bar",
    "grade_long",
    "grade_short",
    "GradingParameters",
    "replay_checklist",
    "run_checklist",
    "TrendRegime",
]

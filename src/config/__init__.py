"""
Configuration loaders.

App config:        reads config.yaml, resolves env vars for secrets.
Checklist config:  reads checklist.default.json (or override), validates against JSON Schema.
"""

from config.checklist_config import (
    AnchorConfig,
    ChecklistConfig,
    ChecklistConfigError,
    DisplayConfig,
    GradingConfig,
    IndicatorConfig,
    InstrumentConfig,
    SessionConfig,
    load_checklist_config,
)
from config.loader import (
    AlertingConfig,
    AppConfig,
    DataConfig,
    JournalConfig,
    load_config,
)

__all__ = [
    # App config (YAML)
    "AlertingConfig",
    "AppConfig",
    "DataConfig",
    "JournalConfig",
    "load_config",
    # Checklist config (JSON + schema)
    "AnchorConfig",
    "ChecklistConfig",
    "ChecklistConfigError",
    "DisplayConfig",
    "GradingConfig",
    "IndicatorConfig",
    "InstrumentConfig",
    "SessionConfig",
    "load_checklist_config",
]

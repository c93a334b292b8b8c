"""
Checklist config loader: JSON file -> frozen dataclass tree, validated against JSON Schema.

Default values:      docs/config/checklist.default.json
Schema:              docs/config/checklist_config.schema.json

Per-symbol overrides: place a partial JSON file named ``checklist.{SYMBOL}.json``
next to the default config (e.g. ``docs/config/checklist.ES.json``). Only the
keys you want to override need to be present; they are deep-merged on top
of the base config before schema validation.

Usage:
    from config.checklist_config import load_checklist_config
    cfg = load_checklist_config()                        # loads default
    cfg = load_checklist_config(symbol="ES")             # merges checklist.ES.json if present
    cfg = load_checklist_config("my_overrides.json")     # loads custom file
    cfg.grading.max_distance_ticks  # -> 20
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import jsonschema

from checklist_core.contracts import AnchorMode, GradingParameters

logger = logging.getLogger("avwap.config")

# ---------------------------------------------------------------------------
# Project root detection (walk up from this file to find pyproject.toml)
# ---------------------------------------------------------------------------


def _find_project_root() -> Path:
    """Walk up from this file looking for pyproject.toml.

    When installed as a package, pyproject.toml won't exist; fall back to CWD.
    """
    candidate = Path(__file__).resolve().parent
    for _ in range(10):
        if (candidate / "pyproject.toml").exists():
            return candidate
        parent = candidate.parent
        if parent == candidate:
            break
        candidate = parent
    return Path.cwd()


_PROJECT_ROOT = _find_project_root()

DEFAULT_CONFIG_PATH = _PROJECT_ROOT / "docs" / "config" / "checklist.default.json"
DEFAULT_SCHEMA_PATH = _PROJECT_ROOT / "docs" / "config" / "checklist_config.schema.json"


# ---------------------------------------------------------------------------
# Frozen dataclass tree mirroring checklist.default.json
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class IndicatorConfig:
    fast_ema_period: int
    slow_ema_period: int


@dataclass(frozen=True)
class GradingConfig:
    min_distance_ticks: int
    max_distance_ticks: int


@dataclass(frozen=True)
class InstrumentConfig:
    tick_size: float


@dataclass(frozen=True)
class SessionConfig:
    timezone: str = "America/New_York"


@dataclass(frozen=True)
class AnchorConfig:
    mode: AnchorMode = AnchorMode.WEEK_OPEN
    timestamp: datetime | None = None   # required when mode == TIMESTAMP


@dataclass(frozen=True)
class DisplayConfig:
    show_dashboard: bool = True
    enable_plots: bool = False


@dataclass(frozen=True)
class ChecklistConfig:
    """Top-level checklist configuration. Set once at startup; read-only."""
    version: str
    indicators: IndicatorConfig
    grading: GradingConfig
    instrument: InstrumentConfig
    session: SessionConfig = SessionConfig()
    anchor: AnchorConfig = AnchorConfig()
    display: DisplayConfig = DisplayConfig()

    def grading_parameters(self) -> GradingParameters:
        return GradingParameters(
            min_distance_ticks=self.grading.min_distance_ticks,
            max_distance_ticks=self.grading.max_distance_ticks,
        )

    @property
    def session_tz(self) -> ZoneInfo:
        return ZoneInfo(self.session.timezone)


# ---------------------------------------------------------------------------
# Deep merge for per-symbol overrides
# ---------------------------------------------------------------------------


def _deep_merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge *overrides* into a copy of *base*.

    - Dict values are merged recursively (override keys win).
    - Non-dict values in overrides replace the base value.
    - Keys in base that are absent from overrides are preserved.
    """
    merged = dict(base)
    for key, val in overrides.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(val, dict):
            merged[key] = _deep_merge(merged[key], val)
        else:
            merged[key] = val
    return merged


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------


class ChecklistConfigError(Exception):
    """Raised when checklist config loading or validation fails."""


def _validate_schema(data: dict[str, Any], schema_path: Path) -> None:
    """Validate *data* against the JSON Schema at *schema_path*."""
    if not schema_path.exists():
        raise ChecklistConfigError(f"Schema file not found: {schema_path}")
    with open(schema_path) as f:
        schema = json.load(f)
    try:
        jsonschema.validate(instance=data, schema=schema)
    except jsonschema.ValidationError as exc:
        raise ChecklistConfigError(f"Checklist config validation failed: {exc.message}") from exc


def _parse_anchor(raw: dict[str, Any]) -> AnchorConfig:
    mode = AnchorMode(raw.get("mode", AnchorMode.WEEK_OPEN.value))
    ts_raw = raw.get("timestamp")
    anchor_ts: datetime | None = None
    if ts_raw:
        try:
            anchor_ts = datetime.fromisoformat(ts_raw.replace("Z", "+00:00"))
        except ValueError as exc:
            raise ChecklistConfigError(f"Invalid anchor timestamp {ts_raw!r}: {exc}") from exc
        if anchor_ts.tzinfo is None:
            anchor_ts = anchor_ts.replace(tzinfo=timezone.utc)
    if mode == AnchorMode.TIMESTAMP and anchor_ts is None:
        raise ChecklistConfigError("anchor.timestamp is required when anchor.mode is TIMESTAMP")
    return AnchorConfig(mode=mode, timestamp=anchor_ts)


def _build_config(data: dict[str, Any]) -> ChecklistConfig:
    """Convert a raw dict (already validated) into the frozen dataclass tree."""
    session_raw = data.get("session", {})
    display_raw = data.get("display", {})

    tz_name = session_raw.get("timezone", "America/New_York")
    try:
        ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ChecklistConfigError(f"Unknown session timezone: {tz_name!r}") from exc

    return ChecklistConfig(
        version=data["version"],
        indicators=IndicatorConfig(
            fast_ema_period=data["indicators"]["fast_ema_period"],
            slow_ema_period=data["indicators"]["slow_ema_period"],
        ),
        grading=GradingConfig(
            min_distance_ticks=data["grading"]["min_distance_ticks"],
            max_distance_ticks=data["grading"]["max_distance_ticks"],
        ),
        instrument=InstrumentConfig(tick_size=float(data["instrument"]["tick_size"])),
        session=SessionConfig(timezone=tz_name),
        anchor=_parse_anchor(data.get("anchor", {})),
        display=DisplayConfig(
            show_dashboard=display_raw.get("show_dashboard", True),
            enable_plots=display_raw.get("enable_plots", False),
        ),
    )


def load_checklist_config(
    config_path: str | Path | None = None,
    schema_path: str | Path | None = None,
    symbol: str | None = None,
) -> ChecklistConfig:
    """Load and validate checklist configuration.

    Parameters
    ----------
    config_path:
        Path to a checklist JSON config file.  Defaults to
        ``docs/config/checklist.default.json``.
    schema_path:
        Path to the JSON Schema file.  Defaults to
        ``docs/config/checklist_config.schema.json``.
    symbol:
        Optional ticker symbol.  When provided, the loader looks for a
        per-symbol override file ``checklist.{SYMBOL}.json`` in the same
        directory as the base config and deep-merges it before validation.
        A missing override file is not an error.

    Raises
    ------
    ChecklistConfigError
        If the file is missing, unparseable, or fails validation.
    """
    cfg_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    sch_path = Path(schema_path) if schema_path else DEFAULT_SCHEMA_PATH

    if not cfg_path.exists():
        raise ChecklistConfigError(f"Checklist config file not found: {cfg_path}")

    try:
        with open(cfg_path) as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        raise ChecklistConfigError(f"Checklist config is not valid JSON: {exc}") from exc

    if symbol:
        override_path = cfg_path.parent / f"checklist.{symbol.upper()}.json"
        if override_path.exists():
            try:
                with open(override_path) as f:
                    overrides = json.load(f)
            except json.JSONDecodeError as exc:
                raise ChecklistConfigError(
                    f"Per-symbol config {override_path.name} is not valid JSON: {exc}"
                ) from exc
            data = _deep_merge(data, overrides)
            logger.info("Loaded per-symbol config: %s", override_path.name)
        else:
            logger.debug("No per-symbol config found at %s; using defaults", override_path)

    _validate_schema(data, sch_path)

    return _build_config(data)

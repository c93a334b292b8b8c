"""
App config: config.yaml -> frozen AppConfig.

Only non-secret values live in the file. Alpaca credentials are read from
the standard Alpaca environment variables (a .env file is loaded by the CLI).
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

API_KEY_ENV = "APCA_API_KEY_ID"
API_SECRET_ENV = "APCA_API_SECRET_KEY"


@dataclass(frozen=True)
class DataConfig:
    source: str = "alpaca"
    bar_store_path: str = "data/bars.db"
    feed: str = "iex"          # iex (free) or sip (paid subscription)
    api_key: str = ""
    api_secret: str = ""


@dataclass(frozen=True)
class JournalConfig:
    path: str = "data/checklist.jsonl"
    echo_stdout: bool = False


@dataclass(frozen=True)
class AlertingConfig:
    structured_logs: bool = True
    webhook_url: str = ""


@dataclass(frozen=True)
class AppConfig:
    symbol: str = "SPY"
    timeframe: str = "15m"
    data: DataConfig = field(default_factory=DataConfig)
    journal: JournalConfig = field(default_factory=JournalConfig)
    alerting: AlertingConfig = field(default_factory=AlertingConfig)


def _section(raw: dict[str, Any], name: str) -> dict[str, Any]:
    value = raw.get(name) or {}
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{name}' must be a mapping, got {type(value).__name__}")
    return value


def _data_config(section: dict[str, Any]) -> DataConfig:
    defaults = DataConfig()
    return DataConfig(
        source=str(section.get("source", defaults.source)),
        bar_store_path=str(section.get("bar_store_path", defaults.bar_store_path)),
        feed=str(section.get("feed", defaults.feed)),
        api_key=os.environ.get(API_KEY_ENV, ""),
        api_secret=os.environ.get(API_SECRET_ENV, ""),
    )


def _journal_config(section: dict[str, Any]) -> JournalConfig:
    defaults = JournalConfig()
    return JournalConfig(
        path=str(section.get("path", defaults.path)),
        echo_stdout=bool(section.get("echo_stdout", defaults.echo_stdout)),
    )


def _alerting_config(section: dict[str, Any]) -> AlertingConfig:
    defaults = AlertingConfig()
    return AlertingConfig(
        structured_logs=bool(section.get("structured_logs", defaults.structured_logs)),
        webhook_url=str(section.get("webhook_url", defaults.webhook_url) or ""),
    )


def load_config(path: str | Path = "config.yaml") -> AppConfig:
    """
    Load the app configuration from a YAML file.

    Raises FileNotFoundError if the file is missing and ValueError if it is
    not a YAML mapping (or a section is not a mapping).
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f)

    if not isinstance(raw, dict):
        raise ValueError(f"Config file must be a YAML mapping, got {type(raw).__name__}")

    return AppConfig(
        symbol=str(raw.get("symbol", AppConfig.symbol)),
        timeframe=str(raw.get("timeframe", AppConfig.timeframe)),
        data=_data_config(_section(raw, "data")),
        journal=_journal_config(_section(raw, "journal")),
        alerting=_alerting_config(_section(raw, "alerting")),
    )

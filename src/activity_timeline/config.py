"""Configuration utilities for the activity timeline."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, asdict
from pathlib import Path

from dotenv import load_dotenv


CONFIG_ENV_VAR = "ACTIVITY_TIMELINE_CONFIG"
DEFAULT_CONFIG_PATH = (
    Path.home() / ".config" / "activity-timeline" / "config.json"
)
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Environment overrides: variable -> config field
ENV_OVERRIDES = {
    "ACTIVITY_TIMELINE_PAGE_SIZE": "page_size",
    "ACTIVITY_TIMELINE_BATCH_SIZE": "batch_size",
    "ACTIVITY_TIMELINE_WINDOW_DAYS": "trailing_window_days",
}


@dataclass
class TimelineConfig:
    """Serializable configuration for the timeline engine."""

    page_size: int = 5
    batch_size: int = 7
    trailing_window_days: int = 7
    log_level: str = "INFO"

    def to_dict(self) -> dict:
        """Return the config as a JSON-serializable dictionary."""

        return asdict(self)


def _positive_int(value, fallback: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return fallback
    return number if number > 0 else fallback


def config_path() -> Path:
    """Return the filesystem path where config is stored."""

    override = os.getenv(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser().resolve()

    return DEFAULT_CONFIG_PATH


def load_config() -> TimelineConfig:
    """Load configuration from `.env`, disk and environment, in that order."""

    load_dotenv()
    config = TimelineConfig()

    path = config_path()
    data: dict = {}
    if path.exists():
        try:
            data = json.loads(path.read_text())
        except json.JSONDecodeError:
            # Malformed config; fall back to defaults but keep original file for inspection.
            data = {}

    config.page_size = _positive_int(data.get("page_size"), config.page_size)
    config.batch_size = _positive_int(data.get("batch_size"), config.batch_size)
    config.trailing_window_days = _positive_int(
        data.get("trailing_window_days"), config.trailing_window_days
    )
    config.log_level = str(data.get("log_level", config.log_level)).upper()

    for env_var, field_name in ENV_OVERRIDES.items():
        value = os.getenv(env_var)
        if value:
            setattr(config, field_name, _positive_int(value, getattr(config, field_name)))

    log_level = os.getenv("LOG_LEVEL")
    if log_level:
        config.log_level = log_level.upper()

    return config


def save_config(config: TimelineConfig) -> None:
    """Persist configuration to disk."""

    path = config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(config.to_dict(), indent=2))


def configure_logging(level: str | None = None) -> None:
    """Configure root logging the way the service entry points do."""

    logging.basicConfig(
        level=(level or os.getenv("LOG_LEVEL", "INFO")).upper(),
        format=LOG_FORMAT,
    )

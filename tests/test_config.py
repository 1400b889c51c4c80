"""Tests for configuration helpers."""

import logging

from activity_timeline import timeline as timeline_module
from activity_timeline.config import (
    LOG_FORMAT,
    TimelineConfig,
    configure_logging,
    load_config,
    save_config,
)


def test_config_round_trip(tmp_path, monkeypatch):
    """Ensure configuration persists to disk and loads back."""

    config_path = tmp_path / "config.json"
    monkeypatch.setenv("ACTIVITY_TIMELINE_CONFIG", str(config_path))
    monkeypatch.delenv("ACTIVITY_TIMELINE_PAGE_SIZE", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)

    original = TimelineConfig(page_size=10, batch_size=3, trailing_window_days=30)
    original.log_level = "debug"

    save_config(original)
    loaded = load_config()

    assert loaded.page_size == 10
    assert loaded.batch_size == 3
    assert loaded.trailing_window_days == 30
    assert loaded.log_level == "DEBUG"


def test_config_handles_missing_file(monkeypatch, tmp_path):
    """Loading without a file should return defaults."""

    config_path = tmp_path / "missing" / "config.json"
    monkeypatch.setenv("ACTIVITY_TIMELINE_CONFIG", str(config_path))
    for name in ("ACTIVITY_TIMELINE_PAGE_SIZE", "ACTIVITY_TIMELINE_BATCH_SIZE",
                 "ACTIVITY_TIMELINE_WINDOW_DAYS", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    assert load_config() == TimelineConfig()


def test_config_ignores_malformed_file(monkeypatch, tmp_path):
    config_path = tmp_path / "config.json"
    config_path.write_text("{not json")
    monkeypatch.setenv("ACTIVITY_TIMELINE_CONFIG", str(config_path))
    monkeypatch.delenv("ACTIVITY_TIMELINE_PAGE_SIZE", raising=False)

    assert load_config().page_size == TimelineConfig().page_size


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("ACTIVITY_TIMELINE_CONFIG", str(tmp_path / "none.json"))
    monkeypatch.setenv("ACTIVITY_TIMELINE_PAGE_SIZE", "8")
    monkeypatch.setenv("ACTIVITY_TIMELINE_BATCH_SIZE", "-2")
    monkeypatch.setenv("LOG_LEVEL", "warning")

    config = load_config()
    assert config.page_size == 8
    assert config.batch_size == TimelineConfig().batch_size
    assert config.log_level == "WARNING"


def test_configure_logging_uses_level_and_format(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

    configure_logging("debug")
    monkeypatch.setenv("LOG_LEVEL", "error")
    configure_logging()

    assert calls[0] == {"level": "DEBUG", "format": LOG_FORMAT}
    assert calls[1]["level"] == "ERROR"


def test_timeline_from_config(monkeypatch, tmp_path):
    config_path = tmp_path / "config.json"
    monkeypatch.setenv("ACTIVITY_TIMELINE_CONFIG", str(config_path))
    for name in ("ACTIVITY_TIMELINE_PAGE_SIZE", "ACTIVITY_TIMELINE_BATCH_SIZE",
                 "ACTIVITY_TIMELINE_WINDOW_DAYS", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    save_config(TimelineConfig(page_size=3, trailing_window_days=14, log_level="WARNING"))

    levels = []
    monkeypatch.setattr(timeline_module, "configure_logging", levels.append)

    timeline = timeline_module.Timeline.from_config()

    assert levels == ["WARNING"]
    assert timeline.config.page_size == 3
    assert timeline.metrics().trailing_window_days == 14

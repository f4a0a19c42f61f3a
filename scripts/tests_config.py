# scripts/tests_config.py
from __future__ import annotations

import logging
import os
import subprocess
import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

from network import TrackerSettings, new_message_tracker
from network.config import configure_logging, get_settings

REPO_ROOT = Path(__file__).resolve().parent.parent


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_defaults(monkeypatch):
    monkeypatch.delenv("MESSAGE_TRACKER_CAPACITY", raising=False)
    monkeypatch.delenv("MESSAGE_TRACKER_LOG_LEVEL", raising=False)
    cfg = TrackerSettings(_env_file=None)
    assert cfg.capacity == 1000
    assert cfg.log_level == "INFO"


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("MESSAGE_TRACKER_CAPACITY", "7")
    monkeypatch.setenv("MESSAGE_TRACKER_LOG_LEVEL", "debug")
    cfg = TrackerSettings(_env_file=None)
    assert cfg.capacity == 7
    assert cfg.log_level == "DEBUG"


@pytest.mark.parametrize("value", ["0", "-3", "lots"])
def test_bad_capacity_rejected(monkeypatch, value):
    monkeypatch.setenv("MESSAGE_TRACKER_CAPACITY", value)
    with pytest.raises(ValidationError):
        TrackerSettings(_env_file=None)


def test_bad_log_level_rejected(monkeypatch):
    monkeypatch.setenv("MESSAGE_TRACKER_LOG_LEVEL", "chatty")
    with pytest.raises(ValidationError):
        TrackerSettings(_env_file=None)


def test_factory_uses_settings(monkeypatch):
    monkeypatch.setenv("MESSAGE_TRACKER_CAPACITY", "5")
    tracker = new_message_tracker(cfg=TrackerSettings(_env_file=None))
    assert tracker.capacity == 5


def test_factory_explicit_capacity_wins(monkeypatch):
    monkeypatch.setenv("MESSAGE_TRACKER_CAPACITY", "5")
    tracker = new_message_tracker(2, cfg=TrackerSettings(_env_file=None))
    assert tracker.capacity == 2


def test_factory_rejects_bad_capacity():
    with pytest.raises(ValueError):
        new_message_tracker(0)


def test_factory_logs_creation(caplog):
    with caplog.at_level(logging.INFO, logger="network.config"):
        new_message_tracker(3)
    assert "capacity=3" in caplog.text


def test_configure_logging_sets_level(monkeypatch):
    monkeypatch.setenv("MESSAGE_TRACKER_LOG_LEVEL", "WARNING")
    root = logging.getLogger()
    saved_level, saved_handlers = root.level, list(root.handlers)
    root.handlers = []
    try:
        configure_logging(TrackerSettings(_env_file=None))
        assert root.level == logging.WARNING
    finally:
        root.handlers = saved_handlers
        root.setLevel(saved_level)


# -------------------------- Default settings path --------------------------

def test_factory_without_args_reads_env(monkeypatch):
    monkeypatch.setenv("MESSAGE_TRACKER_CAPACITY", "9")
    tracker = new_message_tracker()
    assert tracker.capacity == 9


def test_get_settings_is_cached(monkeypatch):
    monkeypatch.setenv("MESSAGE_TRACKER_CAPACITY", "4")
    first = get_settings()
    monkeypatch.setenv("MESSAGE_TRACKER_CAPACITY", "8")
    assert get_settings() is first
    assert new_message_tracker().capacity == 4


def test_configure_logging_without_args(monkeypatch):
    monkeypatch.setenv("MESSAGE_TRACKER_LOG_LEVEL", "error")
    root = logging.getLogger()
    saved_level, saved_handlers = root.level, list(root.handlers)
    root.handlers = []
    try:
        configure_logging()
        assert root.level == logging.ERROR
    finally:
        root.handlers = saved_handlers
        root.setLevel(saved_level)


def test_bad_env_fails_only_when_settings_are_read(monkeypatch):
    monkeypatch.setenv("MESSAGE_TRACKER_CAPACITY", "0")
    # explicit capacity never touches settings
    assert new_message_tracker(3).capacity == 3
    with pytest.raises(ValidationError):
        new_message_tracker()


def test_import_with_bad_env():
    env = dict(os.environ, MESSAGE_TRACKER_CAPACITY="0", MESSAGE_TRACKER_LOG_LEVEL="chatty")
    result = subprocess.run(
        [sys.executable, "-c", "from network import MessageTracker; print(MessageTracker(2))"],
        cwd=REPO_ROOT,
        env=env,
        capture_output=True,
        text=True,
    )
    assert result.returncode == 0, result.stderr
    assert "MessageTracker(capacity=2, size=0)" in result.stdout

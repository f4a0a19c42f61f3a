# network/config.py
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, PositiveInt, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .message_tracker import MessageTracker

log = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class TrackerSettings(BaseSettings):
    # Max distinct messages remembered (MESSAGE_TRACKER_CAPACITY)
    capacity: PositiveInt = Field(default=1000)

    # MESSAGE_TRACKER_LOG_LEVEL
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="MESSAGE_TRACKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, v):
        return v.upper() if isinstance(v, str) else v


@lru_cache(maxsize=1)
def get_settings() -> TrackerSettings:
    # read on first use, never at import
    return TrackerSettings()


def configure_logging(cfg: Optional[TrackerSettings] = None) -> None:
    """Opt-in logging setup for processes embedding the tracker."""
    cfg = cfg or get_settings()
    logging.basicConfig(level=getattr(logging, cfg.log_level), format=LOG_FORMAT)


def new_message_tracker(capacity: Optional[int] = None, cfg: Optional[TrackerSettings] = None) -> MessageTracker:
    """Build a tracker from an explicit capacity, or from settings."""
    if capacity is None:
        capacity = (cfg or get_settings()).capacity
    tracker = MessageTracker(capacity)
    log.info("message tracker created (capacity=%d)", capacity)
    return tracker

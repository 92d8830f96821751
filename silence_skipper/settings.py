"""Pydantic model for user-configurable skip settings.

WHY: Settings come from an external store (a popup, a .env file, a CLI)
and may be updated at any moment while a video plays. The scheduler
reads them on every decision, so they must always be valid: no
negative offsets, no unknown log levels, no strings where numbers go.

HOW: SkipSettings is an immutable pydantic model. from_env() seeds it
from the config defaults. apply() merges a partial update, validating
field by field so one bad value does not throw away the good ones.

RULES:
- min_skip_seconds, pre_speech_offset_seconds, post_silence_delay_seconds >= 0
- log_level is one of "none", "default", "debug"
- apply() keeps the previous value for any field that fails validation
- apply() ignores unknown keys
- Accepts both snake_case field names and the camelCase names used by
  the original settings store (``minSkipSeconds``...)
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from silence_skipper import config

logger = logging.getLogger(__name__)


class LogLevel(str, Enum):
    """Notification verbosity.

    RULES:
    - none: no notifications at all
    - default: only messages marked "default"
    - debug: every message
    """

    NONE = "none"
    DEFAULT = "default"
    DEBUG = "debug"


class SkipSettings(BaseModel):
    """Settings read by the scheduler on every decision."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    skip_enabled: bool = Field(
        default=True,
        alias="skipEnabled",
        description="Master switch for automatic skipping.",
    )
    min_skip_seconds: float = Field(
        default=0.2,
        ge=0,
        alias="minSkipSeconds",
        description="Gaps shorter than this are never skipped.",
    )
    skip_after_seek: bool = Field(
        default=False,
        alias="skipAfterSeek",
        description="Keep skipping right after the viewer seeks.",
    )
    skip_cc_captions: bool = Field(
        default=True,
        alias="skipCCCaptions",
        description="Treat bracketed sound descriptions as silence.",
    )
    log_level: LogLevel = Field(
        default=LogLevel.DEFAULT,
        alias="logLevel",
        description="Notification verbosity.",
    )
    pre_speech_offset_seconds: float = Field(
        default=0.0,
        ge=0,
        alias="preSpeechOffsetSeconds",
        description="Land this far before detected speech.",
    )
    post_silence_delay_seconds: float = Field(
        default=0.0,
        ge=0,
        alias="postSilenceDelaySeconds",
        description="Wait this long into a silence before jumping.",
    )

    @property
    def pre_speech_offset_ms(self) -> float:
        return self.pre_speech_offset_seconds * 1000

    @property
    def post_silence_delay_ms(self) -> float:
        return self.post_silence_delay_seconds * 1000

    @classmethod
    def from_env(cls) -> SkipSettings:
        """Build settings from the config defaults (.env / environment)."""
        return cls().apply({
            "skip_enabled": config.DEFAULT_SKIP_ENABLED,
            "min_skip_seconds": config.DEFAULT_MIN_SKIP_SECONDS,
            "skip_after_seek": config.DEFAULT_SKIP_AFTER_SEEK,
            "skip_cc_captions": config.DEFAULT_SKIP_CC_CAPTIONS,
            "log_level": config.DEFAULT_LOG_LEVEL,
            "pre_speech_offset_seconds": config.DEFAULT_PRE_SPEECH_OFFSET_SECONDS,
            "post_silence_delay_seconds": config.DEFAULT_POST_SILENCE_DELAY_SECONDS,
        })

    def apply(self, update: Mapping[str, Any]) -> SkipSettings:
        """Return a copy with the valid entries of ``update`` applied.

        HOW: Each key is resolved to a field (by name or alias) and
        validated on its own; invalid values are logged and dropped.
        """
        accepted: Dict[str, Any] = {}
        for key, value in update.items():
            name = _field_name(key)
            if name is None:
                logger.debug("Ignoring unknown setting %r", key)
                continue
            try:
                candidate = type(self).model_validate({**self.model_dump(), name: value})
            except ValidationError:
                logger.warning("Rejected invalid value for %s: %r", name, value)
                continue
            accepted[name] = getattr(candidate, name)
        return self.model_copy(update=accepted)

    def changes_from(self, previous: SkipSettings) -> Dict[str, Any]:
        """Return {field: new value} for every field that differs from ``previous``."""
        return {
            name: getattr(self, name)
            for name in type(self).model_fields
            if getattr(self, name) != getattr(previous, name)
        }


def _field_name(key: str) -> Optional[str]:
    fields = SkipSettings.model_fields
    if key in fields:
        return key
    for name, info in fields.items():
        if info.alias == key:
            return name
    return None

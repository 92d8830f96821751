"""Notification sink — one-way, human-readable status messages.

WHY: The engine tells the viewer what it is doing ("Skipped 1.20 s",
"Nothing to skip here!") without caring how the host shows it — a
toast, a status bar, stderr. Messages never affect control flow.

HOW: Notifier is the protocol the engine depends on. LogNotifier gates
messages by the current log level, writes shown messages to the
``silence_skipper.notifications`` logger, and forwards them to an
optional callback. RecordingNotifier keeps shown messages in memory for
tests and the CLI simulation.

RULES:
- Message levels: "default" (always shown unless log level is none)
  and "debug" (shown only at log level debug)
- Log level none suppresses everything
- notify() never raises for a well-formed message
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Protocol, Tuple

from silence_skipper.settings import LogLevel

logger = logging.getLogger(__name__)

DEFAULT = "default"
DEBUG = "debug"


class Notifier(Protocol):
    """Anything that can show a status message to the viewer."""

    log_level: LogLevel

    def notify(self, message: str, level: str = DEBUG) -> None:
        ...


def should_show(log_level: LogLevel, level: str) -> bool:
    """Apply the verbosity rule for a message of ``level``."""
    if log_level == LogLevel.NONE:
        return False
    if log_level == LogLevel.DEBUG:
        return True
    return level == DEFAULT


class LogNotifier:
    """Notifier that writes to the logging system and an optional callback."""

    def __init__(
        self,
        log_level: LogLevel = LogLevel.DEFAULT,
        on_message: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.log_level = log_level
        self._on_message = on_message

    def notify(self, message: str, level: str = DEBUG) -> None:
        if not should_show(self.log_level, level):
            return
        logger.info(message)
        if self._on_message is not None:
            self._on_message(message)


class RecordingNotifier(LogNotifier):
    """Notifier that remembers every shown message as (level, message)."""

    def __init__(self, log_level: LogLevel = LogLevel.DEBUG) -> None:
        super().__init__(log_level=log_level)
        self.messages: List[Tuple[str, str]] = []

    def notify(self, message: str, level: str = DEBUG) -> None:
        if should_show(self.log_level, level):
            self.messages.append((level, message))
        super().notify(message, level)

    @property
    def texts(self) -> List[str]:
        return [message for _, message in self.messages]

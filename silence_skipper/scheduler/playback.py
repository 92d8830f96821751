"""Live playback handle contract.

WHY: The engine never owns the media element. It reads the position,
issues seeks, and listens for play/pause/seek notifications through a
narrow interface so any host (a browser bridge, a desktop player, the
simulator) can drive it.

HOW: PlaybackHandle is an ABC. Seeks follow the two-phase media model:
``seeking`` fires when the position changes, ``seeked`` when the new
position is ready.

RULES:
- position_ms advances monotonically while playing
- seek() must eventually emit SEEKING then SEEKED
- subscribe() returns a callable that removes the subscription
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable


class PlaybackEvent(str, Enum):
    PLAY = "play"
    PAUSE = "pause"
    SEEKING = "seeking"
    SEEKED = "seeked"


class PlaybackHandle(ABC):
    """Abstract live playback position plus event notifications."""

    @property
    @abstractmethod
    def position_ms(self) -> float:
        """Current playback position in milliseconds."""

    @property
    @abstractmethod
    def paused(self) -> bool:
        """True while playback is paused or ended."""

    @abstractmethod
    def seek(self, position_ms: float) -> None:
        """Move the playback position."""

    @abstractmethod
    def subscribe(self, event: PlaybackEvent, callback: Callable[[], None]) -> Callable[[], None]:
        """Register ``callback`` for ``event``; return an unsubscribe callable."""

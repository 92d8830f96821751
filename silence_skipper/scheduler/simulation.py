"""Virtual clock and simulated player for offline runs and tests.

WHY: The real engine runs against a browser or desktop player and wall
clock time. To inspect skip decisions for a caption file — or to test
the scheduler deterministically — we need a clock we can advance by
hand and a player whose position follows that clock.

HOW: VirtualClock implements the Timers protocol with a heap of pending
callbacks ordered by due time. advance() moves time forward, firing
every callback that falls due along the way (including ones scheduled
by earlier callbacks). SimulatedPlayback derives its position from the
clock while playing and dispatches events as zero-delay tasks, the way
a media element queues its events instead of firing them inside the
call that caused them.

RULES:
- Callbacks due at the same time fire in scheduling order
- SimulatedPlayback.seek() queues SEEKING then SEEKED
- Reaching duration_ms pauses playback and emits PAUSE
- Every seek is recorded in ``seeks`` as a SeekRecord
"""

from __future__ import annotations

import heapq
import itertools
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from silence_skipper.scheduler.playback import PlaybackEvent, PlaybackHandle

logger = logging.getLogger(__name__)


class _VirtualTimer:
    __slots__ = ("due_ms", "callback", "cancelled")

    def __init__(self, due_ms: float, callback: Callable[[], None]) -> None:
        self.due_ms = due_ms
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class VirtualClock:
    """Manually advanced clock implementing the Timers protocol."""

    def __init__(self, start_ms: float = 0.0) -> None:
        self.now_ms = start_ms
        self._queue: List[Tuple[float, int, _VirtualTimer]] = []
        self._sequence = itertools.count()

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> _VirtualTimer:
        timer = _VirtualTimer(self.now_ms + max(0.0, delay_ms), callback)
        heapq.heappush(self._queue, (timer.due_ms, next(self._sequence), timer))
        return timer

    @property
    def pending(self) -> int:
        """Number of scheduled, not yet cancelled callbacks."""
        return sum(1 for _, _, timer in self._queue if not timer.cancelled)

    def next_due_ms(self) -> Optional[float]:
        for due_ms, _, timer in sorted(self._queue):
            if not timer.cancelled:
                return due_ms
        return None

    def advance(self, delta_ms: float) -> None:
        """Move time forward by ``delta_ms``, firing due callbacks."""
        self.advance_to(self.now_ms + max(0.0, delta_ms))

    def advance_to(self, target_ms: float) -> None:
        while self._queue and self._queue[0][0] <= target_ms:
            due_ms, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self.now_ms = max(self.now_ms, due_ms)
            timer.callback()
        self.now_ms = max(self.now_ms, target_ms)


@dataclass
class SeekRecord:
    """One position change issued through SimulatedPlayback.seek()."""

    at_ms: float
    from_ms: float
    to_ms: float

    @property
    def skipped_ms(self) -> float:
        return self.to_ms - self.from_ms


class SimulatedPlayback(PlaybackHandle):
    """A player whose position follows a VirtualClock."""

    def __init__(
        self,
        clock: VirtualClock,
        duration_ms: Optional[float] = None,
        start_ms: float = 0.0,
        playing: bool = False,
    ) -> None:
        self._clock = clock
        self.duration_ms = duration_ms
        self._anchor_position_ms = start_ms
        self._anchor_clock_ms = clock.now_ms
        self._paused = True
        self._end_timer: Optional[_VirtualTimer] = None
        self._listeners: Dict[PlaybackEvent, List[Callable[[], None]]] = {
            event: [] for event in PlaybackEvent
        }
        self.seeks: List[SeekRecord] = []
        if playing:
            self.play()

    # ------------------------------------------------------------------
    # PlaybackHandle
    # ------------------------------------------------------------------

    @property
    def position_ms(self) -> float:
        position = self._anchor_position_ms
        if not self._paused:
            position += self._clock.now_ms - self._anchor_clock_ms
        if self.duration_ms is not None:
            position = min(position, self.duration_ms)
        return position

    @property
    def paused(self) -> bool:
        return self._paused

    def seek(self, position_ms: float) -> None:
        previous = self.position_ms
        if self.duration_ms is not None:
            position_ms = min(position_ms, self.duration_ms)
        self._anchor(max(0.0, position_ms))
        self.seeks.append(SeekRecord(at_ms=self._clock.now_ms, from_ms=previous, to_ms=self.position_ms))
        self._schedule_end()
        self._emit(PlaybackEvent.SEEKING)
        self._emit(PlaybackEvent.SEEKED)

    def subscribe(self, event: PlaybackEvent, callback: Callable[[], None]) -> Callable[[], None]:
        self._listeners[event].append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners[event]:
                self._listeners[event].remove(callback)

        return unsubscribe

    # ------------------------------------------------------------------
    # Transport controls
    # ------------------------------------------------------------------

    def play(self) -> None:
        if not self._paused:
            return
        self._anchor(self.position_ms)
        self._paused = False
        self._schedule_end()
        self._emit(PlaybackEvent.PLAY)

    def pause(self) -> None:
        if self._paused:
            return
        self._anchor(self.position_ms)
        self._paused = True
        self._cancel_end()
        self._emit(PlaybackEvent.PAUSE)

    def listener_count(self) -> int:
        return sum(len(callbacks) for callbacks in self._listeners.values())

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _anchor(self, position_ms: float) -> None:
        self._anchor_position_ms = position_ms
        self._anchor_clock_ms = self._clock.now_ms

    def _emit(self, event: PlaybackEvent) -> None:
        def dispatch() -> None:
            for callback in list(self._listeners[event]):
                callback()

        self._clock.call_later(0, dispatch)

    def _cancel_end(self) -> None:
        if self._end_timer is not None:
            self._end_timer.cancel()
            self._end_timer = None

    def _schedule_end(self) -> None:
        self._cancel_end()
        if self._paused or self.duration_ms is None:
            return
        self._end_timer = self._clock.call_later(
            self.duration_ms - self.position_ms, self._on_end,
        )

    def _on_end(self) -> None:
        self._end_timer = None
        logger.debug("Simulated playback ended at %.0f ms", self.position_ms)
        self.pause()

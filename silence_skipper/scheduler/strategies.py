"""Manual and auto-generated skip strategies — the reactive scheduler core.

WHY: Skipping silence means watching a clock we cannot pause and
jumping at exactly the right moments, while the viewer (and the engine
itself) keeps seeking, pausing, and resuming, and ads interrupt at
random. Each caption kind needs a different notion of "the next gap",
but both share the same timer discipline and event handling.

HOW: BaseSkipStrategy owns one SchedulerState per active video and one
pending timer at most. Every trigger (timer fired, play, seeked, an
external nudge) runs one synchronous evaluation pass:

  1. Ad interruption active → re-poll in AD_REPOLL_MS, cursor untouched
  2. Position before the cursor item → reset cursor to 0 (backward seek)
  3. Advance the cursor past items that have fully elapsed
  4. Strategy-specific decision: skip now, or arm the next wake-up

ManualCaptionStrategy uses caption events as skip units: the gap is
the time until the next event starts. AutoCaptionStrategy uses skip
zones built from estimated word timing, with a post-silence delay and
a pre-speech offset narrowing each zone to an adjusted window.

RULES:
- Arming always cancels the previous timer first
- A playback event cancels any stale timer before evaluating
- An executed skip clears "user just sought" and does NOT move the
  cursor; the seek's own ``seeked`` event drives the next pass
- Auto strategy: the engine's own seek sets ``programmatic_skip``
  before moving the position; the next SEEKING consumes it instead of
  marking a user seek
- Manual strategy: every SEEKING marks a user seek
- Cursor exhaustion → Idle with no timer; subscriptions stay so a
  backward seek can revive the strategy
- No playback handle → the pass is a no-op
"""

from __future__ import annotations

import enum
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from silence_skipper.config import AD_REPOLL_MS
from silence_skipper.core.ir import CaptionEvent, CaptionKind, SkipZone
from silence_skipper.core.timeline import skip_caption_markers
from silence_skipper.notifications import DEFAULT, Notifier
from silence_skipper.scheduler.playback import PlaybackEvent, PlaybackHandle
from silence_skipper.scheduler.timers import TimerHandle, Timers
from silence_skipper.settings import SkipSettings

logger = logging.getLogger(__name__)


class StrategyPhase(str, enum.Enum):
    """Scheduler lifecycle phase.

    RULES:
    - idle: no timer pending (paused, finished, awaiting seeked, stopped)
    - armed: exactly one wake-up timer pending
    - evaluating: a synchronous decision pass is running
    """

    IDLE = "idle"
    ARMED = "armed"
    EVALUATING = "evaluating"


@dataclass
class SchedulerState:
    """Mutable per-video scheduler state.

    RULES:
    - cursor indexes the strategy's event or zone sequence
    - timer is the single outstanding wake-up, or None
    - programmatic_skip is only used by the auto-generated strategy
    """

    cursor: int = 0
    timer: Optional[TimerHandle] = None
    user_seeked: bool = False
    programmatic_skip: bool = False
    phase: StrategyPhase = StrategyPhase.IDLE

    def reset(self) -> None:
        if self.timer is not None:
            self.timer.cancel()
        self.cursor = 0
        self.timer = None
        self.user_seeked = False
        self.programmatic_skip = False
        self.phase = StrategyPhase.IDLE


@dataclass
class SchedulerContext:
    """External collaborators a strategy reads on every pass."""

    timers: Timers
    get_playback: Callable[[], Optional[PlaybackHandle]]
    get_settings: Callable[[], SkipSettings]
    is_ad_playing: Callable[[], bool]
    notifier: Notifier


@dataclass
class SkipDecision:
    """Record of one executed skip, kept for diagnostics."""

    from_ms: float
    to_ms: float
    gap_s: float


class BaseSkipStrategy(ABC):
    """Shared timer discipline and playback-event wiring for both strategies."""

    kind: CaptionKind

    def __init__(self, context: SchedulerContext) -> None:
        self.context = context
        self.state = SchedulerState()
        self.skips: List[SkipDecision] = []
        self._unsubscribers: List[Callable[[], None]] = []
        self._stopped = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, playback: PlaybackHandle) -> None:
        """Subscribe to ``playback`` and run the first evaluation pass."""
        handlers = {
            PlaybackEvent.SEEKING: self.on_seeking,
            PlaybackEvent.SEEKED: self.on_seeked,
            PlaybackEvent.PLAY: self.on_play,
            PlaybackEvent.PAUSE: self.on_pause,
        }
        for event, handler in handlers.items():
            self._unsubscribers.append(playback.subscribe(event, handler))
        logger.debug("%s started with %d items", type(self).__name__, self.item_count)
        self.evaluate()

    def stop(self) -> None:
        """Cancel the timer, drop all subscriptions, and reset state."""
        self._stopped = True
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self.state.reset()

    @property
    def active(self) -> bool:
        return not self._stopped

    # ------------------------------------------------------------------
    # Timer discipline
    # ------------------------------------------------------------------

    def cancel(self) -> None:
        if self.state.timer is not None:
            self.state.timer.cancel()
            self.state.timer = None
        if self.state.phase == StrategyPhase.ARMED:
            self.state.phase = StrategyPhase.IDLE

    def arm(self, delay_ms: float) -> None:
        self.cancel()
        self.state.timer = self.context.timers.call_later(max(0.0, delay_ms), self._on_timer)
        self.state.phase = StrategyPhase.ARMED

    def _on_timer(self) -> None:
        self.state.timer = None
        self.evaluate()

    # ------------------------------------------------------------------
    # Playback events
    # ------------------------------------------------------------------

    def on_seeking(self) -> None:
        self.state.user_seeked = True
        self.cancel()

    def on_seeked(self) -> None:
        self.evaluate()

    def on_play(self) -> None:
        self.evaluate()

    def on_pause(self) -> None:
        self.cancel()

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def evaluate(self) -> None:
        """Run one decision pass against the current playback position."""
        if self._stopped:
            return
        self.cancel()

        playback = self.context.get_playback()
        if playback is None:
            return
        if playback.paused:
            return
        if self.context.is_ad_playing():
            self.arm(AD_REPOLL_MS)
            return

        self.state.phase = StrategyPhase.EVALUATING
        now_ms = playback.position_ms
        self._decide(playback, now_ms, self.context.get_settings())
        if self.state.phase == StrategyPhase.EVALUATING:
            self.state.phase = StrategyPhase.IDLE

    def _rewind_if_behind(self, now_ms: float) -> None:
        cursor = self.state.cursor
        if cursor <= 0 or not self.item_count:
            return
        if cursor >= self.item_count:
            behind = now_ms < self._item_end(self.item_count - 1)
        else:
            behind = now_ms < self._item_start(cursor)
        if behind:
            logger.debug("Position %.0f ms precedes cursor %d; rewinding", now_ms, cursor)
            self.state.cursor = 0

    def _should_skip(self, gap_s: float, settings: SkipSettings) -> bool:
        return (
            settings.skip_enabled
            and (not self.state.user_seeked or settings.skip_after_seek)
            and gap_s >= settings.min_skip_seconds
            and not self.context.is_ad_playing()
        )

    def _skip(self, playback: PlaybackHandle, now_ms: float, target_ms: float, gap_s: float) -> None:
        self.state.user_seeked = False
        self.skips.append(SkipDecision(from_ms=now_ms, to_ms=target_ms, gap_s=gap_s))
        logger.debug("Skipping %.0f → %.0f ms", now_ms, target_ms)
        playback.seek(target_ms)
        self.context.notifier.notify(self._skip_message(gap_s, target_ms), DEFAULT)

    def _finish(self) -> None:
        self.cancel()
        logger.debug("%s reached the end of its sequence", type(self).__name__)

    @property
    @abstractmethod
    def item_count(self) -> int:
        """Length of the event or zone sequence."""

    @abstractmethod
    def _item_start(self, index: int) -> float:
        """Start of the item used for backward-seek detection."""

    @abstractmethod
    def _item_end(self, index: int) -> float:
        """End of the item, used once the cursor has run off the sequence."""

    @abstractmethod
    def _decide(self, playback: PlaybackHandle, now_ms: float, settings: SkipSettings) -> None:
        """Strategy-specific part of an evaluation pass."""

    @abstractmethod
    def _skip_message(self, gap_s: float, target_ms: float) -> str:
        """Notification text for an executed skip."""


class ManualCaptionStrategy(BaseSkipStrategy):
    """Skips the silence between phrase-grouped (manual) caption events."""

    kind = CaptionKind.MANUAL

    def __init__(self, context: SchedulerContext, events: Sequence[CaptionEvent]) -> None:
        super().__init__(context)
        self.events = list(events)

    @property
    def item_count(self) -> int:
        return len(self.events)

    def _item_start(self, index: int) -> float:
        return self.events[index].start_ms

    def _item_end(self, index: int) -> float:
        return self.events[index].end_ms

    def _advance(self, now_ms: float, settings: SkipSettings) -> None:
        events = self.events
        cursor = self.state.cursor
        while True:
            while cursor < len(events) and events[cursor].end_ms <= now_ms:
                cursor += 1
            if not (settings.skip_enabled and settings.skip_cc_captions):
                break
            past_markers = skip_caption_markers(events, cursor)
            if past_markers == cursor:
                break
            cursor = past_markers
        self.state.cursor = cursor

    def _decide(self, playback: PlaybackHandle, now_ms: float, settings: SkipSettings) -> None:
        self._rewind_if_behind(now_ms)
        self._advance(now_ms, settings)

        if self.state.cursor >= len(self.events):
            self._finish()
            return

        event = self.events[self.state.cursor]
        target_ms = max(0.0, event.start_ms - settings.pre_speech_offset_ms)

        if now_ms < event.start_ms:
            gap_s = (event.start_ms - now_ms) / 1000
            if self._should_skip(gap_s, settings) and now_ms < target_ms:
                self._skip(playback, now_ms, target_ms, gap_s)
                return
            wake_ms = target_ms if now_ms < target_ms else event.start_ms
            self.arm(wake_ms - now_ms)
        else:
            self.state.user_seeked = False
            self.arm(event.end_ms - now_ms)

    def _skip_message(self, gap_s: float, target_ms: float) -> str:
        return "Skipped {:.2f} s, now at {:.2f} s.".format(gap_s, target_ms / 1000)


class AutoCaptionStrategy(BaseSkipStrategy):
    """Skips the gaps between estimated words of auto-generated captions."""

    kind = CaptionKind.AUTO_GENERATED

    def __init__(self, context: SchedulerContext, zones: Sequence[SkipZone]) -> None:
        super().__init__(context)
        self.zones = list(zones)

    @property
    def item_count(self) -> int:
        return len(self.zones)

    def _item_start(self, index: int) -> float:
        return self.zones[index].from_ms

    def _item_end(self, index: int) -> float:
        return self.zones[index].to_ms

    def on_seeking(self) -> None:
        if self.state.programmatic_skip:
            self.state.programmatic_skip = False
        else:
            self.state.user_seeked = True
        self.cancel()

    def _decide(self, playback: PlaybackHandle, now_ms: float, settings: SkipSettings) -> None:
        self._rewind_if_behind(now_ms)

        zones = self.zones
        while self.state.cursor < len(zones) and zones[self.state.cursor].to_ms <= now_ms:
            self.state.cursor += 1

        if self.state.cursor >= len(zones):
            self._finish()
            return

        zone = zones[self.state.cursor]
        window_start_ms = zone.from_ms + settings.post_silence_delay_ms
        landing_ms = max(window_start_ms, zone.to_ms - settings.pre_speech_offset_ms)

        if window_start_ms <= now_ms < zone.to_ms:
            gap_s = (zone.to_ms - now_ms) / 1000
            if self._should_skip(gap_s, settings) and now_ms < landing_ms:
                self.state.programmatic_skip = True
                self._skip(playback, now_ms, landing_ms, gap_s)
                return
            wake_ms = landing_ms if now_ms < landing_ms else zone.to_ms
            self.arm(wake_ms - now_ms)
        else:
            self.state.user_seeked = False
            self.arm(window_start_ms - now_ms)

    def _skip_message(self, gap_s: float, target_ms: float) -> str:
        return "Skipped {:.2f} s gap, now at {:.2f} s.".format(gap_s, target_ms / 1000)

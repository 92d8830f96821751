"""Caption-synchronized skip engine — the entry point hosts talk to.

WHY: Hosts (a browser bridge, a desktop player, the CLI simulator) need
one object that takes caption data and keeps skipping silence until the
video changes. It must survive malformed captions, unsupported
languages, ads, and settings changes without ever crashing or leaking
state from one video into the next.

HOW: SkipEngine wires the pipeline together:
  load_captions()      — parse → classify → (estimate → zones) → arm a strategy
  request_captions()   — fetch from a CaptionSource, deferring while an ad plays
  on_settings_changed()— swap settings, notify, nudge the live strategy
  on_video_changed()   — tear everything down for the next video
  set_ad_playing()     — ad-interruption signal; resumes deferred work on ad end

RULES:
- At most one strategy exists at any time; loading always stops the old one first
- Unsupported input (bad payload, unknown language, no playback handle,
  nothing to skip) is reported once and leaves the engine disarmed
  for the current video only
- A caption request issued while an ad plays is deferred until the ad ends
- A fetch that completes after the video changed is discarded
- At most one fetch per video is outstanding; duplicates return False
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, Optional, Tuple

from silence_skipper.core.ir import CaptionKind
from silence_skipper.core.language import normalize_language_code
from silence_skipper.core.schema import CaptionPayloadError
from silence_skipper.core.timeline import build_skip_zones, classify, parse_events
from silence_skipper.estimators import EstimatorRegistry
from silence_skipper.notifications import DEBUG, DEFAULT, LogNotifier, Notifier
from silence_skipper.scheduler.playback import PlaybackHandle
from silence_skipper.scheduler.strategies import (
    AutoCaptionStrategy,
    BaseSkipStrategy,
    ManualCaptionStrategy,
    SchedulerContext,
)
from silence_skipper.scheduler.timers import Timers
from silence_skipper.settings import SkipSettings
from silence_skipper.sources import CaptionFetchError, CaptionSource

logger = logging.getLogger(__name__)

MSG_NO_DATA = "No data available for this video."
MSG_INCOMPATIBLE = "This video isn't compatible."
MSG_NOTHING_TO_SKIP = "Nothing to skip here!"
MSG_BAD_PAYLOAD = "Could not read the captions for this video."
MSG_FETCH_FAILED = "Could not load the captions for this video."


def _on_off(value: bool) -> str:
    return "on" if value else "off"


# Human-readable feedback per changed setting.
_SETTING_MESSAGES: Dict[str, Callable[[Any], str]] = {
    "skip_enabled": lambda v: "Auto-skip silence {}.".format(_on_off(v)),
    "min_skip_seconds": lambda v: "Minimum skip set to {:.2f} s.".format(v),
    "skip_after_seek": lambda v: "Skip after seeking {}.".format(_on_off(v)),
    "skip_cc_captions": lambda v: "Enhanced mode {}.".format(_on_off(v)),
    "log_level": lambda v: "Log level set to {}.".format(v.value),
    "pre_speech_offset_seconds": lambda v: "Pre-speech offset set to {:.2f} s.".format(v),
    "post_silence_delay_seconds": lambda v: "Post-silence delay set to {:.2f} s.".format(v),
}

# Changing any of these re-evaluates immediately even while skipping is off.
_RETIMING_SETTINGS = frozenset({"pre_speech_offset_seconds", "post_silence_delay_seconds"})


class SkipEngine:
    """Owns the settings, the ad signal, and the single active skip strategy."""

    def __init__(
        self,
        timers: Timers,
        playback_provider: Callable[[], Optional[PlaybackHandle]],
        settings: Optional[SkipSettings] = None,
        notifier: Optional[Notifier] = None,
        registry: Optional[EstimatorRegistry] = None,
    ) -> None:
        self.settings = settings if settings is not None else SkipSettings.from_env()
        self.notifier = notifier if notifier is not None else LogNotifier()
        self.notifier.log_level = self.settings.log_level
        self.registry = registry if registry is not None else EstimatorRegistry()
        self._timers = timers
        self._playback_provider = playback_provider

        self.strategy: Optional[BaseSkipStrategy] = None
        self.ad_playing = False
        self._active_language: Optional[str] = None
        self._generation = 0
        self._source: Optional[CaptionSource] = None
        self._video_id: Optional[str] = None
        self._pending_request: Optional[Tuple[CaptionSource, str]] = None
        self._pending_task: Optional[asyncio.Task] = None
        self._inflight_video: Optional[str] = None

    # ------------------------------------------------------------------
    # Caption loading
    # ------------------------------------------------------------------

    def load_captions(self, raw_payload: Any, language_hint: Optional[str] = None) -> bool:
        """Classify captions, build the timeline, and arm a strategy.

        Args:
            raw_payload: Decoded timedtext JSON.
            language_hint: Caption language tag (e.g. "en-US"), if known.

        Returns:
            True if a strategy was armed, False if the video stays disarmed.
        """
        self._stop_strategy()
        self._active_language = language_hint.lower() if language_hint else None
        if self._active_language:
            logger.info("Detected caption language: %s", self._active_language)
        else:
            logger.info("Could not detect caption language")

        try:
            events = parse_events(raw_payload)
        except CaptionPayloadError as exc:
            logger.warning("%s", exc)
            self.notifier.notify(MSG_BAD_PAYLOAD, DEFAULT)
            return False

        kind = classify(events)
        context = self._context()
        if kind == CaptionKind.MANUAL:
            if not events:
                self.notifier.notify(MSG_NO_DATA, DEFAULT)
                return False
            strategy: BaseSkipStrategy = ManualCaptionStrategy(context, events)
        else:
            estimator = self.registry.select(language_hint, self.notifier)
            if estimator is None:
                return False
            logger.info("Using %r for word event extraction", estimator)
            words = estimator.extract_word_events(events)
            if not words:
                self.notifier.notify(MSG_INCOMPATIBLE, DEFAULT)
                return False
            zones = build_skip_zones(words)
            logger.info("Total skip zones calculated: %d", len(zones))
            if not zones:
                self.notifier.notify(MSG_NOTHING_TO_SKIP, DEFAULT)
                return False
            strategy = AutoCaptionStrategy(context, zones)

        playback = self._playback_provider()
        if playback is None:
            logger.error("No playback element found; staying disarmed")
            return False

        self.strategy = strategy
        strategy.start(playback)
        return True

    async def request_captions(self, source: CaptionSource, video_id: str) -> bool:
        """Fetch captions for ``video_id`` from ``source`` and load them.

        RULES:
        - While an ad plays the request is deferred, not dropped
        - Fetch failures are reported once and not retried
        - A duplicate request while the same video is being fetched is ignored
        - A result or failure that arrives after a video change is discarded
        """
        if self.ad_playing:
            logger.info("Ad playing - delaying caption request for %s", video_id)
            self._pending_request = (source, video_id)
            return False
        if video_id == self._inflight_video:
            logger.info("Caption request for %s already in flight; ignoring", video_id)
            return False

        self._source = source
        self._video_id = video_id
        self._inflight_video = video_id
        generation = self._generation
        self.notifier.notify("Getting video info...", DEBUG)

        try:
            payload = await source.fetch(video_id)
        except CaptionFetchError as exc:
            if generation != self._generation:
                logger.info("Ignoring failed fetch for %s; video changed during fetch", video_id)
                return False
            logger.warning("Caption fetch for %s failed: %s", video_id, exc)
            self.notifier.notify(MSG_FETCH_FAILED, DEFAULT)
            return False
        finally:
            if generation == self._generation and self._inflight_video == video_id:
                self._inflight_video = None

        if generation != self._generation:
            logger.info("Discarding captions for %s; video changed during fetch", video_id)
            return False

        self.notifier.notify("Data loaded successfully!", DEBUG)
        return self.load_captions(payload, source.language_for(video_id))

    # ------------------------------------------------------------------
    # External signals
    # ------------------------------------------------------------------

    def on_settings_changed(self, new_settings: SkipSettings) -> None:
        """Apply ``new_settings`` to the live strategy without reloading."""
        changes = new_settings.changes_from(self.settings)
        self.settings = new_settings
        self.notifier.log_level = new_settings.log_level
        if not changes:
            return

        if len(changes) == 1:
            name, value = next(iter(changes.items()))
            self.notifier.notify(_SETTING_MESSAGES[name](value), DEBUG)
        else:
            self.notifier.notify("Settings updated.", DEBUG)

        if self.strategy is not None and (
            new_settings.skip_enabled or _RETIMING_SETTINGS.intersection(changes)
        ):
            self.strategy.evaluate()

    def update_settings(self, update: Dict[str, Any]) -> SkipSettings:
        """Merge a partial settings update and apply it."""
        self.on_settings_changed(self.settings.apply(update))
        return self.settings

    def set_ad_playing(self, active: bool) -> None:
        """Update the ad-interruption signal.

        RULES:
        - Ad end resumes a deferred caption request and re-evaluates now
        """
        if active == self.ad_playing:
            return
        self.ad_playing = active
        logger.info("Ad state changed: %s", "Ad started" if active else "Ad ended")

        if active:
            self.notifier.notify("Ad detected - extension paused", DEBUG)
            return

        self.notifier.notify("Ad ended - extension resumed", DEBUG)
        if self._pending_request is not None:
            self._resume_pending_request()
        if self.strategy is not None:
            self.strategy.evaluate()

    def on_video_changed(self) -> None:
        """Tear down the current strategy and clear all derived state."""
        self._generation += 1
        self._stop_strategy()
        self._active_language = None
        self._pending_request = None
        self._inflight_video = None
        if self._pending_task is not None and not self._pending_task.done():
            self._pending_task.cancel()
        self._pending_task = None
        if self._source is not None and self._video_id is not None:
            self._source.invalidate(self._video_id)
        self._source = None
        self._video_id = None
        self.notifier.notify("Video changed.", DEBUG)

    def get_active_language(self) -> Optional[str]:
        """Language tag of the current caption source, or None."""
        return self._active_language

    @property
    def estimator_language(self) -> Optional[str]:
        """Normalized code the estimator registry sees for the current source."""
        return normalize_language_code(self._active_language) or None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _context(self) -> SchedulerContext:
        return SchedulerContext(
            timers=self._timers,
            get_playback=self._playback_provider,
            get_settings=lambda: self.settings,
            is_ad_playing=lambda: self.ad_playing,
            notifier=self.notifier,
        )

    def _stop_strategy(self) -> None:
        if self.strategy is not None:
            self.strategy.stop()
            self.strategy = None

    def _resume_pending_request(self) -> None:
        source, video_id = self._pending_request
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop; caption request for %s stays pending", video_id)
            return
        self._pending_request = None
        logger.info("Resuming caption request for %s after interruption", video_id)
        self._pending_task = loop.create_task(self.request_captions(source, video_id))

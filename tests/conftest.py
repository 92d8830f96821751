"""Shared test fixtures for the silence_skipper test suite.

WHY: Most test modules need the same small caption payloads and the
same deterministic playback rig. Centralizing them here keeps the
timing numbers consistent across estimator, strategy and engine tests.

HOW: Payload builders produce raw timedtext dicts (manual and
auto-generated). Fixtures provide a VirtualClock, a SimulatedPlayback
driven by it, a RecordingNotifier, and a SkipEngine wired to all three.

RULES:
- Auto-generated payloads use English words whose estimates are easy
  to compute by hand: "cat", "dog", "bird" are one syllable (500 ms)
- Settings are built explicitly, never from the environment
- The player has no duration unless a test gives one, so the only
  pending timer is the strategy's own
"""

from typing import Any, Dict, Sequence, Tuple

import pytest

from silence_skipper.engine import SkipEngine
from silence_skipper.notifications import RecordingNotifier
from silence_skipper.scheduler.simulation import SimulatedPlayback, VirtualClock
from silence_skipper.settings import LogLevel, SkipSettings


# ---------------------------------------------------------------------------
# Payload builders
# ---------------------------------------------------------------------------


def _manual_payload(events: Sequence[Tuple[int, int, str]]) -> Dict[str, Any]:
    """Build a manual caption payload from (start_ms, duration_ms, text)."""
    return {
        "events": [
            {"tStartMs": start, "dDurationMs": duration, "segs": [{"utf8": text}]}
            for start, duration, text in events
        ]
    }


def _auto_payload(words: Sequence[Tuple[int, str]]) -> Dict[str, Any]:
    """Build an auto-generated payload with one event per (start_ms, word)."""
    return {
        "events": [
            {
                "tStartMs": start,
                "dDurationMs": 1000,
                "segs": [{"utf8": word, "acAsrConf": 0}],
            }
            for start, word in words
        ]
    }


# Speech at [0, 1000) and [3000, 4000): one 2 s gap.
MANUAL_TWO_EVENTS = [(0, 1000, "Hello there"), (3000, 1000, "General Kenobi")]

# cat [0, 500), dog [2000, 2500), bird [5000, 5500): zones 500→2000, 2500→5000.
AUTO_THREE_WORDS = [(0, "cat"), (2000, "dog"), (5000, "bird")]


@pytest.fixture
def manual_two_events() -> Dict[str, Any]:
    return _manual_payload(MANUAL_TWO_EVENTS)


@pytest.fixture
def auto_three_words() -> Dict[str, Any]:
    return _auto_payload(AUTO_THREE_WORDS)


# ---------------------------------------------------------------------------
# Playback rig
# ---------------------------------------------------------------------------


@pytest.fixture
def clock() -> VirtualClock:
    return VirtualClock()


@pytest.fixture
def player(clock: VirtualClock) -> SimulatedPlayback:
    return SimulatedPlayback(clock, playing=True)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier(log_level=LogLevel.DEBUG)


@pytest.fixture
def debug_settings() -> SkipSettings:
    return SkipSettings(log_level=LogLevel.DEBUG)


@pytest.fixture
def engine(clock, player, notifier, debug_settings) -> SkipEngine:
    """A SkipEngine on the virtual clock that records every notification."""
    return SkipEngine(
        timers=clock,
        playback_provider=lambda: player,
        settings=debug_settings,
        notifier=notifier,
    )


@pytest.fixture
def manual_payload():
    """Builder for manual payloads: manual_payload([(start, duration, text), ...])."""
    return _manual_payload


@pytest.fixture
def auto_payload():
    """Builder for auto-generated payloads: auto_payload([(start, word), ...])."""
    return _auto_payload

"""Abstract base pronunciation estimator.

WHY: Auto-generated captions tell us when each word starts but not when
it ends. Every supported language needs its own heuristic for how long
a word takes to say, but the registry, the timeline builder, and the
word-event extraction must work with any of them generically.

HOW: BaseEstimator is an ABC with two requirements — a ``language_code``
property and an ``_estimate_word()`` method. The public ``estimate()``
wraps it with the rules every language shares: caption markers get a
fixed minimal duration and all other words are floored at 100 ms.
``extract_word_events()`` turns caption events into timed WordEvents.

RULES:
- Subclasses MUST implement ``language_code`` and ``_estimate_word()``
- ``identify()`` matches a normalized code; override to widen or disable
- Marker words ("[Music]", "(laughs)") are exactly 10 ms
- Every other estimate is at least 100 ms
- To add a language:
  1. Create a new module in estimators/
  2. Subclass BaseEstimator
  3. Register it in ESTIMATORS in estimators/__init__.py
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Sequence

from silence_skipper.config import CAPTION_MARKER_DURATION_MS, MIN_ESTIMATE_MS
from silence_skipper.core.ir import CaptionEvent, PronunciationEstimate, WordEvent
from silence_skipper.core.language import normalize_language_code
from silence_skipper.core.timeline import is_caption_marker


class BaseEstimator(ABC):
    """Abstract base for all pronunciation estimators."""

    @property
    @abstractmethod
    def language_code(self) -> str:
        """ISO 639-1 code this estimator handles, e.g. 'en'."""

    @abstractmethod
    def _estimate_word(self, word: str) -> PronunciationEstimate:
        """Estimate the speaking time of a regular (non-marker) word."""

    def identify(self, language_code: str) -> bool:
        """Return True if this estimator handles ``language_code``."""
        return normalize_language_code(language_code) == self.language_code

    def estimate(self, word: str) -> PronunciationEstimate:
        """Estimate how long ``word`` takes to speak.

        RULES:
        - Caption markers return exactly CAPTION_MARKER_DURATION_MS
        - Other words are floored at MIN_ESTIMATE_MS
        """
        if is_caption_marker(word):
            return PronunciationEstimate(total_ms=CAPTION_MARKER_DURATION_MS)

        estimate = self._estimate_word(word)
        if estimate.total_ms < MIN_ESTIMATE_MS:
            estimate.total_ms = MIN_ESTIMATE_MS
        return estimate

    def extract_word_events(self, events: Sequence[CaptionEvent]) -> List[WordEvent]:
        """Expand caption events into timed word events.

        HOW: For every segment with non-blank text, the word starts at
        event start + segment offset and ends after its estimated
        pronunciation time.

        RULES:
        - Events without segments are skipped
        - Blank segments (e.g. "\\n") are skipped
        - Output order follows input order
        """
        words: List[WordEvent] = []
        for event_index, event in enumerate(events):
            if not event.segments:
                continue
            for segment_index, segment in enumerate(event.segments):
                word = segment.text.strip()
                if not word:
                    continue
                estimate = self.estimate(word)
                start_ms = event.start_ms + segment.offset_ms
                words.append(WordEvent(
                    word=word,
                    start_ms=start_ms,
                    end_ms=start_ms + estimate.total_ms,
                    event_index=event_index,
                    segment_index=segment_index,
                    estimate=estimate,
                ))
        return words

    def __repr__(self) -> str:
        return "{}(language_code={!r})".format(type(self).__name__, self.language_code)

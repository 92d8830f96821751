"""Intermediate representation dataclasses for caption timelines.

WHY: The raw timedtext payload is a loose JSON structure with optional
keys (``segs``, ``tOffsetMs``, ``acAsrConf``, ``aAppend``...). The
estimators, the timeline builder, and the scheduler all need the same
timing facts in a well-typed form. The IR decouples parsing from
scheduling.

HOW: Six types form the pipeline:
  CaptionSegment        — one text fragment inside an event
  CaptionEvent          — one timed caption unit (phrase or word group)
  PronunciationEstimate — estimated speaking time for one word
  WordEvent             — one spoken word placed on the timeline
  SkipZone              — a gap between spoken words that may be jumped
  CaptionKind           — manual vs auto-generated caption track

RULES:
- All times are milliseconds from the start of the media
- CaptionEvent and SkipZone are immutable once built
- SkipZone.to_ms > SkipZone.from_ms strictly
- WordEvent.event_index points back into the event list; it is a
  lookup key, not an ownership reference
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Optional, Tuple


class CaptionKind(str, enum.Enum):
    """Which scheduling strategy a caption track needs.

    RULES:
    - manual: phrase-grouped captions, events are the skip unit
    - auto_generated: machine-transcribed words with confidence markers
    """

    MANUAL = "manual"
    AUTO_GENERATED = "auto_generated"


@dataclass(frozen=True)
class CaptionSegment:
    """A text fragment inside a caption event.

    RULES:
    - offset_ms is relative to the owning event's start
    - asr_confidence is set only on auto-transcribed segments
    """

    text: str
    offset_ms: int = 0
    asr_confidence: Optional[int] = None


@dataclass(frozen=True)
class CaptionEvent:
    """One time-coded unit of caption data.

    WHY: Manual captions are scheduled event by event; auto captions are
    expanded to words from the event's segments.

    RULES:
    - start_ms >= 0, duration_ms >= 0 (zero is allowed)
    - segments is None when the event carries a flat text payload
    - text holds the flat payload (``aAppend`` or ``utf8``) when present
    """

    start_ms: int
    duration_ms: int = 0
    segments: Optional[Tuple[CaptionSegment, ...]] = None
    text: Optional[str] = None

    @property
    def end_ms(self) -> int:
        return self.start_ms + self.duration_ms


@dataclass
class PronunciationEstimate:
    """Estimated speaking time for a single word.

    RULES:
    - total_ms is never below the estimator floor (100 ms), except for
      caption markers, which are exactly 10 ms
    - details holds estimator-specific diagnostics (mora count, speech
      level...) and never affects scheduling
    """

    total_ms: float
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class WordEvent:
    """A spoken word placed on the timeline.

    RULES:
    - start_ms = event start + segment offset
    - end_ms = start_ms + estimate.total_ms
    - event_index / segment_index locate the originating segment
    """

    word: str
    start_ms: float
    end_ms: float
    event_index: int
    segment_index: int
    estimate: PronunciationEstimate


@dataclass(frozen=True)
class SkipZone:
    """A gap between the end of one word and the start of the next.

    WHY: The auto-generated strategy acts on zones, not on raw events.

    RULES:
    - index is the zone's ordinal in its sequence
    - from_word / to_word are kept for diagnostics only
    - to_ms > from_ms strictly; zones never overlap and are ordered
      by from_ms
    """

    index: int
    from_word: str
    to_word: str
    from_ms: float
    to_ms: float

    @property
    def gap_ms(self) -> float:
        return self.to_ms - self.from_ms

"""Caption event parsing, track classification, and skip-zone construction.

WHY: The scheduler never looks at raw JSON. It needs either a list of
caption events (manual captions, where each phrase is a skip unit) or
a list of skip zones (auto-generated captions, where gaps are derived
from estimated word timing). This module is the bridge between the raw
timedtext payload and those two forms.

HOW: parse_events() validates the payload and builds CaptionEvent IR
objects. classify() inspects segments for the automatic-transcription
confidence marker. build_skip_zones() walks adjacent word pairs and
emits a zone for every positive gap. The caption-marker helpers let the
manual strategy treat "[Music]"-style events as silence.

RULES:
- Event order is preserved exactly as received (already time-ordered)
- Missing tStartMs / dDurationMs / tOffsetMs default to 0
- A track is auto-generated iff any segment carries ``acAsrConf``
- A zone is emitted iff next.start_ms - current.end_ms > 0
- Caption markers: trimmed text wrapped in () or []
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence

from silence_skipper.core.ir import (
    CaptionEvent,
    CaptionKind,
    CaptionSegment,
    SkipZone,
    WordEvent,
)
from silence_skipper.core.schema import validate_payload

logger = logging.getLogger(__name__)

# Bracket pairs that wrap non-speech caption markers.
_MARKER_BRACKETS = (("(", ")"), ("[", "]"))


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _parse_segment(raw: dict[str, Any]) -> CaptionSegment:
    return CaptionSegment(
        text=raw.get("utf8") or "",
        offset_ms=int(raw.get("tOffsetMs") or 0),
        asr_confidence=raw["acAsrConf"] if "acAsrConf" in raw else None,
    )


def _parse_event(raw: dict[str, Any]) -> CaptionEvent:
    segments = None
    if isinstance(raw.get("segs"), list):
        segments = tuple(_parse_segment(seg) for seg in raw["segs"])

    text = None
    if raw.get("aAppend"):
        text = str(raw["aAppend"])
    elif raw.get("utf8"):
        text = str(raw["utf8"])

    return CaptionEvent(
        start_ms=int(raw.get("tStartMs") or 0),
        duration_ms=int(raw.get("dDurationMs") or 0),
        segments=segments,
        text=text,
    )


def parse_events(payload: Any) -> List[CaptionEvent]:
    """Validate a raw timedtext payload and convert its events to IR.

    Args:
        payload: Decoded JSON document from the caption source.

    Returns:
        CaptionEvent list in payload order; empty when the payload has
        no ``events`` key.

    Raises:
        CaptionPayloadError: If the payload is malformed.
    """
    validate_payload(payload)
    events = [_parse_event(raw) for raw in payload.get("events") or []]
    logger.debug("Parsed %d caption events", len(events))
    return events


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def classify(events: Sequence[CaptionEvent]) -> CaptionKind:
    """Classify a caption track as manual or auto-generated.

    HOW: Auto-generated tracks carry a per-segment ASR confidence value.
    A single such segment anywhere in the track is enough.
    """
    for event in events:
        for segment in event.segments or ():
            if segment.asr_confidence is not None:
                return CaptionKind.AUTO_GENERATED
    return CaptionKind.MANUAL


# ---------------------------------------------------------------------------
# Caption markers
# ---------------------------------------------------------------------------


def is_caption_marker(text: Any) -> bool:
    """Return True for non-speech markers such as "[Music]" or "(laughs)"."""
    if not text or not isinstance(text, str):
        return False
    stripped = text.strip()
    return any(
        stripped.startswith(opening) and stripped.endswith(closing)
        for opening, closing in _MARKER_BRACKETS
    )


def extract_caption_text(event: Optional[CaptionEvent]) -> str:
    """Return the display text of a caption event.

    RULES:
    - Segment texts are concatenated when the event has segments
    - Otherwise the flat payload is used
    - The result is stripped; missing text yields ""
    """
    if event is None:
        return ""
    if event.segments is not None:
        return "".join(seg.text for seg in event.segments).strip()
    if event.text:
        return event.text.strip()
    return ""


def skip_caption_markers(events: Sequence[CaptionEvent], index: int) -> int:
    """Advance ``index`` past consecutive caption-marker events.

    Returns:
        The first index at or after ``index`` whose event is not a
        marker, or len(events) if all remaining events are markers.
    """
    while index < len(events) and is_caption_marker(extract_caption_text(events[index])):
        index += 1
    return index


# ---------------------------------------------------------------------------
# Skip zones
# ---------------------------------------------------------------------------


def build_skip_zones(word_events: Sequence[WordEvent]) -> List[SkipZone]:
    """Build the ordered skip-zone list from adjacent word events.

    WHY: Auto-generated captions only report when each word starts. The
    estimated end of each word marks where silence begins; the next
    word's start marks where speech resumes.

    HOW: For each adjacent pair (i, i+1), emit a zone from the current
    word's end to the next word's start when the gap is positive.

    RULES:
    - Zero or negative gaps (touching or overlapping words) produce no zone
    - Zone indexes are consecutive from 0
    - Output order follows input order (input is time-ordered)
    """
    zones: List[SkipZone] = []
    for current, following in zip(word_events, word_events[1:]):
        gap_ms = following.start_ms - current.end_ms
        if gap_ms > 0:
            zones.append(SkipZone(
                index=len(zones),
                from_word=current.word,
                to_word=following.word,
                from_ms=current.end_ms,
                to_ms=following.start_ms,
            ))
    return zones

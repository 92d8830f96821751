"""Unit tests for caption parsing, classification, and skip-zone building.

WHY: Everything downstream trusts the timeline. A misclassified track
runs the wrong strategy; a zone built from a negative gap would seek
backwards into speech.

HOW: Tests cover each stage between the raw payload and the scheduler:
  - Payload validation (jsonschema) and defaulting of missing fields
  - Manual vs auto-generated classification
  - Caption-marker detection, text extraction and marker skipping
  - Skip-zone construction from word events

RULES:
- Zones exist only for strictly positive gaps
- Zone indexes are consecutive from 0
"""

import pytest

from silence_skipper.core.ir import CaptionEvent, CaptionKind, CaptionSegment, WordEvent
from silence_skipper.core.schema import CaptionPayloadError
from silence_skipper.core.timeline import (
    build_skip_zones,
    classify,
    extract_caption_text,
    is_caption_marker,
    parse_events,
    skip_caption_markers,
)


def _word(word, start_ms, end_ms):
    return WordEvent(
        word=word, start_ms=start_ms, end_ms=end_ms,
        event_index=0, segment_index=0, estimate=None,
    )


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class TestParseEvents:
    """Raw timedtext payloads become CaptionEvent IR."""

    def test_fields_mapped(self):
        events = parse_events({"events": [{
            "tStartMs": 1200,
            "dDurationMs": 800,
            "segs": [{"utf8": "hi"}, {"utf8": " there", "tOffsetMs": 300, "acAsrConf": 212}],
        }]})
        assert len(events) == 1
        event = events[0]
        assert event.start_ms == 1200
        assert event.end_ms == 2000
        assert event.segments[0] == CaptionSegment(text="hi")
        assert event.segments[1].offset_ms == 300
        assert event.segments[1].asr_confidence == 212

    def test_missing_numbers_default_to_zero(self):
        events = parse_events({"events": [{"segs": [{"utf8": "x"}]}]})
        assert events[0].start_ms == 0
        assert events[0].duration_ms == 0
        assert events[0].segments[0].offset_ms == 0

    def test_flat_text_payloads(self):
        events = parse_events({"events": [
            {"tStartMs": 0, "aAppend": 1},
            {"tStartMs": 10, "utf8": "[Music]"},
        ]})
        assert events[0].text == "1"
        assert events[0].segments is None
        assert events[1].text == "[Music]"

    def test_order_preserved(self):
        events = parse_events({"events": [{"tStartMs": 500}, {"tStartMs": 100}]})
        assert [e.start_ms for e in events] == [500, 100]

    @pytest.mark.parametrize("payload", [{}, {"events": []}, {"wireMagic": "pb3"}])
    def test_no_events(self, payload):
        assert parse_events(payload) == []

    @pytest.mark.parametrize("payload,path", [
        ({"events": "nope"}, "events"),
        ({"events": [{"tStartMs": -5}]}, "events/0/tStartMs"),
        ({"events": [{"segs": [{"tOffsetMs": "soon"}]}]}, "events/0/segs/0/tOffsetMs"),
    ])
    def test_malformed_payload_raises_with_path(self, payload, path):
        with pytest.raises(CaptionPayloadError) as exc_info:
            parse_events(payload)
        assert path in str(exc_info.value)

    def test_non_object_payload(self):
        with pytest.raises(CaptionPayloadError):
            parse_events(["not", "a", "payload"])

    def test_payload_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_events(None)


class TestClassify:
    """Any ASR confidence value anywhere marks the track auto-generated."""

    def test_manual(self):
        events = parse_events({"events": [{"segs": [{"utf8": "Hello"}]}]})
        assert classify(events) == CaptionKind.MANUAL

    def test_auto_generated(self):
        events = parse_events({"events": [
            {"segs": [{"utf8": "Hello"}]},
            {"segs": [{"utf8": "world", "acAsrConf": 0}]},
        ]})
        assert classify(events) == CaptionKind.AUTO_GENERATED

    def test_empty_track_is_manual(self):
        assert classify([]) == CaptionKind.MANUAL


# ---------------------------------------------------------------------------
# Caption markers
# ---------------------------------------------------------------------------


class TestCaptionMarkers:
    @pytest.mark.parametrize("text", ["[Music]", "(laughs)", "  [Applause]\n", "[]"])
    def test_markers(self, text):
        assert is_caption_marker(text)

    @pytest.mark.parametrize("text", ["Music", "[Music", "(a) b", "", None, 42])
    def test_non_markers(self, text):
        assert not is_caption_marker(text)

    def test_extract_prefers_segments(self):
        event = CaptionEvent(
            start_ms=0,
            segments=(CaptionSegment(text="[Mu"), CaptionSegment(text="sic] ")),
            text="ignored",
        )
        assert extract_caption_text(event) == "[Music]"

    def test_extract_flat_text(self):
        assert extract_caption_text(CaptionEvent(start_ms=0, text=" hi ")) == "hi"

    def test_extract_missing(self):
        assert extract_caption_text(CaptionEvent(start_ms=0)) == ""
        assert extract_caption_text(None) == ""

    def test_skip_markers(self):
        events = [
            CaptionEvent(start_ms=0, text="Hello"),
            CaptionEvent(start_ms=100, text="[Music]"),
            CaptionEvent(start_ms=200, text="(cheering)"),
            CaptionEvent(start_ms=300, text="World"),
        ]
        assert skip_caption_markers(events, 0) == 0
        assert skip_caption_markers(events, 1) == 3

    def test_skip_markers_to_end(self):
        events = [CaptionEvent(start_ms=0, text="[Music]")]
        assert skip_caption_markers(events, 0) == 1
        assert skip_caption_markers(events, 1) == 1


# ---------------------------------------------------------------------------
# Skip zones
# ---------------------------------------------------------------------------


class TestBuildSkipZones:
    """One zone per strictly positive gap between adjacent words."""

    def test_positive_gap(self):
        zones = build_skip_zones([_word("cat", 0, 500), _word("dog", 2000, 2500)])
        assert len(zones) == 1
        zone = zones[0]
        assert (zone.from_ms, zone.to_ms) == (500, 2000)
        assert (zone.from_word, zone.to_word) == ("cat", "dog")
        assert zone.gap_ms == 1500

    def test_touching_and_overlapping_words_produce_no_zone(self):
        words = [_word("a", 0, 500), _word("b", 500, 900), _word("c", 700, 1000)]
        assert build_skip_zones(words) == []

    def test_indexes_consecutive_after_dropped_gaps(self):
        words = [
            _word("a", 0, 500),
            _word("b", 500, 800),
            _word("c", 1000, 1200),
            _word("d", 1200, 1300),
            _word("e", 2000, 2100),
        ]
        zones = build_skip_zones(words)
        assert [z.index for z in zones] == [0, 1]
        assert [(z.from_ms, z.to_ms) for z in zones] == [(800, 1000), (1300, 2000)]

    def test_every_zone_has_positive_gap(self):
        words = [_word(str(i), i * 300, i * 300 + 250 + (i % 3) * 50) for i in range(20)]
        for zone in build_skip_zones(words):
            assert zone.to_ms > zone.from_ms

    @pytest.mark.parametrize("count", [0, 1])
    def test_fewer_than_two_words(self, count):
        assert build_skip_zones([_word("a", 0, 100)][:count]) == []

"""Unit tests for the transcription normalizer.

WHY: The normalizer is the only boundary that tolerates the engine's
inconsistent output shapes. If it leaks a mapping downstream, or silently
returns nothing, the render produces a video without captions.

HOW: Tests cover shape detection (list vs keyed object), field aliases
for the engines seen in practice, skipping of blank items, the fatal
empty case, and envelope unwrapping.

RULES:
- Same logical word list in either shape -> identical output
- No usable segment -> EmptyTranscription, never []
"""

import logging

import pytest

from quill_captions.core.ir import TimedSegment
from quill_captions.core.normalizer import extract_transcription, normalize
from quill_captions.errors import (
    EmptyTranscription,
    InvalidRange,
    MalformedTranscription,
)

EXPECTED = [
    TimedSegment("Hello", 0, 400),
    TimedSegment("there", 400, 900),
    TimedSegment("friend.", 1500, 2100),
]


class TestShapeDetection:
    """Ordered lists and keyed objects normalize identically."""

    def test_sequence(self, whisper_items):
        assert normalize(whisper_items) == EXPECTED

    def test_mapping(self, whisper_items_keyed):
        assert normalize(whisper_items_keyed) == EXPECTED

    def test_shape_agnostic(self, whisper_items, whisper_items_keyed):
        assert normalize(whisper_items) == normalize(whisper_items_keyed)

    def test_tuple_is_a_sequence(self, whisper_items):
        assert normalize(tuple(whisper_items)) == EXPECTED

    def test_mapping_uses_insertion_order_not_key_order(self):
        raw = {
            "b": {"text": "first", "start": 0, "end": 100},
            "a": {"text": "second", "start": 100, "end": 200},
        }
        assert [s.text for s in normalize(raw)] == ["first", "second"]


class TestFieldAliases:
    """Timing is read from the field names known engines use."""

    def test_camel_case_ms(self):
        raw = [{"text": "x", "startMs": 10, "endMs": 20}]
        assert normalize(raw) == [TimedSegment("x", 10, 20)]

    def test_snake_case_ms(self):
        raw = [{"text": "x", "start_ms": 10, "end_ms": 20}]
        assert normalize(raw) == [TimedSegment("x", 10, 20)]

    def test_assemblyai_start_end(self):
        raw = [{"text": "word", "start": 250, "end": 610, "confidence": 0.9, "speaker": None}]
        assert normalize(raw) == [TimedSegment("word", 250, 610)]

    def test_whisper_timestamps_only(self):
        raw = [{"text": "hi", "timestamps": {"from": "00:00:01,000", "to": "00:00:01,250"}}]
        assert normalize(raw) == [TimedSegment("hi", 1000, 1250)]

    def test_float_times_rounded(self):
        raw = [{"text": "x", "start": 100.4, "end": 200.6}]
        assert normalize(raw) == [TimedSegment("x", 100, 201)]

    def test_numeric_strings_accepted(self):
        raw = [{"text": "x", "start": "100", "end": "250"}]
        assert normalize(raw) == [TimedSegment("x", 100, 250)]

    def test_text_trimmed(self):
        raw = [{"text": "  spaced\n", "start": 0, "end": 10}]
        assert normalize(raw)[0].text == "spaced"


class TestItemErrors:
    """Bad items fail loudly; blank items are skipped."""

    def test_blank_items_skipped(self):
        raw = [
            {"text": "   ", "start": 0, "end": 10},
            {"text": "kept", "start": 10, "end": 20},
            {"text": None, "start": 20, "end": 30},
        ]
        assert normalize(raw) == [TimedSegment("kept", 10, 20)]

    def test_non_object_item_among_objects(self):
        raw = [{"text": "ok", "start": 0, "end": 10}, "just a string"]
        with pytest.raises(MalformedTranscription, match="item 2"):
            normalize(raw)

    def test_missing_start(self):
        with pytest.raises(MalformedTranscription, match="missing start"):
            normalize([{"text": "x", "end": 10}])

    def test_missing_end(self):
        with pytest.raises(MalformedTranscription, match="missing end"):
            normalize([{"text": "x", "start": 10}])

    def test_non_numeric_time(self):
        with pytest.raises(MalformedTranscription):
            normalize([{"text": "x", "start": "soon", "end": 10}])

    def test_boolean_time(self):
        with pytest.raises(MalformedTranscription):
            normalize([{"text": "x", "start": True, "end": 10}])

    def test_negative_time(self):
        with pytest.raises(MalformedTranscription):
            normalize([{"text": "x", "start": -5, "end": 10}])

    def test_end_before_start(self):
        with pytest.raises(InvalidRange):
            normalize([{"text": "x", "start": 50, "end": 10}])


class TestEmptyTranscription:
    """No usable segment is a hard failure."""

    @pytest.mark.parametrize("raw", [[], {}, None, "text", 42, b"bytes"])
    def test_nothing_usable(self, raw):
        with pytest.raises(EmptyTranscription):
            normalize(raw)

    @pytest.mark.parametrize("raw", [{"a": "x"}, ["just a string"], [1, 2, 3], {"0": None}])
    def test_no_object_items(self, raw):
        with pytest.raises(EmptyTranscription):
            normalize(raw)

    def test_only_blank_items(self):
        with pytest.raises(EmptyTranscription):
            normalize([{"text": "", "start": 0, "end": 1}])

    def test_logs_shape_preview(self, caplog):
        with caplog.at_level(logging.WARNING, logger="quill_captions.core.normalizer"):
            with pytest.raises(EmptyTranscription):
                normalize({})
        assert "Unexpected transcription output shape" in caplog.text


class TestExtractTranscription:
    """Known engine envelopes are unwrapped."""

    def test_whisper_envelope(self, whisper_items):
        payload = {"systeminfo": "AVX = 1", "transcription": whisper_items}
        assert extract_transcription(payload) is whisper_items

    def test_whisper_envelope_keyed(self, whisper_items_keyed):
        payload = {"transcription": whisper_items_keyed}
        assert normalize(extract_transcription(payload)) == EXPECTED

    def test_assemblyai_envelope(self):
        words = [{"text": "hi", "start": 0, "end": 10}]
        payload = {"status": "completed", "words": words}
        assert extract_transcription(payload) is words

    def test_bare_list_unchanged(self, whisper_items):
        assert extract_transcription(whisper_items) is whisper_items

    def test_non_container_envelope_value_unchanged(self):
        payload = {"transcription": "not a list"}
        assert extract_transcription(payload) is payload

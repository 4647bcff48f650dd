"""Transcription normalizer: speech-to-text output -> ordered TimedSegments.

WHY: The speech-to-text engine returns its per-segment results either as
an ordered list or, as an implementation quirk, as a mapping with
arbitrary keys. Field names also differ between engines (whisper.cpp
``offsets``/``timestamps``, AssemblyAI ``start``/``end``). Downstream
stages must see exactly one shape, so this module is the single boundary
that tolerates the ambiguity.

HOW: _detect_shape() resolves the payload to a tagged _Shape (sequence or
mapping) and the items are recovered in iteration order. Each item is
read through a list of field aliases, its text trimmed, and turned into a
TimedSegment. No timing logic happens here: items are neither re-ordered
nor merged.

RULES:
- Mapping payloads are read in insertion order (values only)
- Strings and bytes are never treated as sequences
- Items with blank text are skipped; items without a usable start/end
  raise MalformedTranscription; end < start raises InvalidRange
- A payload with no object items at all yields no segments
  (EmptyTranscription); a non-object mixed in with objects raises
  MalformedTranscription
- Zero usable segments raises EmptyTranscription, never an empty result
- Numeric times are milliseconds, rounded to the nearest integer
"""

from __future__ import annotations

import enum
import json
import logging
import math
from collections.abc import Mapping, Sequence
from typing import Any, List, Optional, Tuple

from quill_captions.core.ir import TimedSegment
from quill_captions.core.timestamps import decode
from quill_captions.errors import (
    EmptyTranscription,
    InvalidRange,
    MalformedTimestamp,
    MalformedTranscription,
)

logger = logging.getLogger(__name__)

# Field aliases, first present wins. Dotted names read one nested level.
_START_FIELDS: Tuple[str, ...] = ("startMs", "start_ms", "start", "offsets.from", "timestamps.from")
_END_FIELDS: Tuple[str, ...] = ("endMs", "end_ms", "end", "offsets.to", "timestamps.to")

# Envelope keys used by known engines around the per-segment results.
_ENVELOPE_KEYS: Tuple[str, ...] = ("transcription", "words")


class _Shape(enum.Enum):
    SEQUENCE = "sequence"
    MAPPING = "mapping"


def _detect_shape(raw: Any) -> Optional[_Shape]:
    if isinstance(raw, Mapping):
        return _Shape.MAPPING
    if isinstance(raw, Sequence) and not isinstance(raw, (str, bytes, bytearray)):
        return _Shape.SEQUENCE
    return None


def _lookup(item: Mapping, name: str) -> Any:
    """Read ``name`` (optionally ``outer.inner``) from an item, or None."""
    if "." not in name:
        return item.get(name)
    outer, inner = name.split(".", 1)
    nested = item.get(outer)
    if isinstance(nested, Mapping):
        return nested.get(inner)
    return None


def _to_ms(value: Any, label: str, position: int) -> int:
    """Convert a numeric or timestamp-string time into integer milliseconds."""
    if isinstance(value, bool):
        raise MalformedTranscription(
            "item {}: {} must be a number, got {!r}".format(position, label, value)
        )
    if isinstance(value, str):
        try:
            return decode(value)
        except MalformedTimestamp:
            try:
                value = float(value)
            except ValueError:
                raise MalformedTranscription(
                    "item {}: {} '{}' is neither a number nor a timestamp".format(
                        position, label, value
                    )
                ) from None
    if not isinstance(value, (int, float)) or not math.isfinite(value):
        raise MalformedTranscription(
            "item {}: {} must be a finite number, got {!r}".format(position, label, value)
        )
    if value < 0:
        raise MalformedTranscription(
            "item {}: {} must not be negative, got {}".format(position, label, value)
        )
    return int(round(value))


def _read_time(item: Mapping, fields: Tuple[str, ...], label: str, position: int) -> int:
    for name in fields:
        value = _lookup(item, name)
        if value is not None:
            return _to_ms(value, label, position)
    raise MalformedTranscription(
        "item {}: missing {} time (expected one of {})".format(
            position, label, ", ".join(fields)
        )
    )


def _normalize_item(item: Any, position: int) -> Optional[TimedSegment]:
    """Turn one engine item into a TimedSegment, or None if its text is blank."""
    if not isinstance(item, Mapping):
        raise MalformedTranscription(
            "item {}: expected an object, got {}".format(position, type(item).__name__)
        )
    text = item.get("text")
    if not isinstance(text, str) or not text.strip():
        return None

    start_ms = _read_time(item, _START_FIELDS, "start", position)
    end_ms = _read_time(item, _END_FIELDS, "end", position)
    if end_ms < start_ms:
        raise InvalidRange(
            "item {}: '{}' ends at {} before it starts at {}".format(
                position, text.strip(), end_ms, start_ms
            )
        )
    return TimedSegment(text=text.strip(), start_ms=start_ms, end_ms=end_ms)


def _preview(raw: Any, limit: int = 500) -> str:
    try:
        return json.dumps(raw, default=str)[:limit]
    except (TypeError, ValueError):
        return repr(raw)[:limit]


def normalize(raw: Any) -> List[TimedSegment]:
    """Normalize engine output into an ordered list of TimedSegments.

    Args:
        raw: Per-segment engine results, as a list/tuple or as a mapping
             whose values are the segments in iteration order.

    Returns:
        One TimedSegment per item with non-blank text, in input order.

    Raises:
        EmptyTranscription: If no usable segment was found.
        MalformedTranscription: If an item lacks timing, or is not an object
            while other items are.
        InvalidRange: If an item ends before it starts.
    """
    shape = _detect_shape(raw)
    if shape is _Shape.MAPPING:
        items = list(raw.values())
    elif shape is _Shape.SEQUENCE:
        items = list(raw)
    else:
        items = []

    segments: List[TimedSegment] = []
    # No object among the items means the shape itself is not a transcription.
    if any(isinstance(item, Mapping) for item in items):
        for position, item in enumerate(items, 1):
            segment = _normalize_item(item, position)
            if segment is None:
                logger.debug("Skipping blank transcription item %d", position)
                continue
            segments.append(segment)

    if not segments:
        logger.warning(
            "Unexpected transcription output shape: type=%s items=%d preview=%s",
            type(raw).__name__, len(items), _preview(raw),
        )
        raise EmptyTranscription("transcription produced no usable segments")

    logger.debug("Normalized %d transcription segments (%s)", len(segments), shape.value)
    return segments


def extract_transcription(payload: Any) -> Any:
    """Unwrap a known engine envelope around the per-segment results.

    WHY: whisper.cpp returns ``{"transcription": [...], ...}`` and
    AssemblyAI-style responses carry ``{"words": [...], ...}``. Callers
    holding the whole response can pass it here instead of digging.

    RULES:
    - Only unwraps when the envelope value is a list or a mapping
    - Anything else is returned unchanged for normalize() to judge
    """
    if isinstance(payload, Mapping):
        for key in _ENVELOPE_KEYS:
            value = payload.get(key)
            if _detect_shape(value) is not None:
                return value
    return payload

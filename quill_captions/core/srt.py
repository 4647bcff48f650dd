"""SRT document parser and writer.

WHY: The surrounding system stores and transfers captions as SRT text, so
both directions of the pipeline pass through this format: transcription
output is written as SRT, and SRT is parsed back into segments before
paging. The two directions must round-trip exactly.

HOW: parse() normalizes line endings, splits the document into blocks on
blank lines, and reads each block as an optional index line, a
``start --> end`` timing line and zero or more text lines. write() emits
the canonical form with 1-based indices and comma separators.

RULES:
- parse(write(segments)) == segments for ordered segments whose text is
  trimmed and contains no blank lines
- The index line is ignored; a block may start directly with its timing line
- Anything after the end timestamp on the timing line (cue settings) is ignored
- Missing timing line or undecodable timestamp -> MalformedDocument
- A second timing line inside the text (cues not separated by a blank
  line) -> MalformedDocument, never merged into the caption text
- Text lines are kept as written; only line endings are normalized
- end < start -> InvalidRange; start before previous start -> UnorderedInput
- Block numbers in errors are 1-based positions in the document
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Tuple

from quill_captions.core.ir import TimedSegment
from quill_captions.core.timestamps import decode, encode
from quill_captions.errors import (
    InvalidRange,
    MalformedDocument,
    MalformedTimestamp,
    UnorderedInput,
)

logger = logging.getLogger(__name__)

TIMING_ARROW = "-->"


def _split_blocks(document: str) -> List[List[str]]:
    """Split a document into blocks of non-blank lines."""
    text = document.lstrip("\ufeff").replace("\r\n", "\n").replace("\r", "\n")
    blocks: List[List[str]] = []
    current: List[str] = []
    for line in text.split("\n"):
        if line.strip():
            current.append(line)
        elif current:
            blocks.append(current)
            current = []
    if current:
        blocks.append(current)
    return blocks


def _parse_timing_line(line: str, block_number: int) -> Tuple[int, int]:
    """Decode ``start --> end`` into a (start_ms, end_ms) pair."""
    left, _, right = line.partition(TIMING_ARROW)
    right_fields = right.split()
    if not right_fields:
        raise MalformedDocument(
            "timing line '{}' has no end timestamp".format(line), block_number
        )
    try:
        return decode(left), decode(right_fields[0])
    except MalformedTimestamp as exc:
        raise MalformedDocument(
            "bad timing line '{}': {}".format(line, exc), block_number
        ) from exc


def _is_timing_line(line: str) -> bool:
    """True if ``line`` is a complete, decodable ``start --> end`` line."""
    left, arrow, right = line.partition(TIMING_ARROW)
    right_fields = right.split()
    if not arrow or not right_fields:
        return False
    try:
        decode(left)
        decode(right_fields[0])
    except MalformedTimestamp:
        return False
    return True


def parse(document: str) -> List[TimedSegment]:
    """Parse an SRT document into an ordered list of TimedSegments.

    Args:
        document: Full SRT text. An empty or blank document yields ``[]``.

    Returns:
        Segments in document order.

    Raises:
        MalformedDocument: A block has no timing line or it fails to decode.
        InvalidRange: A block ends before it starts.
        UnorderedInput: A block starts before the block preceding it.
    """
    segments: List[TimedSegment] = []
    previous_start: Optional[int] = None

    for block_number, lines in enumerate(_split_blocks(document), 1):
        if TIMING_ARROW in lines[0]:
            timing_at = 0
        elif len(lines) > 1 and TIMING_ARROW in lines[1]:
            timing_at = 1
        else:
            raise MalformedDocument("missing 'start --> end' timing line", block_number)

        start_ms, end_ms = _parse_timing_line(lines[timing_at], block_number)
        text_lines = lines[timing_at + 1:]
        for line in text_lines:
            if _is_timing_line(line):
                raise MalformedDocument(
                    "second timing line '{}' in caption text (missing blank line "
                    "between cues?)".format(line.strip()),
                    block_number,
                )
        if end_ms < start_ms:
            raise InvalidRange(
                "ends at {} before it starts at {}".format(encode(end_ms), encode(start_ms)),
                block_number,
            )
        if previous_start is not None and start_ms < previous_start:
            raise UnorderedInput(
                "starts at {} before the previous block's {}".format(
                    encode(start_ms), encode(previous_start)
                ),
                block_number,
            )

        segments.append(TimedSegment(
            text="\n".join(text_lines),
            start_ms=start_ms,
            end_ms=end_ms,
        ))
        previous_start = start_ms

    logger.debug("Parsed %d SRT blocks", len(segments))
    return segments


def write(segments: Iterable[TimedSegment]) -> str:
    """Serialize segments as an SRT document.

    Each block is ``{index}\\n{start} --> {end}\\n{text}\\n``; blocks are
    separated by one blank line. Text is trimmed of surrounding whitespace.
    """
    blocks = []
    for index, segment in enumerate(segments, 1):
        blocks.append("{}\n{} {} {}\n{}\n".format(
            index,
            encode(segment.start_ms),
            TIMING_ARROW,
            encode(segment.end_ms),
            segment.text.strip(),
        ))
    return "\n".join(blocks)

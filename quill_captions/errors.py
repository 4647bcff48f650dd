"""Error taxonomy for the caption engine.

WHY: Every failure in the caption core is deterministic: the same input
always fails the same way, so callers need to tell "bad input" apart from
everything else and surface it as one terminal error state, not retry.

HOW: A single CaptionError base (a ValueError, so existing ``except
ValueError`` handlers keep catching it) with one subclass per failure kind.
Document-level errors carry the 1-based block index so the bad block can be
located.

RULES:
- Never default a bad timestamp silently; raise MalformedTimestamp
- block_index / index are 1-based display positions, or None when unknown
- EmptyTranscription is fatal for the pipeline (no captions can be produced)
"""

from __future__ import annotations

from typing import Optional


class CaptionError(ValueError):
    """Base class for all caption engine failures."""


class MalformedTimestamp(CaptionError):
    """A timing string is not ``HH:MM:SS,mmm`` / ``HH:MM:SS.mmm``, or a
    millisecond value cannot be encoded."""


class MalformedDocument(CaptionError):
    """A subtitle document block is structurally invalid."""

    def __init__(self, message: str, block_index: Optional[int] = None) -> None:
        if block_index is not None:
            message = "Block {}: {}".format(block_index, message)
        super().__init__(message)
        self.block_index = block_index


class InvalidRange(CaptionError):
    """A segment or token ends before it starts."""

    def __init__(self, message: str, block_index: Optional[int] = None) -> None:
        if block_index is not None:
            message = "Block {}: {}".format(block_index, message)
        super().__init__(message)
        self.block_index = block_index


class UnorderedInput(CaptionError):
    """A segment starts before the segment preceding it."""

    def __init__(self, message: str, index: Optional[int] = None) -> None:
        if index is not None:
            message = "Item {}: {}".format(index, message)
        super().__init__(message)
        self.index = index


class EmptyTranscription(CaptionError):
    """The speech-to-text output contained no usable segments."""


class MalformedTranscription(CaptionError):
    """A speech-to-text item is not an object or has no usable timing."""

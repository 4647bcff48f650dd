"""Value types for timed segments, tokens and pages.

WHY: Every stage of the caption pipeline passes the same three shapes
around: segments from a subtitle document, tokens inside a display page,
and the pages themselves. Pages are read concurrently by render workers,
so they must be impossible to mutate after synthesis.

HOW: Three frozen dataclasses. Construction checks the local invariants
(end after start, page bounds matching its tokens); ordering across a
sequence is checked by the stages that build sequences.

RULES:
- All times are integer milliseconds from the start of the media
- TimedSegment.end_ms >= start_ms; Token.to_ms >= from_ms
- Page.tokens is a non-empty tuple sorted by from_ms, non-overlapping
- Page.start_ms == tokens[0].from_ms, Page.end_ms == tokens[-1].to_ms
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

from quill_captions.errors import InvalidRange


@dataclass(frozen=True)
class TimedSegment:
    """A single timed span of text, as it appears in a subtitle document.

    Attributes:
        text: Caption text; multi-line blocks are joined with ``\\n``.
        start_ms: Start time in milliseconds.
        end_ms: End time in milliseconds (>= start_ms).
    """

    text: str
    start_ms: int
    end_ms: int

    def __post_init__(self) -> None:
        if self.end_ms < self.start_ms:
            raise InvalidRange(
                "segment '{}' ends at {} before it starts at {}".format(
                    self.text, self.end_ms, self.start_ms
                )
            )

    @property
    def duration_ms(self) -> int:
        return self.end_ms - self.start_ms


@dataclass(frozen=True)
class Token:
    """The atomic display unit inside a page, usually one word."""

    text: str
    from_ms: int
    to_ms: int

    def __post_init__(self) -> None:
        if self.to_ms < self.from_ms:
            raise InvalidRange(
                "token '{}' ends at {} before it starts at {}".format(
                    self.text, self.to_ms, self.from_ms
                )
            )


@dataclass(frozen=True)
class Page:
    """A group of temporally adjacent tokens displayed together.

    WHY: The renderer shows one page at a time. A page's range is the span
    from its first token's start to its last token's end, inclusive.

    HOW: Built once by the page synthesizer via ``Page.from_tokens`` and
    never modified. ``__post_init__`` rejects a page whose bounds do not
    match its tokens.
    """

    tokens: Tuple[Token, ...]
    start_ms: int
    duration_ms: int

    def __post_init__(self) -> None:
        if not self.tokens:
            raise InvalidRange("a page must contain at least one token")
        if self.start_ms != self.tokens[0].from_ms:
            raise InvalidRange(
                "page starts at {} but its first token starts at {}".format(
                    self.start_ms, self.tokens[0].from_ms
                )
            )
        if self.start_ms + self.duration_ms != self.tokens[-1].to_ms:
            raise InvalidRange(
                "page ends at {} but its last token ends at {}".format(
                    self.start_ms + self.duration_ms, self.tokens[-1].to_ms
                )
            )

    @classmethod
    def from_tokens(cls, tokens: Sequence[Token]) -> "Page":
        """Close a run of tokens into a page, deriving its bounds."""
        frozen = tuple(tokens)
        if not frozen:
            raise InvalidRange("a page must contain at least one token")
        start_ms = frozen[0].from_ms
        return cls(
            tokens=frozen,
            start_ms=start_ms,
            duration_ms=frozen[-1].to_ms - start_ms,
        )

    @property
    def end_ms(self) -> int:
        return self.start_ms + self.duration_ms

    @property
    def text(self) -> str:
        return " ".join(token.text for token in self.tokens)

    def contains(self, time_ms: float) -> bool:
        """True if ``time_ms`` falls inside the page, both ends inclusive."""
        return self.start_ms <= time_ms <= self.end_ms

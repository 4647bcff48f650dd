"""Page synthesizer: group timed segments into display pages.

WHY: Vertical short-form video shows captions a few words at a time. A
"page" is the group of words on screen together; a pause in speech should
start a fresh page so the text never runs ahead of the audio. This is the
central algorithm of the engine.

HOW: A single left-to-right pass. Each segment is turned into tokens:
one per word when ``split_words`` is on, the segment range shared among
its words in proportion to their length. Before a segment's tokens are
added, the silence between the page's last token and the segment's start
is compared with the gap threshold; a gap of at least the threshold closes
the current page. An optional PagePolicy can close pages earlier for
readability.

RULES:
- New page when segment.start_ms - previous_token.to_ms >= gap_threshold_ms
- Negative gaps (overlapping segments) always merge
- The gap rule is only evaluated between segments, never inside one
- Overlapping tokens are trimmed so tokens tile without overlap; the union
  of all token ranges equals the union of all segment ranges
- Out-of-order segments raise UnorderedInput (no re-sorting)
- Empty input -> []; zero-duration segments are ordinary tokens
- O(n) in the number of tokens, no backtracking
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from quill_captions.core.ir import Page, TimedSegment, Token
from quill_captions.errors import UnorderedInput

logger = logging.getLogger(__name__)

GAP_THRESHOLD_MS = 120
"""Default silence (ms) that separates two pages."""


@dataclass(frozen=True)
class PagePolicy:
    """Optional readability caps applied on top of the gap rule.

    Attributes:
        max_tokens: Close a page before it would hold more tokens than this.
        max_duration_ms: Close a page before its span would exceed this.

    Both default to None (no cap); the synthesizer has no built-in limit.
    """

    max_tokens: Optional[int] = None
    max_duration_ms: Optional[int] = None

    def __post_init__(self) -> None:
        if self.max_tokens is not None and self.max_tokens < 1:
            raise ValueError("max_tokens must be at least 1, got {}".format(self.max_tokens))
        if self.max_duration_ms is not None and self.max_duration_ms < 0:
            raise ValueError(
                "max_duration_ms must not be negative, got {}".format(self.max_duration_ms)
            )

    def would_overflow(self, page_tokens: Sequence[Token], token: Token) -> bool:
        """True if appending ``token`` to a non-empty page breaks a cap."""
        if self.max_tokens is not None and len(page_tokens) >= self.max_tokens:
            return True
        if (
            self.max_duration_ms is not None
            and token.to_ms - page_tokens[0].from_ms > self.max_duration_ms
        ):
            return True
        return False


def split_segment(segment: TimedSegment) -> List[Token]:
    """Split a segment into one token per whitespace-separated word.

    The segment's range is shared among its words in proportion to their
    character count, in whole milliseconds. Words tile the range: the
    first starts at ``start_ms``, each starts where the previous ended,
    and the last ends at ``end_ms``. A segment with no words becomes a
    single empty token so its range is not lost.
    """
    words = segment.text.split()
    if len(words) <= 1:
        text = words[0] if words else ""
        return [Token(text=text, from_ms=segment.start_ms, to_ms=segment.end_ms)]

    total_chars = sum(len(word) for word in words)
    duration = segment.duration_ms
    tokens: List[Token] = []
    cursor = segment.start_ms
    consumed = 0
    last = len(words) - 1
    for i, word in enumerate(words):
        consumed += len(word)
        if i == last:
            to_ms = segment.end_ms
        else:
            to_ms = segment.start_ms + (duration * consumed) // total_chars
        tokens.append(Token(text=word, from_ms=cursor, to_ms=to_ms))
        cursor = to_ms
    return tokens


def _segment_tokens(segment: TimedSegment, split_words: bool) -> List[Token]:
    if split_words:
        return split_segment(segment)
    return [Token(text=segment.text.strip(), from_ms=segment.start_ms, to_ms=segment.end_ms)]


def _trim_after(token: Token, previous: Token) -> Token:
    """Move ``token`` so it starts no earlier than ``previous`` ends."""
    if token.from_ms >= previous.to_ms:
        return token
    from_ms = previous.to_ms
    return Token(text=token.text, from_ms=from_ms, to_ms=max(token.to_ms, from_ms))


def synthesize(
    segments: Iterable[TimedSegment],
    gap_threshold_ms: int = GAP_THRESHOLD_MS,
    policy: Optional[PagePolicy] = None,
    split_words: bool = True,
) -> List[Page]:
    """Group ordered segments into pages.

    Args:
        segments: Segments sorted by start_ms (non-decreasing).
        gap_threshold_ms: Silence at which a new page starts (inclusive).
        policy: Optional readability caps; None means no caps.
        split_words: Split each segment into word tokens.

    Returns:
        Pages sorted by start_ms, non-overlapping, each non-empty.

    Raises:
        UnorderedInput: If a segment starts before the one preceding it.
        ValueError: If gap_threshold_ms is negative.
    """
    if gap_threshold_ms < 0:
        raise ValueError("gap_threshold_ms must not be negative, got {}".format(gap_threshold_ms))
    if policy is None:
        policy = PagePolicy()

    pages: List[Page] = []
    current: List[Token] = []
    previous_start: Optional[int] = None

    for index, segment in enumerate(segments, 1):
        if previous_start is not None and segment.start_ms < previous_start:
            raise UnorderedInput(
                "segment '{}' starts at {} ms, before the previous segment at {} ms".format(
                    segment.text, segment.start_ms, previous_start
                ),
                index,
            )
        previous_start = segment.start_ms

        if current and segment.start_ms - current[-1].to_ms >= gap_threshold_ms:
            pages.append(Page.from_tokens(current))
            current = []

        for token in _segment_tokens(segment, split_words):
            if current:
                token = _trim_after(token, current[-1])
                if policy.would_overflow(current, token):
                    pages.append(Page.from_tokens(current))
                    current = []
            current.append(token)

    if current:
        pages.append(Page.from_tokens(current))

    logger.debug(
        "Synthesized %d pages (gap threshold %d ms)", len(pages), gap_threshold_ms
    )
    return pages

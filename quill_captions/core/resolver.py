"""Active-state resolver: what is on screen at a given playback time.

WHY: The renderer asks, once per frame, which page is visible and how far
each word's highlight has progressed. This runs tens of times per second
in preview and once per encoded frame in the final render, possibly from
several workers sharing the same page sequence.

HOW: Pages are sorted and non-overlapping, so the active page is found by
binary search on start_ms followed by an inclusive end check. Token
progress is a clamped linear ramp over the token's range. Line splitting
halves the page's tokens (ceiling) for two-row display. Everything is
recomputed on each call; nothing is cached.

RULES:
- A page is active when start_ms <= t <= start_ms + duration_ms (both inclusive)
- When two pages share a boundary instant, the earlier page wins
- No active page is a normal result (None), not an error
- progress = clamp((t - from) / max(to - from, 1), 0, 1)
- Pure functions, no logging, no mutation; safe to call concurrently
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from quill_captions.core.ir import Page, Token


@dataclass(frozen=True)
class ActiveState:
    """Everything the renderer needs for one time sample.

    Attributes:
        page_index: Position of the active page in the page sequence.
        page: The active page.
        token_index: Index of the last token that has started, or None if
            the page is visible but its first token has not started yet.
        lines: The page's tokens split into one or two display rows.
        progress: Reveal progress per token, aligned with page.tokens.
    """

    page_index: int
    page: Page
    token_index: Optional[int]
    lines: Tuple[Tuple[Token, ...], ...]
    progress: Tuple[float, ...]

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready form using the page artifact's camelCase keys."""
        return {
            "pageIndex": self.page_index,
            "startMs": self.page.start_ms,
            "durationMs": self.page.duration_ms,
            "tokenIndex": self.token_index,
            "lines": [
                [{"text": t.text, "fromMs": t.from_ms, "toMs": t.to_ms} for t in line]
                for line in self.lines
            ],
            "progress": list(self.progress),
        }


def frame_to_ms(frame: int, fps: float) -> float:
    """Convert a frame number at ``fps`` into a playback time in ms."""
    if fps <= 0:
        raise ValueError("fps must be positive, got {}".format(fps))
    return frame / fps * 1000


def find_active_page_index(pages: Sequence[Page], time_ms: float) -> Optional[int]:
    """Index of the page containing ``time_ms``, or None."""
    if math.isnan(time_ms):
        return None
    lo, hi = 0, len(pages)
    while lo < hi:
        mid = (lo + hi) // 2
        if pages[mid].start_ms <= time_ms:
            lo = mid + 1
        else:
            hi = mid
    index = lo - 1
    if index < 0 or not pages[index].contains(time_ms):
        return None
    # Prefer the earlier page when an end and a start coincide.
    while index > 0 and pages[index - 1].contains(time_ms):
        index -= 1
    return index


def find_active_page(pages: Sequence[Page], time_ms: float) -> Optional[Page]:
    """The page whose range contains ``time_ms`` (inclusive), or None."""
    index = find_active_page_index(pages, time_ms)
    return pages[index] if index is not None else None


def token_progress(token: Token, time_ms: float) -> float:
    """Reveal progress of ``token`` at ``time_ms``, in [0, 1].

    Zero-duration tokens jump from 0 to 1 once ``time_ms`` passes
    ``from_ms``. A NaN time gives 0.0.
    """
    if math.isnan(time_ms):
        return 0.0
    span = max(token.to_ms - token.from_ms, 1)
    value = (time_ms - token.from_ms) / span
    return min(max(value, 0.0), 1.0)


def active_token_index(page: Page, time_ms: float) -> Optional[int]:
    """Index of the last token in ``page`` that has started by ``time_ms``."""
    found = None
    for i, token in enumerate(page.tokens):
        if token.from_ms > time_ms:
            break
        found = i
    return found


def split_lines(page: Page) -> List[Tuple[Token, ...]]:
    """Split a page's tokens into two display rows at ceil(n / 2).

    An empty second row is dropped, so one-token pages give one row.
    """
    midpoint = (len(page.tokens) + 1) // 2
    lines = [page.tokens[:midpoint], page.tokens[midpoint:]]
    return [line for line in lines if line]


def resolve(pages: Sequence[Page], time_ms: float) -> Optional[ActiveState]:
    """Compute the full display state for one time sample, or None."""
    index = find_active_page_index(pages, time_ms)
    if index is None:
        return None
    page = pages[index]
    return ActiveState(
        page_index=index,
        page=page,
        token_index=active_token_index(page, time_ms),
        lines=tuple(split_lines(page)),
        progress=tuple(token_progress(token, time_ms) for token in page.tokens),
    )

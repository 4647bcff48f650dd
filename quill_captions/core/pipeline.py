"""End-to-end conversions between engine output, SRT and pages.

WHY: Callers rarely want a single stage. The render path needs "SRT text
in, pages out"; the transcription path needs "engine output in, SRT out".
These helpers chain the stages and fill unspecified tunables from config.

HOW: transcription_to_srt() = normalize + write. srt_to_caption_pages() =
parse + synthesize. transcription_to_pages() goes through the SRT text on
purpose, so the pages are exactly what a stored SRT would produce.

RULES:
- None arguments take the configured defaults (quill_captions.config)
- No I/O; errors from the stages propagate unchanged
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional

from quill_captions import config
from quill_captions.core import srt
from quill_captions.core.ir import Page, TimedSegment
from quill_captions.core.normalizer import extract_transcription, normalize
from quill_captions.core.pages import PagePolicy, synthesize


@dataclass(frozen=True)
class ConvertResult:
    """Parsed captions together with the pages built from them."""

    captions: List[TimedSegment]
    pages: List[Page]


def srt_to_caption_pages(
    document: str,
    gap_threshold_ms: Optional[int] = None,
    policy: Optional[PagePolicy] = None,
    split_words: Optional[bool] = None,
) -> ConvertResult:
    """Parse an SRT document and group its captions into pages.

    Args:
        document: SRT text.
        gap_threshold_ms: Page gap threshold; defaults to
            config.DEFAULT_GAP_THRESHOLD_MS.
        policy: Readability caps; defaults to config.load_page_policy().
        split_words: Word tokens; defaults to config.DEFAULT_SPLIT_WORDS.

    Returns:
        ConvertResult with the parsed captions and the synthesized pages.
    """
    if gap_threshold_ms is None:
        gap_threshold_ms = config.DEFAULT_GAP_THRESHOLD_MS
    if policy is None:
        policy = config.load_page_policy()
    if split_words is None:
        split_words = config.DEFAULT_SPLIT_WORDS

    captions = srt.parse(document)
    pages = synthesize(
        captions,
        gap_threshold_ms=gap_threshold_ms,
        policy=policy,
        split_words=split_words,
    )
    return ConvertResult(captions=captions, pages=pages)


def transcription_to_srt(raw: Any) -> str:
    """Normalize engine output (or a whole engine response) into SRT text."""
    return srt.write(normalize(extract_transcription(raw)))


def transcription_to_pages(
    raw: Any,
    gap_threshold_ms: Optional[int] = None,
    policy: Optional[PagePolicy] = None,
    split_words: Optional[bool] = None,
) -> ConvertResult:
    """Engine output -> SRT -> pages, round-tripping through the SRT text."""
    return srt_to_caption_pages(
        transcription_to_srt(raw),
        gap_threshold_ms=gap_threshold_ms,
        policy=policy,
        split_words=split_words,
    )

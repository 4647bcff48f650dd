"""Shared test fixtures for the quill_captions test suite.

WHY: Several test modules need the same reference inputs: the two-block
SRT document from the end-to-end scenario, equivalent engine outputs in
list and keyed shapes, and a small page sequence with known bounds.

HOW: Plain pytest fixtures returning fresh values, plus module-level
constants for tests that want the raw data.

RULES:
- E2E_SRT is the reference scenario: "hello world" 0-1200, "goodbye" 1400-2000
- Engine outputs use whisper.cpp field names (offsets / timestamps)
- Fixtures return new objects on every call; nothing is shared mutable
"""

from typing import Any, Dict, List

import pytest

from quill_captions.core.ir import Page, TimedSegment, Token


E2E_SRT = (
    "1\n"
    "00:00:00,000 --> 00:00:01,200\n"
    "hello world\n"
    "\n"
    "2\n"
    "00:00:01,400 --> 00:00:02,000\n"
    "goodbye\n"
)

WHISPER_ITEMS: List[Dict[str, Any]] = [
    {
        "timestamps": {"from": "00:00:00,000", "to": "00:00:00,400"},
        "offsets": {"from": 0, "to": 400},
        "text": " Hello",
    },
    {
        "timestamps": {"from": "00:00:00,400", "to": "00:00:00,900"},
        "offsets": {"from": 400, "to": 900},
        "text": " there",
    },
    {
        "timestamps": {"from": "00:00:01,500", "to": "00:00:02,100"},
        "offsets": {"from": 1500, "to": 2100},
        "text": " friend.",
    },
]


def make_page(*tokens):
    """Build a Page from (text, from_ms, to_ms) triples."""
    return Page.from_tokens([Token(text=t, from_ms=a, to_ms=b) for t, a, b in tokens])


@pytest.fixture
def e2e_srt():
    return E2E_SRT


@pytest.fixture
def e2e_segments():
    return [
        TimedSegment(text="hello world", start_ms=0, end_ms=1200),
        TimedSegment(text="goodbye", start_ms=1400, end_ms=2000),
    ]


@pytest.fixture
def whisper_items():
    """whisper.cpp per-segment results as an ordered list."""
    return [dict(item) for item in WHISPER_ITEMS]


@pytest.fixture
def whisper_items_keyed():
    """The same results as a keyed object, in the same iteration order."""
    return {str(i): dict(item) for i, item in enumerate(WHISPER_ITEMS)}


@pytest.fixture
def sample_pages():
    """Three pages: [1000,1500], [2000,2600], [2600,3000] (shared boundary)."""
    return [
        make_page(("one", 1000, 1200), ("two", 1200, 1500)),
        make_page(("three", 2000, 2300), ("four", 2300, 2400), ("five", 2400, 2600)),
        make_page(("six", 2600, 3000)),
    ]

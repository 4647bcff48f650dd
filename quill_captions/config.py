"""Configuration constants and .env loading.

WHY: The gap threshold and the optional page readability caps are product
tunables, not algorithm constants. Keeping them in one place, overridable
from the environment, lets the CLI, the server and tests share the same
defaults without threading them through every call.

HOW: python-dotenv loads the .env file on import. Each tunable is a
module-level constant read with os.getenv and a literal default.
load_page_policy() assembles the default PagePolicy from them.

RULES:
- DEFAULT_GAP_THRESHOLD_MS is 120 unless QUILL_GAP_THRESHOLD_MS overrides it
- Page caps are unset (no cap) unless their variables are set
- Malformed integers raise ValueError naming the variable
- Core modules never import this module; only the pipeline, CLI and server do
"""

from __future__ import annotations

import os
from typing import Optional

from dotenv import load_dotenv

from quill_captions.core.pages import PagePolicy

# Load .env from the working directory (where the CLI/server is started)
load_dotenv()


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    """Read a non-negative integer environment variable."""
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(
            "{} must be an integer, got '{}'".format(name, raw)
        ) from None
    if value < 0:
        raise ValueError("{} must not be negative, got {}".format(name, value))
    return value


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


# ---------------------------------------------------------------------------
# Page synthesis defaults
# ---------------------------------------------------------------------------

DEFAULT_GAP_THRESHOLD_MS: int = _env_int("QUILL_GAP_THRESHOLD_MS", 120)
"""Silence (ms) between two segments at which a new page starts."""

DEFAULT_SPLIT_WORDS: bool = _env_bool("QUILL_SPLIT_WORDS", True)

DEFAULT_MAX_PAGE_TOKENS: Optional[int] = _env_int("QUILL_MAX_PAGE_TOKENS", None)
DEFAULT_MAX_PAGE_DURATION_MS: Optional[int] = _env_int("QUILL_MAX_PAGE_DURATION_MS", None)

# ---------------------------------------------------------------------------
# Runtime
# ---------------------------------------------------------------------------

LOG_LEVEL = os.getenv("QUILL_LOG_LEVEL", "INFO").upper()
API_HOST = os.getenv("QUILL_API_HOST", "0.0.0.0")
API_PORT: int = _env_int("QUILL_API_PORT", 8000)


def load_page_policy() -> PagePolicy:
    """Build the default PagePolicy from the configured caps.

    RULES:
    - Both caps None means pages are bounded only by the gap threshold
    """
    return PagePolicy(
        max_tokens=DEFAULT_MAX_PAGE_TOKENS,
        max_duration_ms=DEFAULT_MAX_PAGE_DURATION_MS,
    )

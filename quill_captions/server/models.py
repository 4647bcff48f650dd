"""Pydantic request/response models for the HTTP API.

WHY: The upload/render glue talks to the engine over HTTP. Typed models
give request validation, response serialization and OpenAPI docs for free,
and keep the JSON shapes identical to the page artifact.

HOW: One model per request/response body. Token, page and caption models
use snake_case attributes with the artifact's camelCase names as aliases,
so responses serialize as ``fromMs`` / ``startMs`` / ``durationMs``.

RULES:
- All fields carry Field(description=...) for the OpenAPI docs
- Optional tunables default to None, meaning "use the configured default"
- Active-state requests take raw page dicts; the page artifact validator
  (quill_captions.export) is the single place that checks them
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

_ALIASED = {"populate_by_name": True}


# ---------------------------------------------------------------------------
# Artifact shapes
# ---------------------------------------------------------------------------


class TokenModel(BaseModel):
    """One word (or short phrase) inside a page."""

    model_config = _ALIASED

    text: str = Field(description="Token text.")
    from_ms: int = Field(alias="fromMs", ge=0, description="Token start in milliseconds.")
    to_ms: int = Field(alias="toMs", ge=0, description="Token end in milliseconds.")


class PageModel(BaseModel):
    """A group of tokens displayed together."""

    model_config = _ALIASED

    tokens: List[TokenModel] = Field(min_length=1, description="Tokens in display order.")
    start_ms: int = Field(alias="startMs", ge=0, description="Page start (first token start).")
    duration_ms: int = Field(
        alias="durationMs", ge=0, description="Page duration (to the last token end)."
    )


class CaptionModel(BaseModel):
    """A caption as parsed from the SRT document."""

    model_config = _ALIASED

    text: str = Field(description="Caption text; multi-line captions are joined with newlines.")
    start_ms: int = Field(alias="startMs", ge=0, description="Caption start in milliseconds.")
    end_ms: int = Field(alias="endMs", ge=0, description="Caption end in milliseconds.")


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class PagesRequest(BaseModel):
    """SRT document to group into pages, with optional tunables."""

    srt: str = Field(description="SRT document text.")
    gap_threshold_ms: Optional[int] = Field(
        default=None, ge=0,
        description="Silence (ms) that starts a new page. Defaults to the server setting.",
    )
    max_tokens: Optional[int] = Field(
        default=None, ge=1, description="Optional cap on tokens per page."
    )
    max_duration_ms: Optional[int] = Field(
        default=None, ge=0, description="Optional cap on page duration in milliseconds."
    )
    split_words: Optional[bool] = Field(
        default=None, description="Split captions into word tokens. Defaults to the server setting."
    )

    model_config = {"json_schema_extra": {
        "examples": [
            {
                "srt": "1\n00:00:00,000 --> 00:00:01,200\nhello world\n",
                "gap_threshold_ms": 120,
            }
        ]
    }}


class SrtRequest(BaseModel):
    """Raw speech-to-text output to convert into SRT."""

    transcription: Any = Field(
        description=(
            "Engine output: a list or keyed object of segments with text and "
            "start/end times, or a whole response with a 'transcription' or "
            "'words' field."
        ),
    )


class ActiveRequest(BaseModel):
    """A page sequence and a playback time to resolve."""

    pages: List[Dict[str, Any]] = Field(description="Page artifact, as returned by /captions/pages.")
    time_ms: float = Field(description="Playback time in milliseconds.")


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class PagesResponse(BaseModel):
    """Parsed captions and the pages built from them."""

    captions: List[CaptionModel] = Field(description="Captions parsed from the SRT document.")
    pages: List[PageModel] = Field(description="Display pages, sorted and non-overlapping.")


class SrtResponse(BaseModel):
    srt: str = Field(description="SRT document text.")


class ActiveResponse(BaseModel):
    """Display state at the requested time."""

    active: Optional[Dict[str, Any]] = Field(
        default=None,
        description=(
            "Active page index, bounds, active token index, display lines and "
            "per-token progress; null when no page is visible."
        ),
    )


class ErrorResponse(BaseModel):
    """Standard error response body."""

    detail: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})

"""FastAPI application exposing the caption engine over HTTP.

WHY: The upload/render glue runs outside this package (browser UI, storage,
render farm). It needs three things from the engine: SRT -> pages before a
render, engine output -> SRT after transcription, and occasionally the
display state at a given time for previews and debugging.

HOW: Stateless JSON endpoints, each a thin wrapper around the pipeline,
export and resolver functions. CaptionError anywhere in the core is turned
into a 422 with the standard ErrorResponse body by one exception handler.

RULES:
- No state between requests; every request is independent
- CaptionError -> 422 {"detail": ...}; missing SRT text -> 400
- Tunables left unset fall back to quill_captions.config
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from quill_captions import __version__, config
from quill_captions.core.pages import PagePolicy
from quill_captions.core.pipeline import srt_to_caption_pages, transcription_to_srt
from quill_captions.core.resolver import resolve
from quill_captions.errors import CaptionError
from quill_captions.export import pages_from_dicts, pages_to_dicts
from quill_captions.server.models import (
    ActiveRequest,
    ActiveResponse,
    ErrorResponse,
    HealthResponse,
    PagesRequest,
    PagesResponse,
    SrtRequest,
    SrtResponse,
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Quill Captions API",
    description=(
        "Caption timing and page synthesis for short-form video: convert "
        "speech-to-text output into SRT, group SRT captions into display "
        "pages, and resolve the active page and word at a playback time."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


@app.exception_handler(CaptionError)
async def _caption_error_handler(request: Request, exc: CaptionError) -> JSONResponse:
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=422, content={"detail": str(exc)})


# ---------------------------------------------------------------------------
# Endpoints: Captions
# ---------------------------------------------------------------------------


@app.post(
    "/captions/pages",
    response_model=PagesResponse,
    tags=["captions"],
    summary="Group SRT captions into display pages",
    description=(
        "Parses the SRT document and groups its captions into pages. A silence "
        "of at least gap_threshold_ms between captions starts a new page."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "SRT payload missing"},
        422: {"model": ErrorResponse, "description": "Malformed SRT document"},
    },
)
async def create_pages(body: PagesRequest) -> PagesResponse:
    if not body.srt.strip():
        raise HTTPException(status_code=400, detail="SRT payload missing.")

    policy = PagePolicy(
        max_tokens=body.max_tokens if body.max_tokens is not None else config.DEFAULT_MAX_PAGE_TOKENS,
        max_duration_ms=(
            body.max_duration_ms
            if body.max_duration_ms is not None
            else config.DEFAULT_MAX_PAGE_DURATION_MS
        ),
    )
    result = srt_to_caption_pages(
        body.srt,
        gap_threshold_ms=body.gap_threshold_ms,
        policy=policy,
        split_words=body.split_words,
    )
    return PagesResponse(
        captions=[
            {"text": c.text, "startMs": c.start_ms, "endMs": c.end_ms}
            for c in result.captions
        ],
        pages=pages_to_dicts(result.pages),
    )


@app.post(
    "/captions/active",
    response_model=ActiveResponse,
    tags=["captions"],
    summary="Resolve the active page at a playback time",
    description=(
        "Returns the page visible at time_ms (boundaries inclusive), the last "
        "started token, the two display lines and per-token reveal progress."
    ),
    responses={422: {"model": ErrorResponse, "description": "Invalid page data"}},
)
async def resolve_active(body: ActiveRequest) -> ActiveResponse:
    pages = pages_from_dicts(body.pages)
    state = resolve(pages, body.time_ms)
    return ActiveResponse(active=state.to_dict() if state is not None else None)


# ---------------------------------------------------------------------------
# Endpoints: Transcriptions
# ---------------------------------------------------------------------------


@app.post(
    "/transcriptions/srt",
    response_model=SrtResponse,
    tags=["transcriptions"],
    summary="Convert speech-to-text output into SRT",
    description=(
        "Accepts the engine's per-segment results as a list or keyed object "
        "(or a whole engine response) and returns an SRT document."
    ),
    responses={422: {"model": ErrorResponse, "description": "Empty or malformed transcription"}},
)
async def create_srt(body: SrtRequest) -> SrtResponse:
    return SrtResponse(srt=transcription_to_srt(body.transcription))


# ---------------------------------------------------------------------------
# Endpoints: Health
# ---------------------------------------------------------------------------


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
    description="Liveness check for load balancers and orchestrators.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


def run_api():
    """Entry point for the quill-captions-api console script."""
    import uvicorn

    logging.basicConfig(level=config.LOG_LEVEL)
    uvicorn.run(app, host=config.API_HOST, port=config.API_PORT)

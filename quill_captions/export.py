"""Page-sequence artifact: JSON serialization and renderer props.

WHY: Pages leave the engine as a JSON artifact; the renderer receives
them as part of a composition's props. A malformed artifact only shows up
as broken captions in a finished video, so the shape is checked against a
JSON schema on the way out and on the way back in.

HOW: pages_to_dicts() produces the camelCase token/page shape;
pages_to_json() validates it with jsonschema before dumping.
pages_from_json() validates, rebuilds the frozen values, and re-checks
the ordering invariants the schema cannot express.

RULES:
- Output shape: [{"tokens": [{"text", "fromMs", "toMs"}], "startMs", "durationMs"}]
- Extra keys on input (e.g. a page "text") are accepted and ignored
- Input that fails the schema raises MalformedDocument
- Tokens must not overlap within a page, pages must not overlap each
  other (UnorderedInput); page bounds must match tokens (InvalidRange)
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import jsonschema

from quill_captions.core.ir import Page, Token
from quill_captions.errors import MalformedDocument, UnorderedInput

_SCHEMA_PATH = Path(__file__).resolve().parent / "schemas" / "caption_pages.schema.json"

_CACHED_SCHEMA: Optional[dict] = None


def _get_schema() -> dict:
    """Load and cache the caption pages JSON schema."""
    global _CACHED_SCHEMA
    if _CACHED_SCHEMA is None:
        with open(_SCHEMA_PATH, encoding="utf-8") as f:
            _CACHED_SCHEMA = json.load(f)
    return _CACHED_SCHEMA


def token_to_dict(token: Token) -> Dict[str, Any]:
    return {"text": token.text, "fromMs": token.from_ms, "toMs": token.to_ms}


def page_to_dict(page: Page) -> Dict[str, Any]:
    return {
        "tokens": [token_to_dict(token) for token in page.tokens],
        "startMs": page.start_ms,
        "durationMs": page.duration_ms,
    }


def pages_to_dicts(pages: Sequence[Page]) -> List[Dict[str, Any]]:
    return [page_to_dict(page) for page in pages]


def pages_to_json(pages: Sequence[Page], indent: Optional[int] = 2) -> str:
    """Serialize pages as schema-validated JSON.

    Raises:
        jsonschema.ValidationError: If the generated data does not match
            the schema (a bug, not bad input).
    """
    data = pages_to_dicts(pages)
    jsonschema.validate(instance=data, schema=_get_schema())
    return json.dumps(data, indent=indent, ensure_ascii=False)


def pages_from_dicts(data: Any) -> List[Page]:
    """Rebuild Page values from their JSON form.

    Raises:
        MalformedDocument: The data does not match the page schema.
        InvalidRange: A token or page range is inconsistent.
        UnorderedInput: Tokens or pages overlap or are out of order.
    """
    try:
        jsonschema.validate(instance=data, schema=_get_schema())
    except jsonschema.ValidationError as exc:
        location = "/".join(str(part) for part in exc.absolute_path) or "<root>"
        raise MalformedDocument(
            "page data invalid at {}: {}".format(location, exc.message)
        ) from exc

    pages: List[Page] = []
    for page_number, raw_page in enumerate(data, 1):
        tokens: List[Token] = []
        for raw_token in raw_page["tokens"]:
            token = Token(
                text=raw_token["text"],
                from_ms=int(raw_token["fromMs"]),
                to_ms=int(raw_token["toMs"]),
            )
            if tokens and token.from_ms < tokens[-1].to_ms:
                raise UnorderedInput(
                    "token '{}' overlaps the token before it".format(token.text),
                    page_number,
                )
            tokens.append(token)

        page = Page(
            tokens=tuple(tokens),
            start_ms=int(raw_page["startMs"]),
            duration_ms=int(raw_page["durationMs"]),
        )
        if pages and page.start_ms < pages[-1].end_ms:
            raise UnorderedInput(
                "page starts at {} ms, before the previous page ends at {} ms".format(
                    page.start_ms, pages[-1].end_ms
                ),
                page_number,
            )
        pages.append(page)
    return pages


def pages_from_json(text: str) -> List[Page]:
    """Parse a JSON page artifact (see pages_from_dicts)."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedDocument("page data is not valid JSON: {}".format(exc)) from exc
    return pages_from_dicts(data)


def render_props(
    pages: Sequence[Page],
    static_src: str,
    use_static_file: bool = True,
) -> Dict[str, Any]:
    """Props object for the caption video composition.

    RULES:
    - Keys match the composition's props: staticSrc, pages, useStaticFile
    """
    return {
        "staticSrc": static_src,
        "pages": pages_to_dicts(pages),
        "useStaticFile": use_static_file,
    }

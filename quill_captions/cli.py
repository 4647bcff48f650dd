"""Command-line interface for the caption engine.

WHY: Editors and scripts need the engine without a server: turn an SRT
file into the page artifact the renderer consumes, turn raw speech-to-text
output into an SRT file, and check what a page sequence shows at a given
moment when a caption looks wrong in a render.

HOW: argparse with three subcommands: ``pages``, ``srt`` and ``probe``.
Input paths accept ``-`` for stdin. Artifacts go to stdout or --output;
status messages go to stderr so the CLI can be piped.

RULES:
- pages INPUT.srt [--output FILE] [--gap-threshold-ms N] [--max-tokens N]
  [--max-duration-ms N] [--no-split-words] [--props STATIC_SRC]
- srt INPUT.json [--output FILE]
- probe PAGES.json TIME_MS
- Exit codes: 0 = success, 1 = any ValueError (bad input or configuration)
  or unreadable file
- Defaults for tunables come from quill_captions.config
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from quill_captions import __version__, config
from quill_captions.core.pages import PagePolicy
from quill_captions.core import srt
from quill_captions.core.normalizer import extract_transcription, normalize
from quill_captions.core.pipeline import srt_to_caption_pages
from quill_captions.core.resolver import resolve
from quill_captions.export import pages_from_json, pages_to_json, render_props

logger = logging.getLogger(__name__)


def _status(msg: str) -> None:
    """Print a status message to stderr."""
    print(msg, file=sys.stderr, flush=True)


def _read_input(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def _write_output(content: str, output_path: Optional[str]) -> None:
    if output_path:
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(content)
    else:
        sys.stdout.write(content)
        if not content.endswith("\n"):
            sys.stdout.write("\n")


def _non_negative_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError("expected an integer, got '{}'".format(value))
    if parsed < 0:
        raise argparse.ArgumentTypeError("must not be negative, got {}".format(parsed))
    return parsed


def _positive_int(value: str) -> int:
    parsed = _non_negative_int(value)
    if parsed == 0:
        raise argparse.ArgumentTypeError("must be at least 1")
    return parsed


def _cmd_pages(args: argparse.Namespace) -> int:
    policy = PagePolicy(
        max_tokens=args.max_tokens if args.max_tokens is not None else config.DEFAULT_MAX_PAGE_TOKENS,
        max_duration_ms=(
            args.max_duration_ms
            if args.max_duration_ms is not None
            else config.DEFAULT_MAX_PAGE_DURATION_MS
        ),
    )
    result = srt_to_caption_pages(
        _read_input(args.input),
        gap_threshold_ms=args.gap_threshold_ms,
        policy=policy,
        split_words=False if args.no_split_words else None,
    )
    if args.props:
        content = json.dumps(render_props(result.pages, args.props), indent=2, ensure_ascii=False)
    else:
        content = pages_to_json(result.pages)
    _write_output(content, args.output)
    _status("Built {} pages from {} captions".format(len(result.pages), len(result.captions)))
    return 0


def _cmd_srt(args: argparse.Namespace) -> int:
    raw = _read_input(args.input)
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        _status("Error: input is not valid JSON: {}".format(exc))
        return 1
    segments = normalize(extract_transcription(data))
    _write_output(srt.write(segments), args.output)
    _status("Wrote SRT with {} captions".format(len(segments)))
    return 0


def _cmd_probe(args: argparse.Namespace) -> int:
    pages = pages_from_json(_read_input(args.pages))
    state = resolve(pages, args.time_ms)
    payload = state.to_dict() if state is not None else None
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quill-captions",
        description="Caption timing and page synthesis for short-form video.",
    )
    parser.add_argument("--version", action="version", version="%(prog)s " + __version__)
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging on stderr.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    pages = sub.add_parser("pages", help="Group SRT captions into display pages (JSON).")
    pages.add_argument("input", help="SRT file, or '-' for stdin.")
    pages.add_argument("-o", "--output", help="Write page JSON here instead of stdout.")
    pages.add_argument(
        "--gap-threshold-ms", type=_non_negative_int, default=None,
        help="Silence that starts a new page (default: {} ms).".format(
            config.DEFAULT_GAP_THRESHOLD_MS
        ),
    )
    pages.add_argument("--max-tokens", type=_positive_int, default=None,
                       help="Optional cap on tokens per page.")
    pages.add_argument("--max-duration-ms", type=_non_negative_int, default=None,
                       help="Optional cap on page duration.")
    pages.add_argument("--no-split-words", action="store_true",
                       help="Keep each caption as a single token.")
    pages.add_argument(
        "--props", metavar="STATIC_SRC", default=None,
        help="Wrap the pages in composition props that load captions from STATIC_SRC.",
    )
    pages.set_defaults(handler=_cmd_pages)

    srt_cmd = sub.add_parser("srt", help="Convert speech-to-text JSON output into SRT.")
    srt_cmd.add_argument("input", help="Engine output JSON file, or '-' for stdin.")
    srt_cmd.add_argument("-o", "--output", help="Write SRT here instead of stdout.")
    srt_cmd.set_defaults(handler=_cmd_srt)

    probe = sub.add_parser("probe", help="Show the active page and token at a time.")
    probe.add_argument("pages", help="Page JSON file, or '-' for stdin.")
    probe.add_argument("time_ms", type=float, help="Playback time in milliseconds.")
    probe.set_defaults(handler=_cmd_probe)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Run the CLI and return its exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.LOG_LEVEL,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        return args.handler(args)
    except ValueError as exc:
        _status("Error: {}".format(exc))
        return 1
    except OSError as exc:
        _status("Error: cannot read or write file: {}".format(exc))
        return 1


def run() -> None:
    """Console-script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()

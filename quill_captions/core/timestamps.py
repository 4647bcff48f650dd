"""Timestamp codec: milliseconds <-> ``HH:MM:SS,mmm``.

WHY: SRT timing lines carry wall-clock style timestamps, but the engine
works in elapsed milliseconds. A wrong timestamp desynchronizes captions
from audio, so decoding must fail loudly rather than guess.

HOW: encode() decomposes by integer division (3600000 / 60000 / 1000);
no datetime or timezone handling is involved because the value is a
duration. decode() matches a strict regex that accepts either a comma
(canonical SRT) or a period as the millisecond separator.

RULES:
- encode() accepts 0..MAX_TIMESTAMP_MS (99:59:59,999)
- decode(encode(ms)) == ms over that whole range
- Minutes and seconds must be < 60; fields are fixed width (2/2/2/3)
- Surrounding whitespace is ignored; anything else malformed raises
  MalformedTimestamp
"""

from __future__ import annotations

import re

from quill_captions.errors import MalformedTimestamp

MAX_TIMESTAMP_MS = 359999999
"""Largest encodable value: 99:59:59,999."""

_TIMESTAMP_RE = re.compile(r"^(\d{2}):([0-5]\d):([0-5]\d)[,.](\d{3})$")

_MS_PER_HOUR = 3600000
_MS_PER_MINUTE = 60000
_MS_PER_SECOND = 1000


def encode(ms: int) -> str:
    """Format elapsed milliseconds as an SRT timestamp.

    Raises:
        MalformedTimestamp: If ``ms`` is negative or above MAX_TIMESTAMP_MS.
    """
    if isinstance(ms, bool) or not isinstance(ms, int):
        raise MalformedTimestamp("timestamp must be an integer, got {!r}".format(ms))
    if ms < 0 or ms > MAX_TIMESTAMP_MS:
        raise MalformedTimestamp(
            "{} ms is outside the encodable range 0..{}".format(ms, MAX_TIMESTAMP_MS)
        )
    hours, rest = divmod(ms, _MS_PER_HOUR)
    minutes, rest = divmod(rest, _MS_PER_MINUTE)
    seconds, millis = divmod(rest, _MS_PER_SECOND)
    return "{:02d}:{:02d}:{:02d},{:03d}".format(hours, minutes, seconds, millis)


def decode(value: str) -> int:
    """Parse ``HH:MM:SS,mmm`` (or ``HH:MM:SS.mmm``) into milliseconds.

    Raises:
        MalformedTimestamp: If the string does not match either grammar.
    """
    if not isinstance(value, str):
        raise MalformedTimestamp("timestamp must be a string, got {!r}".format(value))
    match = _TIMESTAMP_RE.match(value.strip())
    if match is None:
        raise MalformedTimestamp("'{}' is not an HH:MM:SS,mmm timestamp".format(value))
    hours, minutes, seconds, millis = (int(part) for part in match.groups())
    return (
        hours * _MS_PER_HOUR
        + minutes * _MS_PER_MINUTE
        + seconds * _MS_PER_SECOND
        + millis
    )

"""Quill Captions: caption timing and page-synthesis engine.

WHY: Short-form vertical video needs captions that appear a few words at a
time and highlight each word as it is spoken. Speech-to-text engines and
subtitle files only provide flat timed segments. This package turns those
segments into timed display "pages" and answers, for any playback time,
which page and which word are on screen.

HOW: Five pure stages (timestamp codec, SRT parser/writer, transcription
normalizer, page synthesizer, active-state resolver) chained by the
pipeline module. The CLI and HTTP server are thin shells around them.

RULES:
- All stages are pure functions over immutable values
- The SRT document is the interchange format between transcription and paging
- Every core failure is a subclass of errors.CaptionError
"""

__version__ = "0.1.0"

"""Caption core: value types and the five pure pipeline stages.

WHY: The core is the only part of the system with real invariants
(ordering, non-overlap, inclusive boundaries) and the only part that needs
exact round-trip behaviour. Keeping it free of I/O and configuration makes
it safe to share across render workers.

HOW: ir.py defines the values; timestamps.py and srt.py handle the
interchange format; normalizer.py adapts engine output; pages.py groups
segments into pages; resolver.py answers "what is on screen at time t";
pipeline.py chains them with configured defaults.

RULES:
- No module here performs I/O or logs on the resolver hot path
- Values are frozen dataclasses; every stage returns fresh sequences
"""

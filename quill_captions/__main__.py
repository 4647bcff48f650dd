"""Package entry point for ``python -m quill_captions``.

Delegates to the CLI; see quill_captions.cli for the subcommands.
"""

from quill_captions.cli import run

if __name__ == "__main__":
    run()

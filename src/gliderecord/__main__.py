"""Entry point for ``python -m gliderecord``."""

from __future__ import annotations

import sys

from .cli import cli


def main() -> None:
    # Record fields often carry non-ASCII text; never crash printing them.
    for stream in (sys.stdout, sys.stderr):
        reconfigure = getattr(stream, "reconfigure", None)
        if reconfigure is not None:
            reconfigure(encoding="utf-8", errors="backslashreplace")
    cli(prog_name="gliderecord")


if __name__ == "__main__":
    main()

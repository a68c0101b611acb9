from __future__ import annotations

import logging
import sys

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | int = "WARNING") -> None:
    """
    Send library logging (debug traces, request URLs) to stderr.

    User-facing build output goes through the presenter on stdout, so the two
    streams never interleave in a pipe.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    root = logging.getLogger("appflow_package")
    root.setLevel(level)

    if not any(getattr(h, "_appflow_handler", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FORMAT))
        handler._appflow_handler = True  # type: ignore[attr-defined]
        root.addHandler(handler)

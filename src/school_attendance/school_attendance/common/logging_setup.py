from __future__ import annotations

import logging
import sys

_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a single stderr handler on the root logger.

    Safe to call more than once (create_app runs per test client).
    """

    root = logging.getLogger()
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    if any(getattr(h, "_school_attendance", False) for h in root.handlers):
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT))
    handler._school_attendance = True  # type: ignore[attr-defined]
    root.addHandler(handler)

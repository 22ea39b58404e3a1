"""
Console logging setup for the command line and hosting processes.
"""

from __future__ import annotations

import logging
import sys


def configure_logging(level_name: str = "WARNING") -> None:
    """
    Send log records to stderr so stdout stays reserved for the report.

    Args:
        level_name: "DEBUG" | "INFO" | "WARNING" | "ERROR"
    """
    level = getattr(logging, level_name.upper(), logging.WARNING)

    fmt = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(fmt)

    root = logging.getLogger()
    # Avoid duplicate handlers when called more than once
    if not root.handlers:
        root.setLevel(level)
        root.addHandler(console)
    else:
        root.setLevel(level)
        for h in root.handlers:
            h.setLevel(level)

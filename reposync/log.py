"""Logging setup for the command line.

Modules log through ``logging.getLogger(__name__)``; only the CLI installs
a handler.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(message)s"


def configure_logging(level: str | int = "INFO", console: Console | None = None) -> None:
    """Route ``reposync`` log records to a rich handler on stderr."""
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger("reposync")
    root.handlers[:] = [handler]
    root.setLevel(level.upper() if isinstance(level, str) else level)

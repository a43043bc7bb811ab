"""Root logging setup for the evaldesk CLI.

Library modules only create ``logging.getLogger(__name__)`` loggers;
the CLI installs a single rich handler on the root logger.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_LOGGING_INITIALIZED = False


def setup_logging(level: str | int = "WARNING") -> None:
    """Configure root logging once while allowing level updates.

    Log records go to stderr so ``--json`` output on stdout stays clean.
    """
    global _LOGGING_INITIALIZED
    if isinstance(level, str):
        level = level.upper()
    root_logger = logging.getLogger()
    if not _LOGGING_INITIALIZED:
        handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        root_logger.addHandler(handler)
        _LOGGING_INITIALIZED = True
    root_logger.setLevel(level)
    for handler in root_logger.handlers:
        handler.setLevel(level)


def ensure_logging(default_level: str | int = "WARNING") -> None:
    """Configure logging at ``default_level`` unless already configured."""
    if not _LOGGING_INITIALIZED:
        setup_logging(default_level)

"""Logging setup for the prompter CLI."""

import logging
import os
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from prompter.core.config import ENV_PREFIX

DEFAULT_LOG_LEVEL = "WARNING"


def init_logging(level: Optional[str] = None) -> None:
    """
    Route the ``prompter`` logger tree to stderr through rich.

    Args:
        level: Level name; defaults to PROMPTER_LOG_LEVEL or WARNING
    """
    level_name = (level or os.environ.get(f"{ENV_PREFIX}LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()
    numeric = logging.getLevelName(level_name)
    if not isinstance(numeric, int):
        numeric = logging.WARNING

    root = logging.getLogger("prompter")
    root.setLevel(numeric)
    if not any(isinstance(h, RichHandler) for h in root.handlers):
        handler = RichHandler(console=Console(stderr=True), show_time=False, show_path=False)
        root.addHandler(handler)
    root.propagate = False

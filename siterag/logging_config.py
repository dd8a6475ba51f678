"""
Logging configuration for siterag.

Centralized logging setup with consistent formatting, used by the CLI and the API.
"""

import logging
import sys
from typing import Optional, Union

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: Union[int, str] = logging.INFO, log_format: Optional[str] = None) -> logging.Logger:
    """
    Configure logging for siterag.

    Args:
        level: Logging level name or number (default: INFO)
        log_format: Custom format string (optional)

    Returns:
        The "siterag" package logger
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(
        level=level,
        format=log_format or DEFAULT_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # Library chatter from the HTTP/OpenAI stack stays at WARNING.
    for noisy in ("urllib3", "httpx", "openai"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logger = logging.getLogger("siterag")
    logger.setLevel(level)
    return logger

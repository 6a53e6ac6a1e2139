"""Root logger setup for applications embedding the search service."""

import logging
import sys
from typing import Optional

from ..core.exceptions import ConfigurationError

DEFAULT_FORMAT = "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"
BARE_FORMAT = "%(levelname)-7s [%(name)s] %(message)s"

# Third-party loggers that log every request at INFO
QUIET_LOGGERS = ("httpx", "httpcore")


def setup_logging(
    level: str = "INFO",
    format_string: Optional[str] = None,
    include_timestamp: bool = True
) -> None:
    """
    Route log records to stdout at ``level``.

    Replaces any handlers already on the root logger, so calling it again
    (for example from a second service instance) switches the level.

    Args:
        level: Level name such as "DEBUG" or "WARNING", case-insensitive
        format_string: Format overriding the built-in ones
        include_timestamp: Prefix records with the time when no format is given

    Raises:
        ConfigurationError: If the level name is unknown
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ConfigurationError(f"Unknown logging level: {level}")

    if format_string is None:
        format_string = DEFAULT_FORMAT if include_timestamp else BARE_FORMAT

    logging.basicConfig(level=numeric_level, format=format_string, stream=sys.stdout, force=True)
    logging.getLogger("service_search").setLevel(numeric_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    logging.getLogger(__name__).debug(f"Log level set to {logging.getLevelName(numeric_level)}")

"""Process-wide logging setup, run once from the application lifespan."""

import logging
import sys

from cached_api.core.config import get_settings

_LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"

# Third-party loggers that are chatty at DEBUG; cache HIT/MISS lines are what matters there.
_QUIET_LOGGERS = ("aiosqlite", "asyncio", "httpcore", "httpx")


def setup_logging() -> None:
    """Log to stdout; DEBUG when settings.debug (shows per-key cache events), else INFO.

    database_echo controls SQL statement logging separately.
    """
    level = logging.DEBUG if get_settings().debug else logging.INFO
    logging.basicConfig(
        level=level,
        format=_LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.INFO))

"""Logging setup for scripts and host processes embedding the cache."""

import logging
import sys

from assetcache.core.config import Settings, get_settings

# Per-request chatter from transport libraries; kept unless debugging.
_NOISY_LOGGERS = ("httpx", "httpcore", "botocore", "urllib3", "google.auth")


def setup_logging(settings: Settings | None = None) -> None:
    """Send logs to stdout, at DEBUG when settings.debug is set.

    Cache HIT/MISS lines are DEBUG, so they only show up in debug mode.
    """
    s = settings or get_settings()
    logging.basicConfig(
        level=logging.DEBUG if s.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    if not s.debug:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

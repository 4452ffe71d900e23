"""Process-wide logging setup for the chat service."""

import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO") -> None:
    """
    Attach a single stdout handler to the `vetchat` logger.

    The root logger stays at WARNING so library chatter (SQLAlchemy, httpx)
    does not drown the service's own records. Calling this again only
    updates the level.
    """
    logger = logging.getLogger("vetchat")
    logger.setLevel(level.upper())

    if not any(getattr(handler, "_vetchat", False) for handler in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        handler._vetchat = True
        logger.addHandler(handler)
        logger.propagate = False

    logging.getLogger().setLevel(logging.WARNING)
    logger.info("Logging is set up (level=%s)", level.upper())

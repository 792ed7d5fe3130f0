"""Logging config for the macbattery command line."""

import logging

from colorlog import ColoredFormatter

FORMAT_DATETIME = "%Y-%m-%d %H:%M:%S"
LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s [%(name)s] %(message)s"
LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red",
}


def setup_logging(level: int = logging.INFO) -> None:
    """Set up the root logger with a colored stderr handler."""
    handler = logging.StreamHandler()
    handler.setFormatter(
        ColoredFormatter(
            f"%(log_color)s{LOG_FORMAT}%(reset)s",
            datefmt=FORMAT_DATETIME,
            reset=True,
            log_colors=LOG_COLORS,
        )
    )
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    if not root_logger.handlers:
        root_logger.addHandler(handler)
    # aiohttp access logs are noise for a client
    logging.getLogger("aiohttp").setLevel(max(level, logging.WARNING))

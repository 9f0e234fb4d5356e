import logging
import os
import sys
from logging.handlers import RotatingFileHandler

from . import config


LOGGER_NAME = "trmm_manager"


def setup_logging() -> logging.Logger:
    """Set up logging."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if config.DEBUG else logging.INFO)

    if not config.LOG_ENABLED:
        logger.handlers.clear()
        logger.addHandler(logging.NullHandler())
        logger.propagate = False
        return logger

    if logger.handlers and not all(isinstance(h, logging.NullHandler) for h in logger.handlers):
        return logger
    logger.handlers.clear()

    os.makedirs(config.DATA_DIR, exist_ok=True)
    fmt = logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")

    file_handler = RotatingFileHandler(config.LOG_FILE, maxBytes=2_000_000, backupCount=3, encoding="utf-8")
    file_handler.setFormatter(fmt)
    file_handler.setLevel(logging.DEBUG if config.DEBUG else logging.INFO)
    logger.addHandler(file_handler)

    if config.CONSOLE_LOG:
        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(fmt)
        console.setLevel(logging.DEBUG if config.DEBUG else logging.INFO)
        logger.addHandler(console)

    # urllib3 connection chatter goes to the same sinks in debug mode only.
    ul = logging.getLogger("urllib3")
    ul.setLevel(logging.DEBUG if config.DEBUG else logging.WARNING)

    return logger


log = setup_logging()


def get_logger(name: str) -> logging.Logger:
    """Return a child logger under the application namespace."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def reload_logging() -> logging.Logger:
    """Reload logger level and handlers from current configuration."""
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    return setup_logging()

import logging
import sys
from typing import Optional

from vitalflow.config import get_logging_settings


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """
    Returns a logger that writes to stdout. The level falls back to the
    LOG_LEVEL setting (environment or .env), then INFO.
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            logging.Formatter(
                "[%(asctime)s] %(levelname)s [%(name)s] %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(handler)

    logger.setLevel((level or get_logging_settings().LOG_LEVEL).upper())
    return logger

"""
Logging setup for applications embedding the engine.
"""
import logging
from typing import Optional

from vivarium_compat.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure root logging.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ERROR); defaults to settings.log_level
    """
    level_name = (level or settings.log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
    )
    logging.getLogger(__name__).info(
        f"{settings.app_name} v{settings.app_version} logging at {level_name}"
    )

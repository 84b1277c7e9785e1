import sys
from typing import Optional

from loguru import logger
from careslot.config import settings


CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def setup_logger(level: Optional[str] = None, log_file: Optional[str] = None):
    """Configure the CareSlot logger.

    The console sink is always installed; the rotating file sink only when
    a log file path is configured.
    """
    level = level or settings.LOG_LEVEL
    log_file = settings.LOG_FILE if log_file is None else log_file

    logger.remove()

    logger.add(sys.stdout, colorize=True, format=CONSOLE_FORMAT, level=level)

    if log_file:
        logger.add(
            log_file,
            rotation="50 MB",
            retention="14 days",
            compression="zip",
            format=FILE_FORMAT,
            level=level,
        )

    logger.info(f"Logger initialized - Level: {level}")
    return logger


app_logger = setup_logger()

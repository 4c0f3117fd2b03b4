import sys

from loguru import logger

from netclass.core.constants import LOG_FILE, LOG_LEVEL, LOG_RETENTION, LOG_ROTATION

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def configure_logging(level: str = LOG_LEVEL, log_file: str = LOG_FILE, console: bool = True):
    """
    (Re)install the console and file handlers.

    Args:
        level: Minimum level for the console handler; the file always gets DEBUG
        log_file: Path of the rotating log file, or empty to skip file logging
        console: Whether to log to stderr
    """
    logger.remove()  # Remove default handler

    # Add stderr handler only if available (not in windowed exe)
    if console and sys.stderr:
        logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level.upper())

    if log_file:
        try:
            logger.add(
                log_file,
                rotation=LOG_ROTATION,
                retention=LOG_RETENTION,
                format=FILE_FORMAT,
                level="DEBUG",
            )
        except OSError as e:
            logger.warning(f"[Logger] File logging disabled ({log_file}): {e}")

    return logger


def get_logger():
    return logger

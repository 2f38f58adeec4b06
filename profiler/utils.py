from pathlib import Path
from typing import Optional, Union

from loguru import logger
from rich import print as rprint

FILE_LOG_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"
)
CONSOLE_LOG_FORMAT = "{time:HH:mm:ss} | {level: <8} | {message}"


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    console: bool = True,
    rotation: str = "10 MB",
    retention: str = "3 days",
):
    """
    Configure the application-wide loguru logger.

    - Optional file sink with rotation and retention
    - Console sink printed through rich, WARNING and above only

    Profilers log through their own loguru loggers and are not affected.
    """
    logger.remove()

    if log_file is not None:
        logger.add(
            Path(log_file).resolve(),
            level=log_level,
            format=FILE_LOG_FORMAT,
            backtrace=True,
            diagnose=True,
            rotation=rotation,
            retention=retention,
        )

    if console:
        logger.add(
            lambda msg: rprint(msg, end=""),
            level="WARNING",
            format=CONSOLE_LOG_FORMAT,
            colorize=False,
        )

    logger.debug(
        f"Logging initialized (file: {log_file or 'disabled'}, console: {console})"
    )


__all__ = ["logger", "setup_logging", "FILE_LOG_FORMAT", "CONSOLE_LOG_FORMAT"]

"""
Loguru setup for the ReasonKit server.

One colorized console sink always; a rotating, compressed file sink when
LoggingConfig.log_to_file is set. Modules log through get_logger(__name__).
"""

import sys
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from reasonkit.config import LoggingConfig

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[module]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)
FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[module]}:{function}:{line} - {message}"
)
FILE_NAME = "reasonkit_{time:YYYY-MM-DD}.log"


def setup_logging(config: "LoggingConfig", debug: bool = False) -> Path | None:
    """
    Replace loguru's default sink with the configured ones.

    Args:
        config: Sink settings, usually Config.logging
        debug: Force DEBUG level and include variable values in tracebacks

    Returns:
        Directory of the file sink, or None when logging to console only
    """
    level = "DEBUG" if debug else config.level

    logger.remove()
    logger.configure(extra={"module": "reasonkit"})

    logger.add(
        sys.stderr,
        level=level,
        format=CONSOLE_FORMAT,
        colorize=True,
        backtrace=debug,
        diagnose=debug,
    )

    if not config.log_to_file:
        return None

    log_path = Path(config.log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    # enqueue: sandbox runs and request handlers log from worker threads
    logger.add(
        log_path / FILE_NAME,
        level=level,
        format=FILE_FORMAT,
        rotation=config.file_rotation,
        retention=config.file_retention,
        compression=config.compression,
        serialize=config.serialize,
        enqueue=True,
        backtrace=debug,
        diagnose=False,
    )
    return log_path


def get_logger(name: str):
    return logger.bind(module=name)

"""
Logging configuration for the notification worker
"""
import logging
import sys
from datetime import datetime

from loguru import logger

from ..config import config


class InterceptHandler(logging.Handler):
    """Route stdlib logging records into loguru"""

    def emit(self, record):
        # Get corresponding Loguru level if it exists
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_logging(level: str | None = None, log_to_file: bool = True):
    """Configure worker logging"""
    level = level or config.LOG_LEVEL

    # Remove default loguru handler
    logger.remove()

    if log_to_file:
        config.LOGS_DIR.mkdir(exist_ok=True, parents=True)
        log_file = config.LOGS_DIR / f"notifier_{datetime.now().strftime('%Y%m%d')}.log"
        logger.add(
            log_file,
            rotation="100 MB",
            retention="30 days",
            level=level,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {module}:{function}:{line} - {message}",
            backtrace=True,
            diagnose=False
        )

    # Console handler with color
    logger.add(
        sys.stdout,
        level=level,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{module}</cyan> - <level>{message}</level>",
        colorize=True
    )

    # Replace standard logging with loguru
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    # Suppress noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
    logging.getLogger("werkzeug").setLevel(logging.WARNING)

    logger.info("Logging configured successfully")
    return logger

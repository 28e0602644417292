import os
import logging
from logging.handlers import TimedRotatingFileHandler

from biopeak.core.config import settings

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str = "biopeak") -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(settings.log_level.upper())

    # If no handlers are attached, add console (+ optional rotating file) handler
    if not logger.handlers:
        fmt = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

        console = logging.StreamHandler()
        console.setFormatter(fmt)
        logger.addHandler(console)

        if settings.log_dir:
            os.makedirs(settings.log_dir, exist_ok=True)
            log_path = os.path.join(settings.log_dir, f"{name}.log")
            file_handler = TimedRotatingFileHandler(
                filename=log_path,
                when="midnight",
                interval=1,
                backupCount=7,
                encoding="utf-8",
            )
            file_handler.suffix = "%Y-%m-%d"
            file_handler.setFormatter(fmt)
            logger.addHandler(file_handler)

        # Handlers live on this logger; don't duplicate through the root logger
        logger.propagate = False

    return logger

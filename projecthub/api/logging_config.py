import logging
import os
import sys
from logging.handlers import RotatingFileHandler

from projecthub.config import config

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
LOG_FILE = os.path.join(PROJECT_ROOT, "logs", "projecthub.log")


def build_handlers(environment: str):
    """stdout always; the rotating file only outside the test environment."""
    formatter = logging.Formatter(
        config.get("logging", "format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    handlers = [console_handler]

    if environment != "test":
        os.makedirs(os.path.dirname(LOG_FILE), exist_ok=True)
        file_handler = RotatingFileHandler(
            LOG_FILE,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    return handlers


def setup_logging():
    logger = logging.getLogger("projecthub")

    # Configured once per process; later calls from create_app reuse it
    if logger.handlers:
        return logger

    logger.setLevel(config.get("logging", "level", "INFO"))
    for handler in build_handlers(config.environment):
        logger.addHandler(handler)

    return logger


logger = setup_logging()

import re
import sys
from loguru import logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)

_CREDENTIALS_IN_URL = re.compile(r"(https?://)[^/@\s:]+:[^/@\s]+@")


def setup_logging(settings) -> None:
    logger.remove()
    logger.add(sys.stderr, format=LOG_FORMAT, level=settings.LOG_LEVEL)
    if settings.LOG_FILE:
        logger.add(settings.LOG_FILE, rotation="500 MB", level="DEBUG")


def get_logger(name: str):
    return logger.bind(name=name)


def mask_credentials(text: str) -> str:
    """Hide user:token pairs embedded in https URLs."""
    return _CREDENTIALS_IN_URL.sub(r"\1***@", text)

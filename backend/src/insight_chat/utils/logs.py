import os
import logging

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "")


def get_logger(name=None):
    logger = logging.getLogger(name or "insight-chat")
    if not logger.hasHandlers():
        handler = logging.StreamHandler()
        formatter = logging.Formatter('[%(asctime)s] %(levelname)s %(name)s: %(message)s')
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    if LOG_LEVEL:
        logger.setLevel(LOG_LEVEL)
    else:
        from ..config import settings
        logger.setLevel(settings.log_level or "INFO")
    return logger

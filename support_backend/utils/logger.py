"""Simple logger utility."""
import logging
import os

logger = logging.getLogger("support")
if not logger.handlers:
    h = logging.StreamHandler()
    fmt = logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
    h.setFormatter(fmt)
    logger.addHandler(h)
    logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())

def get_logger(name: str = None):
    if not name:
        return logger
    # support_backend.app.cache -> support.cache
    return logger.getChild(name.rsplit(".", 1)[-1])

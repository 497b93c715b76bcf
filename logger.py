import logging
import sys

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'
LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL
}


def setup_logger(name: str = "econsim", level_name: str = "INFO", stream=None):
    """
    Return the simulation logger, attaching the console handler on first use.
    Later calls only change the level, so modules can call this at import time.
    """
    logger = logging.getLogger(name)
    logger.setLevel(LEVELS.get(level_name.upper(), logging.INFO))

    if not logger.handlers:
        handler = logging.StreamHandler(stream or sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%H:%M:%S'))
        logger.addHandler(handler)

    return logger

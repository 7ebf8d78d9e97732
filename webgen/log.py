from __future__ import annotations

import logging
import sys

LOGGER_NAME = "webgen"


def setup_logger(verbose: bool = True) -> logging.Logger:
    """Configure the ``webgen`` logger once and return it.

    Components never reach for this logger themselves; it is created by the
    command line entry point and passed down as ``log``.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.INFO if verbose else logging.WARNING)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(asctime)s %(message)s", datefmt="%H:%M:%S"))
        logger.addHandler(handler)
    return logger


def log_error(log: logging.Logger, exc: BaseException) -> None:
    log.error("ERROR: %s", exc)

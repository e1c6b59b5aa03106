from __future__ import annotations

import logging

LOGGER_NAME = "docstore"
FMT = "%(asctime)s [%(levelname)s] %(message)s"
DATEFMT = "%Y-%m-%d %H:%M:%S"


def console_logger(level: int | str = logging.INFO) -> logging.Logger:
    """Return the package console logger, attaching a stderr handler once."""
    log = logging.getLogger(LOGGER_NAME)
    if not log.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt=FMT, datefmt=DATEFMT))
        log.addHandler(handler)
    log.setLevel(level)
    return log

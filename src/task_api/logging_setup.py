from __future__ import annotations

import logging
import sys

LOGGER_NAME = "src.task_api"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


# PUBLIC_INTERFACE
def configure_logging(level: str = "INFO") -> logging.Logger:
    """
    Attach a stderr handler to the application logger hierarchy.

    Safe to call more than once: the handler is installed only on the first
    call, later calls just adjust the level.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    if not any(getattr(h, "_task_api_handler", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._task_api_handler = True  # type: ignore[attr-defined]
        logger.addHandler(handler)

    return logger

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level: int | str = logging.WARNING) -> logging.Logger:
    """Send the package's diagnostics to stderr. Safe to call more than once."""
    logger = logging.getLogger("typstmath")
    logger.setLevel(level)
    if not any(getattr(h, "_typstmath", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._typstmath = True
        logger.addHandler(handler)
    return logger

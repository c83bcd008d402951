"""Diagnostics logging.

The terminal is in raw mode while the editor runs, so log records never go
to stdout or stderr. Set ``EDI_LOG`` to a file path to collect them.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(environ: Mapping[str, str] | None = None) -> logging.Logger:
    env = os.environ if environ is None else environ
    logger = logging.getLogger("edi")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = False

    path = env.get("EDI_LOG")
    if not path:
        logger.addHandler(logging.NullHandler())
        return logger

    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)

    name = env.get("EDI_LOG_LEVEL", "DEBUG").upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        logger.setLevel(logging.DEBUG)
        logger.warning("unknown EDI_LOG_LEVEL %r, using DEBUG", name)
        return logger
    logger.setLevel(level)
    return logger

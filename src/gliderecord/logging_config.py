from __future__ import annotations

import logging
import os
from typing import Optional

_DEFAULT_FMT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_DEFAULT_DATEFMT = "%H:%M:%S"

# Request-level detail comes from gliderecord.access; these only repeat it
_NOISY_LOGGERS = ("urllib3.connection", "urllib3.connectionpool")


def level_from_env(default: int = logging.WARNING) -> int:
    """Read GLIDE_LOG_LEVEL ("DEBUG", "info", "10", ...); fall back to default."""
    raw = os.getenv("GLIDE_LOG_LEVEL", "").strip()
    if not raw:
        return default
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw.upper())
    return level if isinstance(level, int) else default


def configure_logging(level: Optional[int]) -> int:
    """Configure root logging once and return the level in effect.

    An explicit level (from -v/-vv) wins over GLIDE_LOG_LEVEL.
    """
    lvl = level if level is not None else level_from_env()
    root = logging.getLogger()

    if root.handlers:
        root.setLevel(lvl)
    else:
        logging.basicConfig(level=lvl, format=_DEFAULT_FMT, datefmt=_DEFAULT_DATEFMT)

    for name in _NOISY_LOGGERS:
        noisy = logging.getLogger(name)
        if noisy.level == logging.NOTSET or noisy.level < logging.ERROR:
            noisy.setLevel(logging.ERROR)
    return lvl

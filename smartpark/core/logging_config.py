"""
Root logger setup for the API process.

Engine modules log through named loggers (``SessionReconciler``,
``RateResolver``, ``EventSource``) and inherit the handlers installed here.
Level and optional log file come from ``Settings`` unless passed explicitly.
"""

import logging
from typing import Optional, Union

from .config import settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def resolve_level(level: Union[int, str, None] = None) -> int:
    """Numeric level for ``level``, falling back to ``LOG_LEVEL`` and then INFO."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName((level or settings.log_level).strip().upper())
    return value if isinstance(value, int) else logging.INFO


def setup_logging(level: Union[int, str, None] = None, log_file: Optional[str] = None) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    path = log_file or settings.log_file
    if path:
        handlers.append(logging.FileHandler(path, encoding="utf-8"))
    logging.basicConfig(level=resolve_level(level), format=LOG_FORMAT, handlers=handlers)

"""
Error taxonomy and shared error-handling helpers.

Data-quality errors (bad timestamps, sentinel plates, reversed pairs, an
unreachable rate registry) are raised by the low-level helpers and caught by
the reconciler or resolver, which degrade to a best-effort result. Only
contract violations such as an unknown analytics period escape to callers.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, TypeVar

T = TypeVar("T")


class SmartParkError(Exception):
    """Base class for engine errors."""


class MalformedTimestampError(SmartParkError):
    """A scan timestamp matched none of the recognised formats."""


class InvalidPlateError(SmartParkError):
    """A plate value was empty or the ``NULL`` sentinel."""


class NegativeDurationError(SmartParkError):
    """An exit instant precedes the entry it is paired with."""

    def __init__(self, entry: Any, exit: Any) -> None:
        super().__init__(f"exit {exit} precedes entry {entry}")
        self.entry = entry
        self.exit = exit


class RateSourceUnavailable(SmartParkError):
    """The rate registry could not be read."""


def log_exception(logger: logging.Logger, msg: str, *, exc: BaseException, **context: Any) -> None:
    """Log ``exc`` with its traceback, appending ``key=value`` context pairs."""
    pairs = " ".join(f"{key}={value}" for key, value in context.items() if value is not None)
    if pairs:
        logger.error("%s %s: %s", msg, pairs, exc, exc_info=exc)
    else:
        logger.error("%s: %s", msg, exc, exc_info=exc)


def load_json(path: str | Path, default: T, *, logger: logging.Logger) -> T:
    """Parsed contents of ``path``; ``default`` when it is missing or unreadable."""
    target = Path(path)
    try:
        with target.open("r", encoding="utf-8") as fh:
            return json.load(fh)
    except FileNotFoundError:
        return default
    except (OSError, ValueError) as exc:
        log_exception(logger, "JSON load failed", exc=exc, path=target)
        return default


def dump_json_atomic(path: str | Path, data: Any, *, logger: logging.Logger, **context: Any) -> bool:
    """Replace ``path`` with ``data`` via a temp file, so readers never see a partial write."""
    target = Path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f"{target.name}.", suffix=".tmp", dir=str(target.parent))
    except OSError as exc:
        log_exception(logger, "JSON atomic write failed", exc=exc, path=target, **context)
        return False
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(data, fh, indent=2, default=str)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, target)
    except (OSError, TypeError, ValueError) as exc:
        Path(tmp_name).unlink(missing_ok=True)
        log_exception(logger, "JSON atomic write failed", exc=exc, path=target, **context)
        return False
    return True

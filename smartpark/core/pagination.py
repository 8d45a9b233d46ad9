"""Page-size capping and pagination headers for list endpoints."""

from __future__ import annotations

from typing import Sequence, TypeVar

from fastapi import Response

from .config import settings

T = TypeVar("T")


def clamp_page_size(page_size: int) -> int:
    return max(1, min(page_size, settings.api_max_page_size))


def paginate(items: Sequence[T], response: Response, *, page: int, page_size: int) -> Sequence[T]:
    """Slice ``items`` for ``page`` and describe the slice in response headers.

    ``page_size`` is capped at ``API_MAX_PAGE_SIZE``; the header reports the
    size actually served.
    """
    size = clamp_page_size(page_size)
    response.headers["X-Total-Count"] = str(len(items))
    response.headers["X-Page"] = str(page)
    response.headers["X-Page-Size"] = str(size)
    start = (page - 1) * size
    return items[start : start + size]

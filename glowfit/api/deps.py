# glowfit/api/deps.py
from typing import Any, Optional

from fastapi import Query

from glowfit.schemas.common import Pagination, PaginationParams


def pagination(default_limit: int = 10):
    """Dependency factory for `page`/`limit` query parameters."""

    def dependency(
        page: int = Query(1, ge=1),
        limit: int = Query(default_limit, ge=1, le=100),
    ) -> PaginationParams:
        return PaginationParams(page=page, limit=limit)

    return dependency


def ok(data: Any = None, message: Optional[str] = None) -> dict:
    """Success envelope; `data` is validated against the route's response_model."""
    return {"success": True, "data": data, "message": message}


def paged(items: list, params: PaginationParams, total: int, **extra: Any) -> dict:
    return ok({"items": items, "pagination": Pagination.build(params, total), **extra})

# schemas/common.py
import math
from datetime import datetime, timezone
from typing import Generic, List, Optional, TypeVar

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing_extensions import Annotated

T = TypeVar("T")


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


# Incoming timestamps are normalized to naive UTC, matching what the columns store.
UTCDateTime = Annotated[datetime, AfterValidator(to_naive_utc)]


# =====================================================================
# BASE
# =====================================================================

class CamelModel(BaseModel):
    """Accepts snake_case or camelCase input, serializes camelCase."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =====================================================================
# RESPONSE WRAPPERS
# =====================================================================

class ApiResponse(CamelModel, Generic[T]):
    """Standard success envelope."""
    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None


class SuccessResponse(CamelModel):
    """Generic success response without payload."""
    success: bool = True
    message: str


# =====================================================================
# PAGINATION
# =====================================================================

class PaginationParams(BaseModel):
    """Page-based pagination parameters."""
    page: int = 1
    limit: int = 10

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def build(cls, params: PaginationParams, total: int) -> "Pagination":
        return cls(
            page=params.page,
            limit=params.limit,
            total=total,
            total_pages=math.ceil(total / params.limit),
        )


class Page(CamelModel, Generic[T]):
    items: List[T]
    pagination: Pagination


class FieldError(CamelModel):
    field: str
    message: str

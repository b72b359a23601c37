"""
Shared/common Pydantic schemas used across multiple endpoints.

Every endpoint answers with ``ApiResponse``: ``success`` plus either ``data``
or ``error``. Paginated listings also carry ``pagination``.
"""

import math
from datetime import datetime
from typing import Annotated, Generic, TypeVar

from pydantic import BaseModel, PlainSerializer, computed_field

T = TypeVar("T")

# Custom datetime type that serializes with Z suffix for UTC
# Usage: created_at: UTCDatetime instead of created_at: datetime
UTCDatetime = Annotated[
    datetime,
    PlainSerializer(
        lambda dt: dt.strftime("%Y-%m-%dT%H:%M:%SZ") if dt else None,
        return_type=str,
    ),
]

# Optional version for nullable datetime fields
UTCDatetimeOptional = Annotated[
    datetime | None,
    PlainSerializer(
        lambda dt: dt.strftime("%Y-%m-%dT%H:%M:%SZ") if dt else None,
        return_type=str | None,
    ),
]


class Pagination(BaseModel):
    """Pagination metadata for list responses."""

    page: int
    limit: int
    total: int

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_pages(self) -> int:
        """Number of pages needed for ``total`` items."""
        if self.limit <= 0:
            return 0
        return math.ceil(self.total / self.limit)


class ErrorDetail(BaseModel):
    """One field-level validation problem."""

    field: str
    message: str


class ApiResponse(BaseModel, Generic[T]):
    """Uniform response envelope."""

    success: bool = True
    data: T | None = None
    error: str | None = None
    message: str | None = None
    pagination: Pagination | None = None
    details: list[ErrorDetail] | None = None


class AffectedRows(BaseModel):
    """Result of a bulk mutation."""

    affected: int

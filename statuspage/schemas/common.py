import math
from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Uniform envelope: absence of ``data`` means no data, not an error."""

    success: bool = True
    data: T | None = None
    message: str | None = None


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    pages: int

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> "Pagination":
        return cls(total=total, page=page, limit=limit, pages=math.ceil(total / limit) if limit else 0)


def ok(data=None, message: str | None = None) -> ApiResponse:
    return ApiResponse(success=True, data=data, message=message)

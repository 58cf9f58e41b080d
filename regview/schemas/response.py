import math
from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10


class ApiResponse(BaseModel):
    """Standard envelope for every API answer: status, message and optional data."""
    status: int
    message: str
    data: Optional[Any] = None

    @classmethod
    def success(cls, message: str, data: Any = None) -> "ApiResponse":
        return cls(status=200, message=message, data=data)

    @classmethod
    def error(cls, status: int, message: str) -> "ApiResponse":
        return cls(status=status, message=message)

    def to_response(self) -> JSONResponse:
        """Render the envelope using its own status as the HTTP status code."""
        return JSONResponse(status_code=self.status, content=jsonable_encoder(self))


class Pagination(BaseModel):
    page: int
    limit: int
    pages: int
    records: int
    prev: Optional[str] = None
    next: Optional[str] = None

    @classmethod
    def build(cls, page: int, limit: int, records: int, base_path: str) -> "Pagination":
        pages = math.ceil(records / limit) if limit else 0
        return cls(
            page=page,
            limit=limit,
            pages=pages,
            records=records,
            prev=f"{base_path}?page={page - 1}&limit={limit}" if page > 1 else None,
            next=f"{base_path}?page={page + 1}&limit={limit}" if page < pages else None,
        )


class PagedResponse(ApiResponse):
    pagination: Pagination

"""Response envelope shared by every endpoint.

All bodies look like ``{code, message, data, timestamp, success}`` and the
HTTP status mirrors ``code``. Paged data is ``{list, total, page, size,
totalPages}``.
"""

from datetime import datetime
from typing import Any, Generic, List, Optional, TypeVar

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")

SUCCESS_MESSAGE = "操作成功"


class CamelModel(BaseModel):
    """Base schema: snake_case attributes, camelCase JSON."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(CamelModel, Generic[T]):
    code: int = 200
    message: str = SUCCESS_MESSAGE
    data: Optional[T] = None
    timestamp: datetime = Field(default_factory=datetime.now)
    success: bool = True

    @classmethod
    def ok(cls, data: Any = None, message: str = SUCCESS_MESSAGE) -> "ApiResponse":
        return cls(code=200, message=message, data=data, success=True)

    @classmethod
    def error(cls, code: int, message: str, data: Any = None) -> "ApiResponse":
        return cls(code=code, message=message, data=data, success=False)


class PageResponse(CamelModel, Generic[T]):
    list: List[T]
    total: int
    page: int
    size: int
    total_pages: int

    @classmethod
    def from_page(cls, page, item_type=None) -> "PageResponse":
        items = page.items
        if item_type is not None:
            items = [item_type.model_validate(item) for item in items]
        return cls(
            list=items,
            total=page.total,
            page=page.page,
            size=page.size,
            total_pages=page.total_pages,
        )


def error_response(code: int, message: str, data: Any = None) -> JSONResponse:
    """Envelope for exception handlers; HTTP status equals ``code``."""
    body = ApiResponse.error(code, message, data)
    return JSONResponse(
        status_code=code,
        content=jsonable_encoder(body.model_dump(by_alias=True)),
    )

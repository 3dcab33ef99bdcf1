"""
Shared schema base and the response envelope.

Every endpoint answers `{message, status, data?, error?}` with camelCase keys.
"""

from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(CamelModel, Generic[T]):
    message: str
    status: int
    data: Optional[T] = None
    error: Optional[Any] = None


class Pagination(CamelModel):
    total: int
    page: int
    pages: int

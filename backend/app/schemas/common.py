from typing import Generic, TypeVar, List, Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Serialized with camelCase keys; accepts either spelling on input."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(BaseModel, Generic[T]):
    """Standard response envelope."""
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


class PaginatedResponse(BaseModel, Generic[T]):
    """Standard pagination response."""
    success: bool = True
    count: int
    total: int
    page: int
    pages: int
    data: List[T]


class ListResponse(BaseModel, Generic[T]):
    """Unpaginated list response."""
    success: bool = True
    count: int
    data: List[T]

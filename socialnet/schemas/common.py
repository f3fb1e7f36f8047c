"""
Shared schema building blocks.

Every schema speaks camelCase on the wire and accepts snake_case from
Python code (services return plain dicts with snake_case keys).
"""

from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base schema with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PaginatedResponse(CamelModel, Generic[T]):
    """
    One page of a listing.

    `results_count` counts the records matching the listing's filter before
    pagination; `total` is the size of the unfiltered population.
    """

    data: List[T]
    page: int
    results_count: int
    total: int


class MessageResponse(CamelModel):
    """Schema for simple message responses."""

    message: str


class DataResponse(CamelModel, Generic[T]):
    """Mutation result: a message plus the affected resource."""

    message: str
    data: Optional[T] = None


class PageOptions(CamelModel):
    """Page number and size controlling skip/limit."""

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


def paginated(data: list, page: PageOptions, results_count: int, total: int) -> dict:
    return {
        "data": data,
        "page": page.page,
        "results_count": results_count,
        "total": total,
    }

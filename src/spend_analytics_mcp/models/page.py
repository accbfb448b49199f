"""
Generic page model matching the backend's paged responses.
"""

from typing import Generic, List, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """
    One page of a paged query.

    ``page_number`` is zero-based. Field aliases follow the backend's JSON
    (``number``, ``size``, ``first``, ``last``).
    """

    model_config = {"populate_by_name": True}

    content: List[T] = Field(default_factory=list)
    total_elements: int = Field(default=0, ge=0, alias="totalElements")
    total_pages: int = Field(default=0, ge=0, alias="totalPages")
    page_number: int = Field(default=0, ge=0, alias="number")
    page_size: int = Field(default=0, ge=0, alias="size")
    is_first: bool = Field(default=True, alias="first")
    is_last: bool = Field(default=True, alias="last")

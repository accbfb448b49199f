"""
Category and tag references carried on expense records.
"""

from typing import Optional

from pydantic import BaseModel, Field


class CategoryRef(BaseModel):
    """
    Represents the category an expense is filed under.

    Categories are two-level: a reference without ``parent_id`` is a
    top-level ("main") category, one with a ``parent_id`` is a sub-category
    of that parent.
    """

    model_config = {"frozen": True, "populate_by_name": True}

    # Required fields
    id: int
    name: str

    # Parent (only set for sub-categories)
    parent_id: Optional[int] = Field(default=None, alias="parentId")
    parent_name: Optional[str] = Field(default=None, alias="parentName")

    @property
    def is_top_level(self) -> bool:
        """Whether this is a main category."""
        return self.parent_id is None


class TagRef(BaseModel):
    """A free-form label attached to an expense."""

    model_config = {"frozen": True}

    id: int
    name: str

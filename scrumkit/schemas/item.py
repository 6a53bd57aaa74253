"""Item Pydantic schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from scrumkit.config import settings
from scrumkit.models.item import ItemCategory


class ItemCreate(BaseModel):
    model_config = {"str_strip_whitespace": True}

    category: ItemCategory
    content: str = Field(min_length=1, max_length=settings.MAX_ITEM_LENGTH)
    author_id: Optional[str] = Field(default=None, max_length=255)
    author_name: Optional[str] = Field(default=None, max_length=255)
    is_anonymous: bool = False


class ItemUpdate(BaseModel):
    model_config = {"str_strip_whitespace": True}

    category: Optional[ItemCategory] = None
    content: Optional[str] = Field(default=None, min_length=1, max_length=settings.MAX_ITEM_LENGTH)
    discussion_notes: Optional[str] = None
    is_discussed: Optional[bool] = None


class ItemOut(BaseModel):
    id: str
    session_id: str
    category: ItemCategory
    content: str
    author_id: Optional[str] = None
    author_name: Optional[str] = None
    is_anonymous: bool
    discussion_notes: Optional[str] = None
    is_discussed: bool
    created_at: datetime
    vote_count: int = 0

    model_config = {"from_attributes": True}

    @model_validator(mode="after")
    def _hide_anonymous_author(self) -> "ItemOut":
        if self.is_anonymous:
            self.author_name = None
        return self


def item_out(item, vote_count: int = 0) -> ItemOut:
    """Serialise an Item row together with its computed vote count."""
    out = ItemOut.model_validate(item)
    out.vote_count = vote_count
    return out

"""Item model — a single card submitted into a session category."""

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from scrumkit.database import Base
from scrumkit.models._common import new_id, utcnow


class ItemCategory(str, enum.Enum):
    went_well = "went_well"
    to_improve = "to_improve"
    action_item = "action_item"


class Item(Base):
    __tablename__ = "retrospective_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    session_id: Mapped[str] = mapped_column(
        ForeignKey("retrospective_sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    category: Mapped[ItemCategory] = mapped_column(Enum(ItemCategory), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    author_id: Mapped[Optional[str]] = mapped_column(String(255))
    # Always NULL for anonymous items.
    author_name: Mapped[Optional[str]] = mapped_column(String(255))
    is_anonymous: Mapped[bool] = mapped_column(Boolean, default=False)

    discussion_notes: Mapped[Optional[str]] = mapped_column(Text)
    is_discussed: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

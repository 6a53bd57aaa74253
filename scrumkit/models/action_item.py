"""ActionItem model — a committed follow-up task coming out of a retrospective."""

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Enum, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from scrumkit.database import Base
from scrumkit.models._common import new_id, utcnow


class ActionPriority(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"


class ActionStatus(str, enum.Enum):
    open = "open"
    in_progress = "in_progress"
    done = "done"


class ActionItem(Base):
    __tablename__ = "action_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    session_id: Mapped[str] = mapped_column(
        ForeignKey("retrospective_sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    source_item_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("retrospective_items.id", ondelete="SET NULL")
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)

    assignee_id: Mapped[Optional[str]] = mapped_column(String(255))
    assignee_name: Mapped[Optional[str]] = mapped_column(String(255))
    priority: Mapped[ActionPriority] = mapped_column(Enum(ActionPriority), default=ActionPriority.medium)
    status: Mapped[ActionStatus] = mapped_column(Enum(ActionStatus), default=ActionStatus.open)

    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

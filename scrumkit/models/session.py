"""RetroSession model — one retrospective with its phase and vote budget."""

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from scrumkit.database import Base
from scrumkit.models._common import new_id, utcnow


class SessionPhase(str, enum.Enum):
    input = "input"
    voting = "voting"
    discussion = "discussion"
    completed = "completed"


class RetroSession(Base):
    __tablename__ = "retrospective_sessions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    sprint_name: Mapped[Optional[str]] = mapped_column(String(255))
    team_id: Mapped[Optional[str]] = mapped_column(String(255))

    phase: Mapped[SessionPhase] = mapped_column(Enum(SessionPhase), default=SessionPhase.input)
    votes_per_user: Mapped[int] = mapped_column(Integer, default=5)
    hide_votes_until_complete: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

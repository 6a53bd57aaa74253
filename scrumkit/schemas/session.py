"""Session Pydantic schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from scrumkit.models.session import SessionPhase


class SessionCreate(BaseModel):
    """Fields accepted when a host opens a new retrospective."""
    model_config = {"str_strip_whitespace": True}

    name: str = Field(min_length=1, max_length=255)
    sprint_name: Optional[str] = Field(default=None, max_length=255)
    team_id: Optional[str] = Field(default=None, max_length=255)
    votes_per_user: Optional[int] = Field(default=None, ge=1)
    hide_votes_until_complete: bool = False


class SessionUpdate(BaseModel):
    model_config = {"str_strip_whitespace": True}

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    sprint_name: Optional[str] = Field(default=None, max_length=255)
    phase: Optional[SessionPhase] = None
    votes_per_user: Optional[int] = Field(default=None, ge=1)
    hide_votes_until_complete: Optional[bool] = None


class SessionOut(BaseModel):
    id: str
    name: str
    sprint_name: Optional[str] = None
    team_id: Optional[str] = None
    phase: SessionPhase
    votes_per_user: int
    hide_votes_until_complete: bool
    created_at: datetime
    completed_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class SessionCreated(SessionOut):
    """Session plus the link participants use to join it."""
    share_url: str

"""Action item Pydantic schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from scrumkit.models.action_item import ActionPriority, ActionStatus


class ActionItemCreate(BaseModel):
    model_config = {"str_strip_whitespace": True}

    description: str = Field(min_length=1)
    source_item_id: Optional[str] = Field(default=None, min_length=1)
    assignee_id: Optional[str] = Field(default=None, max_length=255)
    assignee_name: Optional[str] = Field(default=None, max_length=255)
    priority: ActionPriority = ActionPriority.medium
    due_date: Optional[datetime] = None


class ActionItemUpdate(BaseModel):
    model_config = {"str_strip_whitespace": True}

    description: Optional[str] = Field(default=None, min_length=1)
    assignee_id: Optional[str] = Field(default=None, max_length=255)
    assignee_name: Optional[str] = Field(default=None, max_length=255)
    priority: Optional[ActionPriority] = None
    status: Optional[ActionStatus] = None
    due_date: Optional[datetime] = None


class ActionItemOut(BaseModel):
    id: str
    session_id: str
    source_item_id: Optional[str] = None
    description: str
    assignee_id: Optional[str] = None
    assignee_name: Optional[str] = None
    priority: ActionPriority
    status: ActionStatus
    due_date: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}

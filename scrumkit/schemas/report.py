"""Report Pydantic schemas."""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from scrumkit.config import settings


class ReportRequest(BaseModel):
    """Options for one report generation run."""
    tone: Literal["formal", "informal"] = "informal"
    language: str = Field(default=settings.DEFAULT_REPORT_LANGUAGE, min_length=2, max_length=16)
    focus_areas: List[str] = Field(default_factory=list)
    custom_instructions: Optional[str] = None
    generated_by: Optional[str] = Field(default=None, max_length=255)


class ReportOut(BaseModel):
    id: str
    session_id: str
    content: str
    generated_at: datetime
    generated_by: Optional[str] = None

    model_config = {"from_attributes": True}

"""Vote Pydantic schemas."""

from datetime import datetime
from typing import List

from pydantic import BaseModel, Field


class VoteCreate(BaseModel):
    model_config = {"str_strip_whitespace": True}

    item_id: str = Field(min_length=1)
    participant_id: str = Field(min_length=1, max_length=255)


class VoteOut(BaseModel):
    id: str
    item_id: str
    participant_id: str
    created_at: datetime

    model_config = {"from_attributes": True}


class ParticipantVotes(BaseModel):
    """A participant's votes in one session and what is left of the budget."""
    participant_id: str
    budget: int
    remaining: int
    votes: List[VoteOut]

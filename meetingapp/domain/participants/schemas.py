"""Participant domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from ...models import PARTICIPANT_STATUSES
from ...shared.validators import validate_email


class ParticipantCreate(BaseModel):
    """Schema for adding a participant to a meeting"""

    name: str
    email: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_optional_email(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return validate_email(v)


class ParticipantStatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: str) -> str:
        if v not in PARTICIPANT_STATUSES:
            raise ValueError(f"status must be one of {', '.join(PARTICIPANT_STATUSES)}")
        return v


class ParticipantResponse(BaseModel):
    """Schema for participant response"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    meeting_id: str
    name: str
    email: Optional[str] = None
    join_time: datetime
    speaking_count: int
    last_spoke: Optional[datetime] = None
    status: str

"""Meeting domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...shared.validators import validate_email


class MeetingCreate(BaseModel):
    """Schema for creating a new meeting"""

    name: str
    password: str
    description: Optional[str] = None


class MeetingResponse(BaseModel):
    """Schema for meeting response"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    start_time: datetime
    end_time: Optional[datetime] = None
    status: str
    created_at: datetime
    updated_at: datetime


class MeetingAccessRequest(BaseModel):
    password: str


class MeetingAccessResponse(BaseModel):
    granted: bool


class MeetingMetrics(BaseModel):
    total_participants: int
    active_speakers: int
    total_speaking_points: int
    duration_minutes: int


class MeetingSummaryResponse(BaseModel):
    meeting: MeetingResponse
    metrics: MeetingMetrics


class MinutesSendRequest(BaseModel):
    """Extra recipients of the full minutes, besides the meeting owner"""

    additional_emails: list[str] = Field(default_factory=list)

    @field_validator("additional_emails", mode="before")
    @classmethod
    def split_comma_separated(cls, v):
        # The dashboard sends a comma-separated string
        if isinstance(v, str):
            return [item for item in (part.strip() for part in v.split(",")) if item]
        return v

    @field_validator("additional_emails")
    @classmethod
    def validate_emails(cls, v: list[str]) -> list[str]:
        return [validate_email(email) for email in v if email and email.strip()]


class MinutesDelivery(BaseModel):
    """Outcome of one minutes email"""

    model_config = ConfigDict(from_attributes=True)

    recipient_email: str
    recipient_name: Optional[str] = None
    email_type: str
    email_status: str
    provider_message_id: Optional[str] = None
    error: Optional[str] = None
    sent_at: Optional[datetime] = None


class MinutesSendResponse(BaseModel):
    sent: int
    failed: int
    deliveries: list[MinutesDelivery]

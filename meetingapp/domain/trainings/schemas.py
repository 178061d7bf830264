"""Training domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...models import TRAINING_STATUSES


def _split_emails(v):
    # The create dialog sends a comma-separated string
    if isinstance(v, str):
        return [item for item in (part.strip() for part in v.split(",")) if item]
    return v


class TrainingCreate(BaseModel):
    """Schema for creating a training"""

    title: str
    description: Optional[str] = None
    objectives: Optional[str] = None
    duration: Optional[str] = None
    location: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    max_participants: Optional[int] = Field(None, gt=0)
    collaborator_emails: list[str] = Field(default_factory=list)

    @field_validator("collaborator_emails", mode="before")
    @classmethod
    def split_collaborator_emails(cls, v):
        return _split_emails(v)


class TrainingUpdate(BaseModel):
    """Schema for editing a training (all fields optional)"""

    title: Optional[str] = None
    description: Optional[str] = None
    objectives: Optional[str] = None
    duration: Optional[str] = None
    location: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    max_participants: Optional[int] = Field(None, gt=0)


class TrainingStatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: str) -> str:
        if v not in TRAINING_STATUSES:
            raise ValueError(f"status must be one of {', '.join(TRAINING_STATUSES)}")
        return v


class TrainingResponse(BaseModel):
    """Schema for training response"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    title: str
    description: Optional[str] = None
    objectives: Optional[str] = None
    duration: Optional[str] = None
    location: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    max_participants: Optional[int] = None
    status: str
    created_at: datetime
    updated_at: datetime


class TrainingOverviewResponse(BaseModel):
    total_trainings: int
    active_count: int
    completed_count: int
    total_participants: int
    participant_counts: dict[str, int]


class CollaboratorAdd(BaseModel):
    emails: list[str]

    @field_validator("emails", mode="before")
    @classmethod
    def split_emails(cls, v):
        return _split_emails(v)


class CollaboratorResponse(BaseModel):
    collaborator_email: str
    display_name: Optional[str] = None  # None when the email no longer matches an account
    added_by: str
    added_at: datetime


class CollaboratorAddResponse(BaseModel):
    added: list[str]

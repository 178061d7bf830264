"""Note domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from ...models import NOTE_PRIORITIES, NOTE_STATUSES, NOTE_TYPES
from ...shared.validators import validate_email


def _check_choice(value: Optional[str], choices: tuple[str, ...], field: str) -> Optional[str]:
    if value is not None and value not in choices:
        raise ValueError(f"{field} must be one of {', '.join(choices)}")
    return value


class NoteCreate(BaseModel):
    """Schema for recording a meeting note"""

    content: str
    title: Optional[str] = None
    note_type: str = "general"
    assigned_to_name: Optional[str] = None
    assigned_to_email: Optional[str] = None
    due_date: Optional[date] = None
    priority: str = "medium"
    status: Optional[str] = None

    @field_validator("note_type")
    @classmethod
    def validate_note_type(cls, v: str) -> str:
        return _check_choice(v, NOTE_TYPES, "note_type")

    @field_validator("priority")
    @classmethod
    def validate_priority(cls, v: str) -> str:
        return _check_choice(v, NOTE_PRIORITIES, "priority")

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: Optional[str]) -> Optional[str]:
        return _check_choice(v, NOTE_STATUSES, "status")

    @field_validator("assigned_to_email")
    @classmethod
    def validate_assignee_email(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return validate_email(v)


class NoteUpdate(BaseModel):
    """Schema for editing a note (all fields optional)"""

    content: Optional[str] = None
    title: Optional[str] = None
    note_type: Optional[str] = None
    assigned_to_name: Optional[str] = None
    assigned_to_email: Optional[str] = None
    due_date: Optional[date] = None
    priority: Optional[str] = None
    status: Optional[str] = None

    @field_validator("note_type")
    @classmethod
    def validate_note_type(cls, v: Optional[str]) -> Optional[str]:
        return _check_choice(v, NOTE_TYPES, "note_type")

    @field_validator("priority")
    @classmethod
    def validate_priority(cls, v: Optional[str]) -> Optional[str]:
        return _check_choice(v, NOTE_PRIORITIES, "priority")

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: Optional[str]) -> Optional[str]:
        return _check_choice(v, NOTE_STATUSES, "status")

    @field_validator("assigned_to_email")
    @classmethod
    def validate_assignee_email(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return validate_email(v)


class NoteStatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: str) -> str:
        return _check_choice(v, NOTE_STATUSES, "status")


class NoteResponse(BaseModel):
    """Schema for note response"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    meeting_id: str
    title: Optional[str] = None
    note_type: str
    content: str
    assigned_to_name: Optional[str] = None
    assigned_to_email: Optional[str] = None
    due_date: Optional[date] = None
    priority: str
    status: Optional[str] = None
    created_at: datetime
    updated_at: datetime

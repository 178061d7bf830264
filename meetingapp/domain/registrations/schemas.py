"""Registration domain schemas - Public training registration form"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...models import EDUCATION_SPECIALTIES, MEMBER_TYPES, TRAINING_LEVELS
from ...shared.validators import validate_email


class RegistrationCreate(BaseModel):
    """Schema for the public registration form"""

    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    education_specialty: str
    education_level: int = Field(..., ge=1, le=3)
    member_type: str
    training_level: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v: str) -> str:
        return validate_email(v)

    @field_validator("education_specialty")
    @classmethod
    def validate_specialty(cls, v: str) -> str:
        if v not in EDUCATION_SPECIALTIES:
            raise ValueError("Unknown education specialty")
        return v

    @field_validator("member_type")
    @classmethod
    def validate_member_type(cls, v: str) -> str:
        if v not in MEMBER_TYPES:
            raise ValueError(f"member_type must be one of {', '.join(MEMBER_TYPES)}")
        return v

    @field_validator("training_level", mode="before")
    @classmethod
    def validate_training_level(cls, v: Optional[str]) -> Optional[str]:
        if v is None or v == "":
            return None
        if v not in TRAINING_LEVELS:
            raise ValueError(f"training_level must be one of {', '.join(TRAINING_LEVELS)}")
        return v


class RegistrationStatusUpdate(BaseModel):
    status: str


class RegistrationResponse(BaseModel):
    """Schema for registration response"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    training_id: str
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    education_specialty: str
    education_level: int
    member_type: str
    training_level: Optional[str] = None
    registration_date: datetime
    status: str
    notes: Optional[str] = None


class RegistrationListResponse(BaseModel):
    """Flat list while a training runs, grouped by level once it is completed"""

    grouped: bool
    groups: dict[str, list[RegistrationResponse]]
    registrations: list[RegistrationResponse]

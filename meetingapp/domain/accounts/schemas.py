"""Account domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from ...shared.validators import validate_email


class AccountRegister(BaseModel):
    """Schema for registering a new account"""

    email: str
    password: str
    displayName: str
    username: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v: str) -> str:
        return validate_email(v)


class LoginRequest(BaseModel):
    email: str
    password: str


class AccountResponse(BaseModel):
    """Schema for account response (never includes the credential hash)"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    username: str
    display_name: str
    created_at: datetime


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    account: AccountResponse


class EmailExistsResponse(BaseModel):
    email: str
    exists: bool

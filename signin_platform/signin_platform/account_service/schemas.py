from datetime import datetime
from typing import Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, EmailStr, Field, field_validator


def _normalize_email(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower()
    return value


# Identifiers are compared case-insensitively
NormalizedEmail = Annotated[EmailStr, BeforeValidator(_normalize_email)]


class SignupRequest(BaseModel):
    email: NormalizedEmail
    password: str
    name: str = Field(min_length=1)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value


class LoginRequest(BaseModel):
    email: NormalizedEmail
    password: str


class UserResponse(BaseModel):
    id: str
    email: str
    name: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SignupResponse(BaseModel):
    message: str = "user_created"
    user: UserResponse


class MessageResponse(BaseModel):
    message: str


class AuthorizedResponse(BaseModel):
    message: str = "you are authorized"
    subject: str


class ErrorResponse(BaseModel):
    error: str
    message: str
    details: Optional[Any] = None

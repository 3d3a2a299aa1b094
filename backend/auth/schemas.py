"""Auth request/response schemas. Emails are compared lower-cased and trimmed."""

from pydantic import BaseModel, field_validator
from users.schemas import UserResponse


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class RegisterRequest(LoginRequest):
    name: str

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        return value.strip()


class AuthResponse(BaseModel):
    user: UserResponse

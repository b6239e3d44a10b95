from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

# bcrypt rejects passwords longer than this many bytes.
MAX_PASSWORD_BYTES = 72


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

    @field_validator("password")
    @classmethod
    def check_password_bytes(cls, value: str) -> str:
        if len(value.encode()) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return value


class SignupRequest(LoginRequest):
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1, max_length=100)

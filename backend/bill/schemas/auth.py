"""Pydantic schemas for signup."""

from datetime import UTC, date, datetime

from pydantic import BaseModel, EmailStr, Field, field_validator


class SignupRequestSchema(BaseModel):
    """Signup request body."""

    email: EmailStr
    password: str = Field(
        ..., min_length=6, max_length=72, description="Plain-text password, sent only to the provider"
    )
    name: str = Field(..., min_length=1, max_length=255)
    surname: str = Field(..., min_length=1, max_length=255)
    birth_date: date = Field(..., description="ISO-8601 calendar date")

    @field_validator("name", "surname", mode="after")
    @classmethod
    def strip_names(cls, v: str) -> str:
        """Reject names that are only whitespace."""
        stripped = v.strip()
        if not stripped:
            msg = "must not be blank"
            raise ValueError(msg)
        return stripped

    @field_validator("birth_date", mode="after")
    @classmethod
    def validate_birth_date_in_past(cls, v: date) -> date:
        """Birth dates must lie strictly in the past."""
        if v >= datetime.now(UTC).date():
            msg = "birth_date must be in the past"
            raise ValueError(msg)
        return v

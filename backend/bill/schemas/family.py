"""Pydantic schemas for families."""

from pydantic import BaseModel, Field, field_validator


class CreateFamilyRequestSchema(BaseModel):
    """Family creation request body."""

    name: str = Field(..., min_length=1, max_length=255)

    @field_validator("name", mode="after")
    @classmethod
    def strip_name(cls, v: str) -> str:
        """Reject names that are only whitespace."""
        stripped = v.strip()
        if not stripped:
            msg = "must not be blank"
            raise ValueError(msg)
        return stripped

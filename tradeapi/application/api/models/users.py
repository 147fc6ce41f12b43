"""User request/response models."""

from pydantic import Field, field_validator

from tradeapi.application.api.models.base import ApiModel


class UserCreate(ApiModel):
    """Body of POST/PUT /users."""

    name: str = Field(..., max_length=255, description="Display name")

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name is required")
        return v


class User(ApiModel):
    """A stored user."""

    id: int
    name: str | None = None

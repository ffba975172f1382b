"""Base model classes for the Interview Prep platform."""

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel as PydanticBaseModel, ConfigDict, Field


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid4().hex


class BaseModel(PydanticBaseModel):
    """Base model with common functionality."""

    model_config = ConfigDict(
        use_enum_values=False,
        validate_assignment=True,
    )


class IdentifiableModel(BaseModel):
    """Base model with ID field."""

    id: str = Field(default_factory=new_id, description="Unique identifier")


class TimestampedModel(IdentifiableModel):
    """Base model with identifier and timestamp fields."""

    created_at: datetime = Field(default_factory=utcnow, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(default=None, description="Last update timestamp")

    def update_timestamp(self, now: Optional[datetime] = None) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = now or utcnow()


class OwnedModel(TimestampedModel):
    """Record owned by exactly one user account."""

    user_id: str = Field(..., description="Owning user identifier")

    def is_owned_by(self, user_id: str) -> bool:
        return self.user_id == user_id

"""User account models for the Interview Prep platform."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from .base import BaseModel, TimestampedModel, utcnow
from .enums import Level


class Badge(BaseModel):
    """Achievement awarded to a user."""

    name: str = Field(..., description="Badge name, unique per user")
    description: str = Field(default="", description="What the badge was awarded for")
    earned_at: datetime = Field(default_factory=utcnow, description="Award time")


class User(TimestampedModel):
    """Registered account with its engagement tier."""

    name: str = Field(..., description="Display name")
    email: str = Field(..., description="Normalized email address")
    password_hash: str = Field(..., description="PBKDF2 password hash")
    password_salt: str = Field(..., description="Per-user password salt")
    xp_points: int = Field(default=0, ge=0, description="Experience points")
    level: Level = Field(default=Level.BEGINNER, description="Engagement tier driven by XP")
    badges: List[Badge] = Field(default_factory=list, description="Awarded badges, append-only")
    resume_url: Optional[str] = Field(default=None, description="Most recently uploaded resume")
    ats_score: int = Field(default=0, ge=0, le=100, description="Latest ATS score")
    history: List[str] = Field(default_factory=list, description="Interview session identifiers")

    def has_badge(self, name: str) -> bool:
        """Check whether a badge with this name was already awarded."""
        return any(badge.name == name for badge in self.badges)

    def award_badge(self, badge: Badge) -> bool:
        """Append a badge unless one with the same name exists.

        Returns:
            True if the badge was appended.
        """
        if self.has_badge(badge.name):
            return False
        self.badges.append(badge)
        return True

    def public_profile(self) -> Dict[str, Any]:
        """Profile fields that may be returned to the account owner."""
        return self.model_dump(mode="json", exclude={"password_hash", "password_salt"})

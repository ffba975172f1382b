"""Performance metrics models for the Interview Prep platform."""

from datetime import datetime
from typing import Dict, Iterator, List, Optional

from pydantic import Field, RootModel, model_validator

from .base import BaseModel, OwnedModel
from .enums import Level
from .user import Badge


class RoleCounter(RootModel[Dict[str, int]]):
    """Completed-interview counts keyed by normalized role.

    Lookups of unknown roles return zero.
    """

    root: Dict[str, int] = Field(default_factory=dict)

    def get(self, role_key: str) -> int:
        return self.root.get(role_key, 0)

    def increment(self, role_key: str, amount: int = 1) -> int:
        """Increment the count for a role and return the new value."""
        self.root[role_key] = self.get(role_key) + amount
        return self.root[role_key]

    def total(self) -> int:
        return sum(self.root.values())

    def as_dict(self) -> Dict[str, int]:
        return dict(self.root)

    def __contains__(self, role_key: str) -> bool:
        return role_key in self.root

    def __iter__(self) -> Iterator[str]:
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)


class PerformanceMetrics(OwnedModel):
    """Score history and skill tier for one user."""

    timestamps: List[datetime] = Field(default_factory=list, description="Completion times")
    scores: List[int] = Field(default_factory=list, description="Overall scores, parallel to timestamps")
    average_score: int = Field(default=0, ge=0, le=100, description="Rounded mean of scores")
    progress_level: Level = Field(default=Level.BEGINNER, description="Skill tier driven by scores")
    interviews_by_role: RoleCounter = Field(default_factory=RoleCounter, description="Interviews per role")
    improvement_rate: int = Field(default=0, description="Last score minus first score")

    @model_validator(mode="after")
    def _history_is_parallel(self) -> "PerformanceMetrics":
        if len(self.timestamps) != len(self.scores):
            raise ValueError("timestamps and scores must have the same length")
        return self

    @property
    def interview_count(self) -> int:
        return len(self.scores)

    @property
    def latest_score(self) -> Optional[int]:
        return self.scores[-1] if self.scores else None


class DashboardSummary(BaseModel):
    """Aggregated numbers shown on the dashboard."""

    interview_count: int = 0
    completed_interview_count: int = 0
    resume_count: int = 0
    average_score: int = 0
    progress_level: Level = Level.BEGINNER
    account_level: Level = Level.BEGINNER
    xp_points: int = 0
    badges: List[Badge] = Field(default_factory=list)
    latest_ats_score: Optional[int] = None
    interviews_by_role: Dict[str, int] = Field(default_factory=dict)

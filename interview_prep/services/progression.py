"""Progression rules: score history, skill tier, XP, account level and badges.

Two separate level ladders live here:

* ``PerformanceMetrics.progress_level`` is the skill tier. It is computed
  from the score history alone and tops out at Advanced.
* ``User.level`` is the engagement tier. It is driven by XP, which every
  completed interview and resume analysis adds to, and is the only ladder
  that reaches Pro.

Both are promoted one-way. The pure functions below never mutate their
inputs; ``ProgressionEngine`` applies them to stored records under a
per-user lock.
"""

import asyncio
from collections import defaultdict
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import AsyncIterator, Callable, Dict, List, Optional, Sequence, Tuple

from ..models.base import utcnow
from ..models.enums import Level
from ..models.metrics import PerformanceMetrics
from ..models.user import Badge, User
from ..utils.exceptions import ValidationError
from ..utils.logging import get_logger

INTERVIEW_XP = 100
RESUME_XP = 50

MIN_SCORE = 0
MAX_SCORE = 100


@dataclass(frozen=True)
class LevelMilestone:
    """One-time account promotion guarded by the current level and an XP floor."""

    xp_threshold: int
    from_level: Level
    to_level: Level
    badge_name: str
    badge_description: str


XP_MILESTONES: Tuple[LevelMilestone, ...] = (
    LevelMilestone(1000, Level.BEGINNER, Level.INTERMEDIATE,
                   "Intermediate Interviewer", "Completed 10 interviews with good scores"),
    LevelMilestone(3000, Level.INTERMEDIATE, Level.ADVANCED,
                   "Advanced Interviewer", "Mastered the interview process"),
    LevelMilestone(10000, Level.ADVANCED, Level.PRO,
                   "Professional Interviewer", "Achieved expert status in interviewing"),
)


@dataclass
class XpAward:
    """Outcome of adding XP to a user."""

    user: User
    xp_added: int
    promoted_to: Optional[Level] = None
    badge: Optional[Badge] = None


@dataclass
class ProgressionResult:
    """Updated records after a completed interview."""

    metrics: PerformanceMetrics
    user: User
    previous_progress_level: Level
    promoted_to: Optional[Level] = None
    badges_awarded: List[Badge] = field(default_factory=list)

    @property
    def progress_level_changed(self) -> bool:
        return self.metrics.progress_level != self.previous_progress_level


def normalize_role(role: str) -> str:
    """Normalize a role name to a counter key.

    Trims, lowercases and collapses internal whitespace to single
    underscores: ``"Frontend   Developer "`` becomes ``"frontend_developer"``.
    """
    key = "_".join((role or "").split()).lower()
    if not key:
        raise ValidationError("Role is required", field_name="role")
    return key


def rounded_mean(scores: Sequence[int]) -> int:
    """Mean of non-negative integer scores, rounded half up.

    Integer arithmetic keeps the result exact: 70.5 rounds to 71.
    """
    if not scores:
        return 0
    total = sum(scores)
    count = len(scores)
    return (2 * total + count) // (2 * count)


def target_progress_level(interview_count: int, average_score: int) -> Level:
    """Skill tier implied by the score history, before the never-demote rule."""
    if interview_count >= 5 and average_score >= 80:
        return Level.ADVANCED
    if interview_count >= 3 and average_score >= 70:
        return Level.INTERMEDIATE
    return Level.BEGINNER


def validate_score(score: int) -> int:
    if isinstance(score, bool) or not isinstance(score, int):
        raise ValidationError("Score must be an integer", field_name="score")
    if not MIN_SCORE <= score <= MAX_SCORE:
        raise ValidationError(f"Score must be between {MIN_SCORE} and {MAX_SCORE}", field_name="score")
    return score


def record_score(metrics: PerformanceMetrics, role: str, score: int, now: datetime) -> PerformanceMetrics:
    """Append a completed-interview score and recompute derived metrics.

    Args:
        metrics: Current metrics record (not modified)
        role: Interview role, normalized for the per-role counter
        score: Overall score in [0, 100]
        now: Completion time

    Returns:
        Updated copy of the metrics record
    """
    validate_score(score)
    role_key = normalize_role(role)

    updated = metrics.model_copy(deep=True)
    updated.timestamps.append(now)
    updated.scores.append(score)
    updated.average_score = rounded_mean(updated.scores)
    updated.progress_level = updated.progress_level.promote(
        target_progress_level(len(updated.scores), updated.average_score)
    )
    updated.interviews_by_role.increment(role_key)
    updated.improvement_rate = updated.scores[-1] - updated.scores[0]
    return updated


def award_xp(user: User, amount: int, now: datetime) -> XpAward:
    """Add XP and apply at most one account promotion.

    Milestones are checked in order; each is guarded by the account's
    current level, so a promotion and its badge can fire only once.
    """
    if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
        raise ValidationError("XP amount must be a non-negative integer", field_name="amount")

    updated = user.model_copy(deep=True)
    updated.xp_points = updated.xp_points + amount
    award = XpAward(user=updated, xp_added=amount)

    for milestone in XP_MILESTONES:
        if updated.xp_points >= milestone.xp_threshold and updated.level == milestone.from_level:
            updated.level = milestone.to_level
            badge = Badge(name=milestone.badge_name, description=milestone.badge_description, earned_at=now)
            if updated.award_badge(badge):
                award.badge = badge
            award.promoted_to = milestone.to_level
            break

    return award


def apply_interview_result(
    metrics: PerformanceMetrics,
    user: User,
    role: str,
    score: int,
    now: datetime,
    xp: int = INTERVIEW_XP,
) -> ProgressionResult:
    """Apply one completed interview to both the metrics and the account."""
    updated_metrics = record_score(metrics, role, score, now)
    award = award_xp(user, xp, now)
    return ProgressionResult(
        metrics=updated_metrics,
        user=award.user,
        previous_progress_level=metrics.progress_level,
        promoted_to=award.promoted_to,
        badges_awarded=[award.badge] if award.badge else [],
    )


class LockRegistry:
    """Per-key mutual exclusion (user IDs and emails for accounts, session IDs for session documents)."""

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    def lock_for(self, key: str) -> asyncio.Lock:
        return self._locks[key]

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        async with self.lock_for(key):
            yield


class ProgressionEngine:
    """Applies progression rules to the stored metrics and account records."""

    def __init__(
        self,
        storage,
        interview_xp: int = INTERVIEW_XP,
        resume_xp: int = RESUME_XP,
        clock: Callable[[], datetime] = utcnow,
        locks: Optional[LockRegistry] = None,
    ):
        """Initialize the progression engine.

        Args:
            storage: Initialized StorageManager
            interview_xp: XP awarded per completed interview
            resume_xp: XP awarded per resume analysis
            clock: Source of the current time
            locks: Lock registry shared with other writers of the same records
        """
        self.storage = storage
        self.interview_xp = interview_xp
        self.resume_xp = resume_xp
        self.clock = clock
        self.locks = locks or LockRegistry()
        self.logger = get_logger(__name__)

    async def record_interview(self, user_id: str, role: str, score: int) -> ProgressionResult:
        """Record a completed interview for a user.

        Raises:
            NotFoundError: If the user or their metrics record does not exist.
            ValidationError: If the role is blank or the score out of range.
        """
        async with self.locks.hold(user_id):
            metrics = await self.storage.metrics.for_user(user_id)
            user = await self.storage.accounts.require(user_id)

            result = apply_interview_result(metrics, user, role, score, self.clock(), xp=self.interview_xp)

            await self.storage.metrics.update(result.metrics)
            await self.storage.accounts.update(result.user)

        self.logger.info("Interview recorded", extra={
            "user_id": user_id,
            "score": score,
            "average_score": result.metrics.average_score,
            "progress_level": result.metrics.progress_level.value,
            "xp_points": result.user.xp_points,
            "level": result.user.level.value,
        })
        if result.promoted_to:
            self.logger.info(f"User {user_id} promoted to {result.promoted_to.value}")
        return result

    async def award_resume_analysis(self, user_id: str, ats_score: Optional[int] = None) -> XpAward:
        """Award resume-analysis XP and store the latest ATS score on the account."""
        async with self.locks.hold(user_id):
            user = await self.storage.accounts.require(user_id)
            if ats_score is not None:
                user.ats_score = ats_score
            award = award_xp(user, self.resume_xp, self.clock())
            await self.storage.accounts.update(award.user)

        self.logger.info("Resume analysis XP awarded", extra={
            "user_id": user_id,
            "xp_points": award.user.xp_points,
            "level": award.user.level.value,
        })
        return award

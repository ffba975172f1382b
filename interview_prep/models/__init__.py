"""Data models for the Interview Prep platform."""

from .base import BaseModel, utcnow
from .enums import Emotion, Level, ResumeFileType
from .interview import (
    Answer,
    AnswerSubmission,
    Feedback,
    FeedbackResult,
    InterviewSession,
    Question,
)
from .metrics import DashboardSummary, PerformanceMetrics, RoleCounter
from .resume import Resume, ResumeAnalysis
from .user import Badge, User

__all__ = [
    "BaseModel",
    "utcnow",
    "Emotion",
    "Level",
    "ResumeFileType",
    "Answer",
    "AnswerSubmission",
    "Feedback",
    "FeedbackResult",
    "InterviewSession",
    "Question",
    "DashboardSummary",
    "PerformanceMetrics",
    "RoleCounter",
    "Resume",
    "ResumeAnalysis",
    "Badge",
    "User",
]

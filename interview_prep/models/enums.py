"""Enumeration types for the Interview Prep platform."""

from enum import Enum
from typing import Optional


def _lookup_member(cls, value) -> Optional[Enum]:
    """Resolve values like "Beginner", "BEGINNER" or "Level.BEGINNER"."""
    if isinstance(value, str):
        name = value.strip()
        if name.startswith(f"{cls.__name__}."):
            name = name.split(".", 1)[1]
        for member in cls:
            if member.name.lower() == name.lower() or member.value.lower() == name.lower():
                return member
    return None


class Level(Enum):
    """Progression tiers, ordered Beginner < Intermediate < Advanced < Pro.

    Used by two independent axes: the score-driven ``progress_level`` on
    performance metrics and the XP-driven ``level`` on the user account.
    """

    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"
    PRO = "Pro"

    @property
    def rank(self) -> int:
        """Position of this tier in the ladder."""
        return list(Level).index(self)

    def promote(self, target: "Level") -> "Level":
        """Return the higher of this tier and ``target``; never demotes."""
        return target if target.rank > self.rank else self

    @classmethod
    def _missing_(cls, value):
        return _lookup_member(cls, value)


class Emotion(Enum):
    """Dominant emotion detected in an interview."""

    NEUTRAL = "Neutral"
    POSITIVE = "Positive"
    NEGATIVE = "Negative"
    CONFIDENT = "Confident"
    NERVOUS = "Nervous"

    @classmethod
    def _missing_(cls, value):
        return _lookup_member(cls, value)


class ResumeFileType(Enum):
    """Accepted resume document formats."""

    PDF = "pdf"
    DOCX = "docx"

    @classmethod
    def from_file_name(cls, file_name: str) -> Optional["ResumeFileType"]:
        """Get the file type from a file name extension, if supported."""
        if "." not in file_name:
            return None
        return _lookup_member(cls, file_name.rsplit(".", 1)[1])

    @classmethod
    def _missing_(cls, value):
        return _lookup_member(cls, value)

"""Agent modules for the Interview Prep platform."""

from .base_agent import BaseAgent
from .interviewer_agent import QuestionGenerator
from .evaluator_agent import FeedbackGenerator, build_summary, build_transcript
from .orchestrator_agent import SessionOrchestrator
from .resume_agent import ResumeAnalyzer

__all__ = [
    "BaseAgent",
    "QuestionGenerator",
    "FeedbackGenerator",
    "build_summary",
    "build_transcript",
    "SessionOrchestrator",
    "ResumeAnalyzer",
]

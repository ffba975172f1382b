"""Interview session models for the Interview Prep platform."""

from typing import List, Optional

from pydantic import Field, model_validator

from .base import BaseModel, OwnedModel
from .enums import Emotion


class Question(BaseModel):
    """Represents an interview question."""

    text: str = Field(..., min_length=1, description="Question content")
    tts_audio_url: str = Field(default="", description="Synthesized audio for the question")


class Answer(BaseModel):
    """Candidate answer to one question."""

    text: str = Field(default="", description="Answer text or mocked transcription")
    audio_url: str = Field(default="", description="Recorded audio location")

    @property
    def is_blank(self) -> bool:
        return not self.text.strip()


class Feedback(BaseModel):
    """Scored feedback for a completed interview."""

    clarity: int = Field(..., ge=0, le=100, description="Clarity of communication")
    confidence: int = Field(..., ge=0, le=100, description="Perceived confidence")
    filler_words: int = Field(..., ge=0, le=100, description="Filler words detected")
    emotion: Emotion = Field(default=Emotion.NEUTRAL, description="Dominant emotion")
    keyword_usage: int = Field(..., ge=0, le=100, description="Industry keyword usage")
    suggestions: List[str] = Field(default_factory=list, description="Improvement suggestions")
    overall_score: int = Field(..., ge=0, le=100, description="Overall interview score")

    def get_performance_tier(self) -> str:
        """Get the wording tier for the overall score."""
        return "excellent" if self.overall_score >= 80 else "good"


class InterviewSession(OwnedModel):
    """One interview attempt: fixed questions, parallel answers, eventual feedback."""

    role: str = Field(..., min_length=1, description="Target job role")
    job_description: str = Field(default="", description="Optional job description")
    questions: List[Question] = Field(..., min_length=1, description="Questions in order")
    answers: List[Answer] = Field(..., description="Answers parallel to questions")
    transcript: str = Field(default="", description="Question/answer transcript")
    feedback: Optional[Feedback] = Field(default=None, description="Generated feedback")
    summary: str = Field(default="", description="Natural-language feedback summary")
    report_url: Optional[str] = Field(default=None, description="Generated report location")
    progress_recorded: bool = Field(default=False, description="Score applied to user progression")

    @model_validator(mode="after")
    def _answers_parallel_to_questions(self) -> "InterviewSession":
        if len(self.answers) != len(self.questions):
            raise ValueError("answers must have the same length as questions")
        return self

    @classmethod
    def start(cls, user_id: str, role: str, job_description: str, questions: List[Question]) -> "InterviewSession":
        """Create a session with every answer slot blank."""
        return cls(
            user_id=user_id,
            role=role,
            job_description=job_description,
            questions=questions,
            answers=[Answer() for _ in questions],
        )

    @property
    def question_count(self) -> int:
        return len(self.questions)

    @property
    def feedback_generated(self) -> bool:
        return self.feedback is not None

    @property
    def answered_count(self) -> int:
        return sum(1 for answer in self.answers if not answer.is_blank)

    def is_last_question(self, question_index: int) -> bool:
        return question_index == len(self.questions) - 1


class AnswerSubmission(BaseModel):
    """Result of submitting one answer."""

    is_last_question: bool
    next_question_index: Optional[int] = None


class FeedbackResult(BaseModel):
    """Feedback, transcript and summary for a session."""

    feedback: Feedback
    transcript: str
    summary: str

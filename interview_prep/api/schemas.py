"""Request bodies for the HTTP API.

Field names follow the web client's camelCase payloads; snake_case names
are accepted too.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RequestModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class RegisterRequest(RequestModel):
    name: str = ""
    email: str = ""
    password: str = ""


class LoginRequest(RequestModel):
    email: str = ""
    password: str = ""


class ProfileUpdateRequest(RequestModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class StartInterviewRequest(RequestModel):
    role: str = ""
    job_description: str = Field(default="", alias="jobDescription")


class SubmitAnswerRequest(RequestModel):
    session_id: str = Field(..., alias="sessionId")
    question_index: int = Field(..., alias="questionIndex", strict=True)
    answer: str = ""
    audio_url: Optional[str] = Field(default=None, alias="audioUrl")


class FeedbackRequest(RequestModel):
    session_id: str = Field(..., alias="sessionId")


class AnalyzeResumeRequest(RequestModel):
    resume_id: str = Field(..., alias="resumeId")
    role: str = ""


class ReportRequest(RequestModel):
    interview_id: str = Field(..., alias="interviewId")
    resume_id: Optional[str] = Field(default=None, alias="resumeId")

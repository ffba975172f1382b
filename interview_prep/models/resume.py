"""Resume data models for the Interview Prep platform."""

from typing import List, Optional

from pydantic import Field

from .base import BaseModel, OwnedModel
from .enums import ResumeFileType


class ResumeAnalysis(BaseModel):
    """ATS compatibility analysis of a resume against a job role."""

    ats_score: int = Field(..., ge=0, le=100, description="ATS compatibility score")
    formatting_issues: List[str] = Field(default_factory=list)
    grammar_issues: List[str] = Field(default_factory=list)
    improvement_suggestions: List[str] = Field(default_factory=list)
    keyword_match: int = Field(..., ge=0, le=100, description="Keyword match percentage")


class Resume(OwnedModel):
    """Uploaded resume with its optional analysis."""

    file_url: str = Field(..., description="Stored file location")
    file_name: str = Field(..., description="Original file name")
    file_type: ResumeFileType = Field(..., description="Document format")
    file_size: int = Field(default=0, ge=0, description="Size in bytes")
    parsed_content: str = Field(default="", description="Extracted text")
    skills: List[str] = Field(default_factory=list, description="Parsed skills")

    # Analysis fields stay None until analyze() runs against a role
    ats_score: Optional[int] = Field(default=None, ge=0, le=100)
    formatting_issues: Optional[List[str]] = None
    grammar_issues: Optional[List[str]] = None
    improvement_suggestions: Optional[List[str]] = None
    keyword_match: Optional[int] = Field(default=None, ge=0, le=100)
    compared_job_role: Optional[str] = None

    @property
    def analyzed(self) -> bool:
        return self.ats_score is not None

    def apply_analysis(self, analysis: ResumeAnalysis, role: str) -> None:
        """Copy analysis results onto the resume."""
        self.ats_score = analysis.ats_score
        self.formatting_issues = list(analysis.formatting_issues)
        self.grammar_issues = list(analysis.grammar_issues)
        self.improvement_suggestions = list(analysis.improvement_suggestions)
        self.keyword_match = analysis.keyword_match
        self.compared_job_role = role
        self.update_timestamp()

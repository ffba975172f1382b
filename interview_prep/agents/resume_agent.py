"""Resume Agent for resume uploads and mocked ATS analysis."""

from typing import List, Optional, Sequence

from ..models.base import utcnow
from ..models.enums import ResumeFileType
from ..models.resume import Resume, ResumeAnalysis
from ..services.progression import ProgressionEngine
from ..services.scoring import RandomScoreProvider, ScoreProvider
from ..services.storage_manager import StorageManager
from ..utils.exceptions import ForbiddenError, ValidationError
from .base_agent import BaseAgent

MAX_RESUME_SIZE_BYTES = 10_000_000

PLACEHOLDER_PARSED_CONTENT = "Sample parsed resume content"
PLACEHOLDER_SKILLS = ["JavaScript", "React", "Node.js", "MongoDB"]

FORMATTING_ISSUES = [
    "Consider using bullet points for better readability",
    "Add more white space between sections",
]
GRAMMAR_ISSUES = [
    "Check for passive voice in your experience section",
    "Ensure consistent tense usage throughout",
]
IMPROVEMENT_SUGGESTIONS = [
    "Add more quantifiable achievements",
    "Include relevant keywords from the job description",
    "Highlight specific technical skills more prominently",
]


class ResumeAnalyzer(BaseAgent):
    """Stores uploaded resumes and scores them against a job role."""

    def __init__(
        self,
        storage_manager: StorageManager,
        progression_engine: ProgressionEngine,
        score_provider: Optional[ScoreProvider] = None,
        max_size_bytes: int = MAX_RESUME_SIZE_BYTES,
        allowed_types: Sequence[str] = ("pdf", "docx"),
    ):
        """Initialize the ResumeAnalyzer.

        Args:
            storage_manager: Initialized storage manager
            progression_engine: Awards XP for completed analyses
            score_provider: Source of ATS scores; random when omitted
            max_size_bytes: Largest accepted upload
            allowed_types: Accepted file extensions
        """
        super().__init__("ResumeAnalyzer")
        self.storage_manager = storage_manager
        self.progression_engine = progression_engine
        self.score_provider = score_provider or RandomScoreProvider()
        self.max_size_bytes = max_size_bytes
        self.allowed_types = {ResumeFileType(t) for t in allowed_types}

    def _initialize_resources(self) -> None:
        self.logger.info(f"ResumeAnalyzer accepting {sorted(t.value for t in self.allowed_types)}")

    async def _cleanup_resources(self) -> None:
        self.logger.info("ResumeAnalyzer resources cleaned up")

    def _validate_upload(self, file_name: str, content: bytes) -> ResumeFileType:
        if not file_name or not file_name.strip():
            raise ValidationError("File name is required", field_name="file")
        file_type = ResumeFileType.from_file_name(file_name)
        if file_type is None or file_type not in self.allowed_types:
            raise ValidationError("Only PDF and Word documents are allowed", field_name="file")
        if not content:
            raise ValidationError("Uploaded file is empty", field_name="file")
        if len(content) > self.max_size_bytes:
            raise ValidationError(
                f"File exceeds the {self.max_size_bytes} byte limit",
                field_name="file",
                details={"size": len(content)},
            )
        return file_type

    async def upload(self, user_id: str, file_name: str, content: bytes) -> Resume:
        """Store a resume upload and its (mocked) parsed content.

        Raises:
            ValidationError: If the file type, name or size is not acceptable
            NotFoundError: If the user does not exist
        """
        file_type = self._validate_upload(file_name, content)
        await self.storage_manager.accounts.require(user_id)

        stamp = int(utcnow().timestamp() * 1000)
        resume = Resume(
            user_id=user_id,
            file_url=f"/uploads/{user_id}-{stamp}.{file_type.value}",
            file_name=file_name,
            file_type=file_type,
            file_size=len(content),
            parsed_content=PLACEHOLDER_PARSED_CONTENT,
            skills=list(PLACEHOLDER_SKILLS),
        )
        await self.storage_manager.resumes.create(resume)

        async with self.progression_engine.locks.hold(user_id):
            user = await self.storage_manager.accounts.require(user_id)
            user.resume_url = resume.file_url
            await self.storage_manager.accounts.update(user)

        self.log_operation("upload_resume", {"resume_id": resume.id, "user_id": user_id, "size": len(content)})
        return resume

    async def get_resume(self, user_id: str, resume_id: str) -> Resume:
        """Get a resume owned by the caller."""
        resume = await self.storage_manager.resumes.require(resume_id)
        if not resume.is_owned_by(user_id):
            raise ForbiddenError()
        return resume

    async def list_resumes(self, user_id: str) -> List[Resume]:
        """List the caller's resumes, newest first."""
        return await self.storage_manager.resumes.list_by_user(user_id)

    def _score_resume(self, resume: Resume, role: str) -> ResumeAnalysis:
        return ResumeAnalysis(
            ats_score=self.score_provider.score(60, 100),
            formatting_issues=list(FORMATTING_ISSUES),
            grammar_issues=list(GRAMMAR_ISSUES),
            improvement_suggestions=list(IMPROVEMENT_SUGGESTIONS),
            keyword_match=self.score_provider.score(60, 100),
        )

    async def analyze(self, user_id: str, resume_id: str, role: str) -> ResumeAnalysis:
        """Analyze a resume against a job role and award XP.

        Raises:
            ValidationError: If role is blank
            NotFoundError: If the resume does not exist
            ForbiddenError: If the caller does not own the resume
        """
        role = (role or "").strip()
        if not role:
            raise ValidationError("Role is required", field_name="role")

        resume = await self.get_resume(user_id, resume_id)
        analysis = self._score_resume(resume, role)

        resume.apply_analysis(analysis, role)
        await self.storage_manager.resumes.update(resume)
        award = await self.progression_engine.award_resume_analysis(user_id, ats_score=analysis.ats_score)

        self.log_operation("analyze_resume", {
            "resume_id": resume_id,
            "role": role,
            "ats_score": analysis.ats_score,
            "xp_points": award.user.xp_points,
        })
        return analysis

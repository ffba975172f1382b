"""Orchestrator Agent for coordinating interview sessions.

Answer submission and feedback generation are read-modify-write operations
on a whole session document, so each runs under a per-session lock. Writes
to the same answer slot are last-write-wins with no ordering guarantee
beyond lock acquisition order.
"""

from typing import List, Optional

from ..models.interview import Answer, AnswerSubmission, FeedbackResult, InterviewSession
from ..services.progression import ProgressionEngine, LockRegistry
from ..services.storage_manager import StorageManager
from ..utils.exceptions import ForbiddenError, ValidationError
from .base_agent import BaseAgent
from .evaluator_agent import FeedbackGenerator, build_summary, build_transcript
from .interviewer_agent import QuestionGenerator


class SessionOrchestrator(BaseAgent):
    """Coordinates session creation, answer submission and feedback generation."""

    def __init__(
        self,
        storage_manager: StorageManager,
        question_generator: QuestionGenerator,
        feedback_generator: FeedbackGenerator,
        progression_engine: ProgressionEngine,
        session_locks: Optional[LockRegistry] = None,
    ):
        """Initialize the SessionOrchestrator.

        Args:
            storage_manager: Initialized storage manager
            question_generator: Produces the question list for new sessions
            feedback_generator: Scores completed sessions
            progression_engine: Applies scores to user progression
            session_locks: Per-session lock registry shared with other session writers
        """
        super().__init__("SessionOrchestrator")
        self.storage_manager = storage_manager
        self.question_generator = question_generator
        self.feedback_generator = feedback_generator
        self.progression_engine = progression_engine
        self.session_locks = session_locks if session_locks is not None else LockRegistry()

    def _initialize_resources(self) -> None:
        self.question_generator.initialize()
        self.feedback_generator.initialize()

    async def _cleanup_resources(self) -> None:
        await self.question_generator.cleanup()
        await self.feedback_generator.cleanup()

    async def _load_owned_session(self, user_id: str, session_id: str) -> InterviewSession:
        """Load a session, checking existence before ownership."""
        session = await self.storage_manager.sessions.require(session_id)
        if not session.is_owned_by(user_id):
            self.logger.warning("Session access denied", extra={"session_id": session_id, "user_id": user_id})
            raise ForbiddenError()
        return session

    async def start_interview(self, user_id: str, role: str, job_description: str = "") -> InterviewSession:
        """Start a new interview session.

        Args:
            user_id: Owning user
            role: Target role, required
            job_description: Optional job description

        Returns:
            The stored session with every answer blank

        Raises:
            ValidationError: If role is blank
            NotFoundError: If the user does not exist
        """
        role = (role or "").strip()
        if not role:
            raise ValidationError("Role is required", field_name="role")
        job_description = (job_description or "").strip()

        await self.storage_manager.accounts.require(user_id)
        questions = await self.question_generator.generate(role, job_description)
        session = InterviewSession.start(user_id, role, job_description, questions)
        await self.storage_manager.sessions.create(session)

        async with self.progression_engine.locks.hold(user_id):
            user = await self.storage_manager.accounts.require(user_id)
            user.history.append(session.id)
            await self.storage_manager.accounts.update(user)

        self.log_operation("start_interview", {
            "session_id": session.id,
            "user_id": user_id,
            "role": role,
            "question_count": session.question_count,
        })
        return session

    async def submit_answer(
        self,
        user_id: str,
        session_id: str,
        question_index: int,
        answer_text: str,
        audio_url: Optional[str] = None,
    ) -> AnswerSubmission:
        """Store the answer to one question.

        Resubmitting the same index overwrites the previous answer. Feedback
        is not generated here; the caller does that after the last question.

        Raises:
            NotFoundError: If the session does not exist
            ForbiddenError: If the caller does not own the session
            ValidationError: If the index is out of range or the answer is blank
        """
        async with self.session_locks.hold(session_id):
            session = await self._load_owned_session(user_id, session_id)

            if isinstance(question_index, bool) or not isinstance(question_index, int):
                raise ValidationError("Question index must be an integer", field_name="questionIndex")
            if not 0 <= question_index < session.question_count:
                raise ValidationError(
                    f"Question index must be between 0 and {session.question_count - 1}",
                    field_name="questionIndex",
                )
            if not answer_text or not answer_text.strip():
                raise ValidationError("Answer is required", field_name="answer")

            session.answers[question_index] = Answer(text=answer_text, audio_url=audio_url or "")
            await self.storage_manager.sessions.update(session)

        is_last = session.is_last_question(question_index)
        self.log_operation("submit_answer", {
            "session_id": session_id,
            "question_index": question_index,
            "is_last_question": is_last,
        })
        return AnswerSubmission(
            is_last_question=is_last,
            next_question_index=None if is_last else question_index + 1,
        )

    async def generate_feedback(self, user_id: str, session_id: str) -> FeedbackResult:
        """Generate feedback for a session and record the score.

        Feedback, transcript and summary are persisted before progression
        runs. Feedback already on the session is reused, and the score is
        applied to the user's progression at most once; a call after a
        failed progression step retries only that step.

        Raises:
            NotFoundError: If the session does not exist
            ForbiddenError: If the caller does not own the session
        """
        async with self.session_locks.hold(session_id):
            session = await self._load_owned_session(user_id, session_id)

            if not session.feedback_generated:
                feedback = await self.feedback_generator.generate(session)
                session.transcript = build_transcript(session)
                session.feedback = feedback
                session.summary = build_summary(feedback)
                await self.storage_manager.sessions.update(session)
                self.log_operation("feedback_generated", {
                    "session_id": session_id,
                    "overall_score": feedback.overall_score,
                })
            else:
                self.logger.info(f"Reusing stored feedback for session {session_id}")

            if not session.progress_recorded:
                try:
                    await self.progression_engine.record_interview(
                        user_id, session.role, session.feedback.overall_score
                    )
                except Exception as e:
                    self.log_error(e, {"session_id": session_id, "step": "record_interview"})
                    raise
                session.progress_recorded = True
                await self.storage_manager.sessions.update(session)

        return FeedbackResult(
            feedback=session.feedback,
            transcript=session.transcript,
            summary=session.summary,
        )

    async def get_session(self, user_id: str, session_id: str) -> InterviewSession:
        """Get a session owned by the caller."""
        return await self._load_owned_session(user_id, session_id)

    async def list_sessions(self, user_id: str) -> List[InterviewSession]:
        """List the caller's sessions, newest first."""
        return await self.storage_manager.sessions.list_by_user(user_id)

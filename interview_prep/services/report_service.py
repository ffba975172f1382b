"""Report service: mocked PDF report locations for interview sessions."""

from datetime import datetime
from typing import Callable, Optional

from ..models.base import utcnow
from ..models.interview import InterviewSession
from ..utils.exceptions import ForbiddenError, NotFoundError
from ..utils.logging import get_logger
from .progression import LockRegistry
from .storage_manager import StorageManager


class ReportService:
    """Generates and looks up the report attached to an interview session."""

    def __init__(
        self,
        storage_manager: StorageManager,
        clock: Callable[[], datetime] = utcnow,
        session_locks: Optional[LockRegistry] = None,
    ):
        """Initialize the report service.

        Args:
            storage_manager: Initialized storage manager
            clock: Source of the report timestamp
            session_locks: Per-session lock registry shared with the session orchestrator
        """
        self.storage_manager = storage_manager
        self.session_locks = session_locks if session_locks is not None else LockRegistry()
        self.clock = clock
        self.logger = get_logger(__name__)

    async def _owned_session(self, user_id: str, session_id: str) -> InterviewSession:
        session = await self.storage_manager.sessions.require(session_id)
        if not session.is_owned_by(user_id):
            raise ForbiddenError()
        return session

    async def generate_report(self, user_id: str, session_id: str, resume_id: Optional[str] = None) -> str:
        """Generate a report for a session and store its URL on the session.

        A resume that does not exist or belongs to another user is left out
        of the report rather than failing the request.

        Args:
            user_id: Caller
            session_id: Interview session to report on
            resume_id: Optional resume to include

        Returns:
            The report URL

        Raises:
            NotFoundError: If the session does not exist
            ForbiddenError: If the caller does not own the session
        """
        async with self.session_locks.hold(session_id):
            session = await self._owned_session(user_id, session_id)

            included_resume = None
            if resume_id:
                resume = await self.storage_manager.resumes.get(resume_id)
                if resume is not None and resume.is_owned_by(user_id):
                    included_resume = resume.id

            stamp = int(self.clock().timestamp() * 1000)
            session.report_url = f"/reports/{session.id}-{stamp}.pdf"
            await self.storage_manager.sessions.update(session)

        self.logger.info("Report generated", extra={
            "user_id": user_id,
            "session_id": session_id,
            "resume_id": included_resume,
            "report_url": session.report_url,
        })
        return session.report_url

    async def get_report(self, user_id: str, session_id: str) -> str:
        """Get the stored report URL for a session.

        Raises:
            NotFoundError: If the session or its report does not exist
            ForbiddenError: If the caller does not own the session
        """
        session = await self._owned_session(user_id, session_id)
        if not session.report_url:
            raise NotFoundError("Report not found", resource_type="Report", resource_id=session_id)
        return session.report_url

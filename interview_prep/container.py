"""Wiring of the storage manager, services and agents for one process."""

from dataclasses import dataclass
from typing import Optional

from .agents import FeedbackGenerator, QuestionGenerator, ResumeAnalyzer, SessionOrchestrator
from .services.account_service import AccountService
from .services.configuration_manager import AppConfig
from .services.progression import LockRegistry, ProgressionEngine
from .services.report_service import ReportService
from .services.scoring import ScoreProvider
from .services.storage_manager import StorageManager
from .utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class ServiceContainer:
    """Every long-lived component, sharing one storage manager and the user and session lock registries."""

    config: AppConfig
    storage: StorageManager
    accounts: AccountService
    progression: ProgressionEngine
    orchestrator: SessionOrchestrator
    resume_analyzer: ResumeAnalyzer
    reports: ReportService

    async def start(self) -> None:
        """Open storage and initialize the agents."""
        await self.storage.initialize()
        self.orchestrator.initialize()
        self.resume_analyzer.initialize()
        logger.info("Services started")

    async def close(self) -> None:
        """Clean up the agents and close storage."""
        await self.orchestrator.cleanup()
        await self.resume_analyzer.cleanup()
        await self.storage.close()
        logger.info("Services stopped")


def build_services(
    config: AppConfig,
    storage: Optional[StorageManager] = None,
    score_provider: Optional[ScoreProvider] = None,
) -> ServiceContainer:
    """Build the service graph from configuration.

    Args:
        config: Loaded application configuration
        storage: Storage manager to use instead of the configured one
        score_provider: Score source for feedback and resume analysis; random when omitted
    """
    if storage is None:
        storage = StorageManager(**config.storage.manager_kwargs())

    user_locks = LockRegistry()
    session_locks = LockRegistry()
    progression = ProgressionEngine(
        storage,
        interview_xp=config.interview.interview_xp,
        resume_xp=config.interview.resume_xp,
        locks=user_locks,
    )
    accounts = AccountService(
        storage,
        secret_key=config.security.secret_key,
        token_expiry_hours=config.security.token_expiry_hours,
        password_iterations=config.security.password_iterations,
        locks=user_locks,
    )
    orchestrator = SessionOrchestrator(
        storage,
        QuestionGenerator(config.interview.default_question_count),
        FeedbackGenerator(score_provider),
        progression,
        session_locks=session_locks,
    )
    resume_analyzer = ResumeAnalyzer(
        storage,
        progression,
        score_provider=score_provider,
        max_size_bytes=config.interview.max_resume_size_bytes,
        allowed_types=[t.lower() for t in config.interview.allowed_resume_types],
    )
    return ServiceContainer(
        config=config,
        storage=storage,
        accounts=accounts,
        progression=progression,
        orchestrator=orchestrator,
        resume_analyzer=resume_analyzer,
        reports=ReportService(storage, session_locks=session_locks),
    )

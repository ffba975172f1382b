"""Service modules for the Interview Prep platform."""

from .storage_manager import StorageManager
from .configuration_manager import AppConfig, ConfigurationManager
from .scoring import FixedScoreProvider, RandomScoreProvider, ScoreProvider
from .progression import LockRegistry, ProgressionEngine, ProgressionResult, XpAward
from .account_service import AccountService
from .report_service import ReportService

__all__ = [
    "StorageManager",
    "AppConfig",
    "ConfigurationManager",
    "ScoreProvider",
    "RandomScoreProvider",
    "FixedScoreProvider",
    "LockRegistry",
    "ProgressionEngine",
    "ProgressionResult",
    "XpAward",
    "AccountService",
    "ReportService",
]

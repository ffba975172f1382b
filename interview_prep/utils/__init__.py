"""Utility modules for the Interview Prep platform."""

from .logging import setup_logging, get_logger, set_correlation_id, get_correlation_id
from .exceptions import (
    InterviewPrepError,
    ValidationError,
    AuthenticationError,
    ForbiddenError,
    NotFoundError,
    DuplicateResourceError,
    InternalError,
    StorageError,
    ConfigurationError,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "set_correlation_id",
    "get_correlation_id",
    "InterviewPrepError",
    "ValidationError",
    "AuthenticationError",
    "ForbiddenError",
    "NotFoundError",
    "DuplicateResourceError",
    "InternalError",
    "StorageError",
    "ConfigurationError",
]

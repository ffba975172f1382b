"""Custom exceptions for the Interview Prep platform."""

from typing import Optional, Any, Dict


GENERIC_ERROR_MESSAGE = "Server error"


class InterviewPrepError(Exception):
    """Base exception for all Interview Prep errors."""

    status_code = 500

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        """Initialize the exception.

        Args:
            message: Error message
            error_code: Optional error code for categorization
            details: Optional additional error details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or "INTERNAL_ERROR"
        self.details = details or {}

    @property
    def public_message(self) -> str:
        """Message that is safe to show to the caller."""
        return self.message

    def __str__(self) -> str:
        """Return string representation of the exception."""
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message


class ValidationError(InterviewPrepError):
    """Exception raised when a required field is missing or out of range."""

    status_code = 400

    def __init__(self, message: str, field_name: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        """Initialize the validation error.

        Args:
            message: Error message
            field_name: Optional field name that failed validation
            details: Optional additional error details
        """
        super().__init__(message, "VALIDATION_ERROR", details)
        self.field_name = field_name


class AuthenticationError(InterviewPrepError):
    """Exception raised for authentication errors."""

    status_code = 401

    def __init__(self, message: str = "Not authenticated", auth_method: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        """Initialize the authentication error.

        Args:
            message: Error message
            auth_method: Optional authentication method that failed
            details: Optional additional error details
        """
        super().__init__(message, "AUTHENTICATION_ERROR", details)
        self.auth_method = auth_method


class ForbiddenError(InterviewPrepError):
    """Exception raised when the caller does not own the requested resource."""

    status_code = 403

    def __init__(self, message: str = "Not authorized", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "FORBIDDEN_ERROR", details)


class NotFoundError(InterviewPrepError):
    """Exception raised when a requested resource is not found."""

    status_code = 404

    def __init__(self, message: str, resource_type: Optional[str] = None, resource_id: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        """Initialize the not found error.

        Args:
            message: Error message
            resource_type: Optional type of resource that was not found
            resource_id: Optional ID of resource that was not found
            details: Optional additional error details
        """
        super().__init__(message, "NOT_FOUND_ERROR", details)
        self.resource_type = resource_type
        self.resource_id = resource_id


class DuplicateResourceError(InterviewPrepError):
    """Exception raised when trying to create a duplicate resource."""

    status_code = 409

    def __init__(self, message: str, resource_type: Optional[str] = None, resource_id: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        """Initialize the duplicate resource error.

        Args:
            message: Error message
            resource_type: Optional type of resource that is duplicate
            resource_id: Optional ID of duplicate resource
            details: Optional additional error details
        """
        super().__init__(message, "DUPLICATE_RESOURCE_ERROR", details)
        self.resource_type = resource_type
        self.resource_id = resource_id


class InternalError(InterviewPrepError):
    """Exception raised for store failures and unexpected conditions.

    The message is logged but never returned to the caller.
    """

    status_code = 500

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code or "INTERNAL_ERROR", details)

    @property
    def public_message(self) -> str:
        return GENERIC_ERROR_MESSAGE


class StorageError(InternalError):
    """Exception raised for storage-related errors."""

    def __init__(self, message: str, file_path: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        """Initialize the storage error.

        Args:
            message: Error message
            file_path: Optional file path that caused the error
            details: Optional additional error details
        """
        super().__init__(message, "STORAGE_ERROR", details)
        self.file_path = file_path


class ConfigurationError(InternalError):
    """Exception raised for configuration-related errors."""

    def __init__(self, message: str, config_key: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        """Initialize the configuration error.

        Args:
            message: Error message
            config_key: Optional configuration key that caused the error
            details: Optional additional error details
        """
        super().__init__(message, "CONFIG_ERROR", details)
        self.config_key = config_key

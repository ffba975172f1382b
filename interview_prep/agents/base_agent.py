"""Base agent interface for the Interview Prep platform."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from ..utils.logging import get_correlation_id, get_logger


class BaseAgent(ABC):
    """Base interface for all agents."""

    def __init__(self, agent_name: str):
        """Initialize the base agent.

        Args:
            agent_name: Name of the agent for logging and identification
        """
        self.agent_name = agent_name
        self.logger = get_logger(f"agent.{agent_name}")
        self._initialized = False

    def initialize(self) -> None:
        """Initialize agent resources and dependencies."""
        if self._initialized:
            self.logger.warning(f"Agent {self.agent_name} already initialized")
            return

        try:
            self._initialize_resources()
            self._initialized = True
            self.logger.info(f"Agent {self.agent_name} initialized successfully")
        except Exception as e:
            self.logger.error(f"Failed to initialize agent {self.agent_name}: {e}")
            raise

    async def cleanup(self) -> None:
        """Cleanup agent resources."""
        if not self._initialized:
            return

        try:
            await self._cleanup_resources()
            self._initialized = False
            self.logger.info(f"Agent {self.agent_name} cleaned up successfully")
        except Exception as e:
            self.logger.error(f"Failed to cleanup agent {self.agent_name}: {e}")
            raise

    @abstractmethod
    def _initialize_resources(self) -> None:
        """Initialize agent-specific resources."""
        pass

    @abstractmethod
    async def _cleanup_resources(self) -> None:
        """Cleanup agent-specific resources."""
        pass

    def log_operation(self, operation: str, details: Optional[Dict[str, Any]] = None) -> None:
        """Log agent operation with correlation ID."""
        extra = {"agent": self.agent_name, "request_id": get_correlation_id()}
        if details:
            extra.update(details)

        self.logger.info(f"Operation: {operation}", extra=extra)

    def log_error(self, error: Exception, context: Optional[Dict[str, Any]] = None) -> None:
        """Log agent error with correlation ID."""
        extra = {"agent": self.agent_name, "request_id": get_correlation_id()}
        if context:
            extra.update(context)

        self.logger.error(f"Error in {self.agent_name}: {error}", extra=extra, exc_info=error)

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def health_status(self) -> Dict[str, Any]:
        """Get agent health status."""
        return {
            "agent_name": self.agent_name,
            "initialized": self._initialized,
            "status": "healthy" if self._initialized else "uninitialized",
        }

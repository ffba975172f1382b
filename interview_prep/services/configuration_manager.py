"""Configuration Manager for handling application configuration and settings."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from ..utils.exceptions import ConfigurationError
from ..utils.logging import get_logger

DEVELOPMENT_SECRET_KEY = "development-secret-key-change-in-production"

ENV_OVERRIDES = {
    "LOG_LEVEL": ("logging", "level"),
    "INTERVIEW_PREP_SECRET_KEY": ("security", "secret_key"),
    "INTERVIEW_PREP_DATA_DIR": ("storage", "base_path"),
    "INTERVIEW_PREP_STORAGE_BACKEND": ("storage", "backend"),
}

DEFAULT_FEATURES = {"resume_analysis": True, "reports": True}


@dataclass
class LoggingConfig:
    """Logging configuration settings."""

    level: str = "INFO"
    format: str = "text"
    file_path: Optional[str] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5
    console_output: bool = True
    file_output: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoggingConfig":
        """Create LoggingConfig from dictionary."""
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})


@dataclass
class StorageConfig:
    """Storage configuration settings."""

    backend: str = "file"
    base_path: str = "data"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StorageConfig":
        """Create StorageConfig from dictionary."""
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})

    def manager_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for ``StorageManager``."""
        if self.backend == "memory":
            return {"storage_type": "memory"}
        return {"storage_type": "file", "base_path": self.base_path}


@dataclass
class SecurityConfig:
    """Security configuration settings."""

    secret_key: str = ""
    token_expiry_hours: int = 720  # 30 days
    password_iterations: int = 190_000

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SecurityConfig":
        """Create SecurityConfig from dictionary."""
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})


@dataclass
class InterviewConfig:
    """Interview, resume and progression settings."""

    default_question_count: int = 5
    interview_xp: int = 100
    resume_xp: int = 50
    max_resume_size_bytes: int = 10_000_000
    allowed_resume_types: List[str] = field(default_factory=lambda: ["pdf", "docx"])

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InterviewConfig":
        """Create InterviewConfig from dictionary."""
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})


class AppConfig(BaseModel):
    """Main application configuration model."""

    model_config = ConfigDict(validate_assignment=True)

    app_name: str = Field(default="Interview Prep", description="Application name")
    version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")
    environment: str = Field(default="development", description="Environment")

    # Component configurations
    logging: LoggingConfig = Field(default_factory=LoggingConfig, description="Logging settings")
    storage: StorageConfig = Field(default_factory=StorageConfig, description="Storage settings")
    security: SecurityConfig = Field(default_factory=SecurityConfig, description="Security settings")
    interview: InterviewConfig = Field(default_factory=InterviewConfig, description="Interview settings")

    # Feature flags
    features: Dict[str, bool] = Field(default_factory=lambda: dict(DEFAULT_FEATURES), description="Feature flags")


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigurationManager:
    """Manages application configuration and settings."""

    def __init__(self, config_path: str = "config", env_file: str = ".env"):
        """Initialize the configuration manager.

        Args:
            config_path: Path to configuration directory.
            env_file: Path to environment file.
        """
        self.config_path = Path(config_path)
        self.env_file = Path(env_file)
        self.config: Optional[AppConfig] = None
        self.logger = get_logger("configuration_manager")

    def initialize(self) -> None:
        """Load, override and validate the configuration.

        Raises:
            ConfigurationError: If a file cannot be parsed or a value is invalid.
        """
        self._load_environment_variables()
        config_data = self._load_configuration_files()
        config_data = self._apply_environment_overrides(config_data)

        try:
            self.config = AppConfig.model_validate(config_data)
        except PydanticValidationError as e:
            self.logger.error(f"Invalid configuration: {str(e)}")
            raise ConfigurationError(f"Configuration validation failed: {str(e)}")

        self._validate_configuration()
        self.logger.info("ConfigurationManager initialized successfully")

    def _load_environment_variables(self) -> None:
        """Load environment variables from .env file."""
        if self.env_file.exists():
            load_dotenv(self.env_file)
            self.logger.info(f"Loaded environment variables from {self.env_file}")

    def _load_configuration_files(self) -> Dict[str, Any]:
        """Merge config.yaml and config.<environment>.yaml over the defaults."""
        config_data = AppConfig().model_dump()

        main_config_file = self.config_path / "config.yaml"
        if main_config_file.exists():
            config_data = _merge(config_data, self._load_yaml_file(main_config_file))
            self.logger.info(f"Loaded main configuration from {main_config_file}")

        environment = os.getenv("ENVIRONMENT") or config_data.get("environment", "development")
        config_data["environment"] = environment
        env_config_file = self.config_path / f"config.{environment}.yaml"
        if env_config_file.exists():
            config_data = _merge(config_data, self._load_yaml_file(env_config_file))
            self.logger.info(f"Loaded environment configuration from {env_config_file}")

        return config_data

    def _apply_environment_overrides(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        for env_var, (section, key) in ENV_OVERRIDES.items():
            value = os.getenv(env_var)
            if value:
                config_data.setdefault(section, {})[key] = value
                self.logger.debug(f"{section}.{key} overridden by {env_var}")
        return config_data

    def _load_yaml_file(self, file_path: Path) -> Dict[str, Any]:
        """Load YAML file content.

        Args:
            file_path: Path to YAML file.

        Returns:
            Dictionary containing file content.
        """
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                content = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            self.logger.error(f"Failed to load YAML file {file_path}: {str(e)}")
            raise ConfigurationError(f"Failed to load {file_path}: {str(e)}", config_key=str(file_path))

        if not isinstance(content, dict):
            raise ConfigurationError(f"{file_path} must contain a mapping", config_key=str(file_path))
        return content

    def _validate_configuration(self) -> None:
        """Validate the loaded configuration."""
        config = self.config

        if not config.security.secret_key:
            self.logger.warning("No secret key configured - using development default")
            config.security.secret_key = DEVELOPMENT_SECRET_KEY

        if config.storage.backend not in ("file", "memory"):
            raise ConfigurationError(
                f"Unsupported storage backend: {config.storage.backend}", config_key="storage.backend"
            )
        if config.security.token_expiry_hours < 1:
            raise ConfigurationError("token_expiry_hours must be at least 1", config_key="security.token_expiry_hours")
        if config.security.password_iterations < 1:
            raise ConfigurationError("password_iterations must be positive", config_key="security.password_iterations")
        if config.interview.default_question_count < 1:
            raise ConfigurationError(
                "default_question_count must be at least 1", config_key="interview.default_question_count"
            )
        if config.interview.interview_xp < 0 or config.interview.resume_xp < 0:
            raise ConfigurationError("XP awards must not be negative", config_key="interview")
        if config.interview.max_resume_size_bytes < 1:
            raise ConfigurationError(
                "max_resume_size_bytes must be positive", config_key="interview.max_resume_size_bytes"
            )
        unknown_types = set(t.lower() for t in config.interview.allowed_resume_types) - {"pdf", "docx"}
        if unknown_types or not config.interview.allowed_resume_types:
            raise ConfigurationError(
                f"Unsupported resume types: {sorted(unknown_types)}", config_key="interview.allowed_resume_types"
            )

        self.logger.info("Configuration validation completed successfully")

    def get_config(self) -> AppConfig:
        """Get the current configuration.

        Returns:
            Current application configuration.

        Raises:
            ConfigurationError: If configuration is not loaded.
        """
        if not self.config:
            raise ConfigurationError("Configuration not loaded")
        return self.config

    def get_setting(self, key: str, default: Any = None) -> Any:
        """Get a specific configuration setting.

        Args:
            key: Configuration key (dot notation supported).
            default: Default value if key not found.

        Returns:
            Configuration value.
        """
        if not self.config:
            return default

        value: Any = self.config
        for k in key.split("."):
            if isinstance(value, dict):
                if k not in value:
                    return default
                value = value[k]
            elif hasattr(value, k):
                value = getattr(value, k)
            else:
                return default
        return value

    def is_feature_enabled(self, feature_name: str) -> bool:
        """Check if a feature is enabled.

        Args:
            feature_name: Name of the feature.

        Returns:
            True if feature is enabled, False otherwise.
        """
        if not self.config:
            return False

        return self.config.features.get(feature_name, False)

    def get_environment(self) -> str:
        if not self.config:
            return "development"
        return self.config.environment

    def get_logging_config(self) -> Dict[str, Any]:
        """Get logging configuration as keyword arguments for ``setup_logging``."""
        if not self.config:
            return {"level": "INFO"}

        logging_config = self.config.logging
        return {
            "level": logging_config.level,
            "log_file": logging_config.file_path,
            "enable_console": logging_config.console_output,
            "enable_file": logging_config.file_output and bool(logging_config.file_path),
            "structured": logging_config.format == "json",
            "max_file_size": logging_config.max_file_size,
            "backup_count": logging_config.backup_count,
        }

    def get_storage_config(self) -> Dict[str, Any]:
        """Get storage configuration as arguments for ``StorageManager``."""
        if not self.config:
            return StorageConfig().manager_kwargs()
        return self.config.storage.manager_kwargs()

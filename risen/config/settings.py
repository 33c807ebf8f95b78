"""
Configuration Management for RISEN Prompts.

Loads settings from environment variables (and an optional .env file) and
provides size ceilings, pagination limits, storage location, error-detail
toggles and health thresholds with fixed defaults.
"""

import logging
from pathlib import Path
from typing import List, Optional

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class RisenSettings(BaseSettings):
    """Application configuration loaded from environment variables."""

    # Storage
    db_path: Path = Field(
        default=Path("risen_prompts.db"),
        validation_alias=AliasChoices('db_path', 'RISEN_DB_PATH')
    )
    db_init_max_attempts: int = Field(
        default=3, ge=1,
        validation_alias=AliasChoices('db_init_max_attempts', 'DB_INIT_MAX_ATTEMPTS')
    )
    db_init_retry_delay_seconds: float = Field(
        default=2.0, ge=0,
        validation_alias=AliasChoices('db_init_retry_delay_seconds', 'DB_INIT_RETRY_DELAY_SECONDS')
    )

    # Runtime mode
    environment: str = Field(
        default="development",
        validation_alias=AliasChoices('environment', 'ENVIRONMENT', 'NODE_ENV')
    )
    debug: bool = Field(
        default=False,
        validation_alias=AliasChoices('debug', 'DEBUG')
    )
    # Never enable in production: exception text is returned to the client
    enable_error_details: bool = Field(
        default=False,
        validation_alias=AliasChoices('enable_error_details', 'ENABLE_ERROR_DETAILS')
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        validation_alias=AliasChoices('log_level', 'LOG_LEVEL')
    )
    log_structured: bool = Field(
        default=True,
        validation_alias=AliasChoices('log_structured', 'LOG_STRUCTURED')
    )

    # Input size limits
    max_template_name_length: int = Field(
        default=100,
        validation_alias=AliasChoices('max_template_name_length', 'MAX_TEMPLATE_NAME_LENGTH')
    )
    max_description_length: int = Field(
        default=500,
        validation_alias=AliasChoices('max_description_length', 'MAX_DESCRIPTION_LENGTH')
    )
    max_instructions_length: int = Field(
        default=2000,
        validation_alias=AliasChoices('max_instructions_length', 'MAX_INSTRUCTIONS_LENGTH')
    )
    max_expectations_length: int = Field(
        default=1000,
        validation_alias=AliasChoices('max_expectations_length', 'MAX_EXPECTATIONS_LENGTH')
    )
    max_narrowing_length: int = Field(
        default=1000,
        validation_alias=AliasChoices('max_narrowing_length', 'MAX_NARROWING_LENGTH')
    )
    # Applies to role and to each individual step
    max_individual_field_size: int = Field(
        default=2000,
        validation_alias=AliasChoices('max_individual_field_size', 'MAX_INDIVIDUAL_FIELD_SIZE')
    )
    max_steps_count: int = Field(
        default=50,
        validation_alias=AliasChoices('max_steps_count', 'MAX_STEPS_COUNT')
    )
    max_variables_count: int = Field(
        default=20,
        validation_alias=AliasChoices('max_variables_count', 'MAX_VARIABLES_COUNT')
    )
    max_tags_count: int = Field(
        default=10,
        validation_alias=AliasChoices('max_tags_count', 'MAX_TAGS_COUNT')
    )
    max_template_size: int = Field(
        default=8000,
        validation_alias=AliasChoices('max_template_size', 'MAX_TEMPLATE_SIZE')
    )

    # Response limits
    max_response_size: int = Field(
        default=2000,
        validation_alias=AliasChoices('max_response_size', 'MAX_RESPONSE_SIZE')
    )
    experiment_response_cap: int = Field(
        default=1000, ge=0,
        validation_alias=AliasChoices('experiment_response_cap', 'EXPERIMENT_RESPONSE_CAP')
    )

    # Pagination
    search_default_limit: int = Field(
        default=20, ge=1,
        validation_alias=AliasChoices('search_default_limit', 'SEARCH_DEFAULT_LIMIT', 'PAGINATION_LIMIT')
    )
    search_max_limit: int = Field(
        default=100, ge=1,
        validation_alias=AliasChoices('search_max_limit', 'SEARCH_MAX_LIMIT')
    )
    experiments_default_limit: int = Field(
        default=10, ge=1,
        validation_alias=AliasChoices('experiments_default_limit', 'EXPERIMENTS_DEFAULT_LIMIT')
    )
    experiments_max_limit: int = Field(
        default=50, ge=1,
        validation_alias=AliasChoices('experiments_max_limit', 'EXPERIMENTS_MAX_LIMIT')
    )

    # Health monitoring
    max_healthy_db_size_kb: int = Field(
        default=50000,
        validation_alias=AliasChoices('max_healthy_db_size_kb', 'MAX_HEALTHY_DB_SIZE_KB')
    )
    max_healthy_memory_mb: int = Field(
        default=500,
        validation_alias=AliasChoices('max_healthy_memory_mb', 'MAX_HEALTHY_MEMORY_MB')
    )
    max_healthy_response_time_ms: int = Field(
        default=5000,
        validation_alias=AliasChoices('max_healthy_response_time_ms', 'MAX_HEALTHY_RESPONSE_TIME_MS')
    )
    max_error_rate_percent: int = Field(
        default=5,
        validation_alias=AliasChoices('max_error_rate_percent', 'MAX_ERROR_RATE_PERCENT')
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @model_validator(mode='after')
    def clamp_pagination_defaults(self) -> 'RisenSettings':
        """Keep default page sizes within their ceilings."""
        if self.search_default_limit > self.search_max_limit:
            self.search_default_limit = self.search_max_limit
        if self.experiments_default_limit > self.experiments_max_limit:
            self.experiments_default_limit = self.experiments_max_limit
        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() in ('production', 'prod')

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug else self.log_level.upper()

    def security_issues(self) -> List[str]:
        """Report configuration values that weaken the server's safety limits."""
        issues = []

        if self.max_template_size > 50000:
            issues.append("MAX_TEMPLATE_SIZE is dangerously large (>50KB)")

        if self.max_response_size > 10000:
            issues.append("MAX_RESPONSE_SIZE is dangerously large (>10KB)")

        if self.enable_error_details and self.is_production:
            issues.append("Error details should not be enabled in production")

        return issues

    def security_recommendations(self) -> List[str]:
        return [
            "Set ENVIRONMENT=production for production deployments",
            "Use a secure database path outside any shared or web-served directory",
            "Enable only necessary debug features",
            "Monitor security limits and adjust based on usage",
            "Regularly review and update security configuration",
        ]


# Global settings instance
_settings: Optional[RisenSettings] = None


def get_settings() -> RisenSettings:
    """Get global settings instance."""
    global _settings

    if _settings is None:
        _settings = RisenSettings()
        logger.debug("Configuration loaded")

    return _settings


def reload_settings() -> RisenSettings:
    """Reload settings from the environment."""
    global _settings
    _settings = None
    return get_settings()

"""Configuration validation utilities."""

from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class ConfigValidator:
    """Validates configuration parameters."""

    VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

    @staticmethod
    def validate_remote_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate backend connection parameters."""
        errors = []

        if "base_url" in params:
            value = params["base_url"]
            parsed = urlparse(value) if isinstance(value, str) else None
            if parsed is None or parsed.scheme not in ("http", "https") or not parsed.netloc:
                errors.append(ValidationError(
                    field="remote.base_url",
                    message="Must be an absolute http(s) URL",
                    value=value
                ))

        if "timeout_seconds" in params:
            value = params["timeout_seconds"]
            if not _is_number(value) or value <= 0:
                errors.append(ValidationError(
                    field="remote.timeout_seconds",
                    message="Must be a positive number",
                    value=value
                ))

        if "user_agent" in params:
            value = params["user_agent"]
            if not isinstance(value, str) or not value:
                errors.append(ValidationError(
                    field="remote.user_agent",
                    message="Must be a non-empty string",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_breaker_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate circuit breaker parameters."""
        errors = []

        if "failure_threshold" in params:
            value = params["failure_threshold"]
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                errors.append(ValidationError(
                    field="breaker.failure_threshold",
                    message="Must be a positive integer",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_cache_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate local cache parameters."""
        errors = []

        for name in ("storage_path", "storage_key"):
            if name in params:
                value = params[name]
                if not isinstance(value, str) or not value.strip():
                    errors.append(ValidationError(
                        field=f"cache.{name}",
                        message="Must be a non-empty string",
                        value=value
                    ))

        return errors

    @staticmethod
    def validate_classifier_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate error classifier parameters."""
        errors = []

        for name in ("save_noop_patterns", "unsave_noop_patterns"):
            if name in params:
                value = params[name]
                if (not isinstance(value, (list, tuple))
                        or not all(isinstance(p, str) and p for p in value)):
                    errors.append(ValidationError(
                        field=f"classifier.{name}",
                        message="Must be a list of non-empty strings",
                        value=value
                    ))

        if "permanent_status_codes" in params:
            value = params["permanent_status_codes"]
            if (not isinstance(value, (list, tuple))
                    or not all(isinstance(c, int) and 400 <= c <= 599 for c in value)):
                errors.append(ValidationError(
                    field="classifier.permanent_status_codes",
                    message="Must be a list of HTTP error status codes (400-599)",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_reconciliation_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate reconciliation parameters."""
        errors = []

        if "stale_after_seconds" in params:
            value = params["stale_after_seconds"]
            if not _is_number(value) or value < 0:
                errors.append(ValidationError(
                    field="reconciliation.stale_after_seconds",
                    message="Must be a non-negative number",
                    value=value
                ))

        return errors

    @classmethod
    def validate_logging_params(cls, params: dict[str, Any]) -> list[ValidationError]:
        """Validate logging parameters."""
        errors = []

        if "level" in params:
            value = params["level"]
            if not isinstance(value, str) or value.upper() not in cls.VALID_LOG_LEVELS:
                errors.append(ValidationError(
                    field="logging.level",
                    message=f"Must be one of {', '.join(cls.VALID_LOG_LEVELS)}",
                    value=value
                ))

        if "format_json" in params:
            value = params["format_json"]
            if not isinstance(value, bool):
                errors.append(ValidationError(
                    field="logging.format_json",
                    message="Must be a boolean",
                    value=value
                ))

        return errors

    @classmethod
    def validate_config(cls, config: dict[str, Any]) -> list[ValidationError]:
        """Validate a complete merged configuration dictionary."""
        validators = {
            "remote": cls.validate_remote_params,
            "breaker": cls.validate_breaker_params,
            "cache": cls.validate_cache_params,
            "classifier": cls.validate_classifier_params,
            "reconciliation": cls.validate_reconciliation_params,
            "logging": cls.validate_logging_params,
        }

        errors = []
        for section, validator in validators.items():
            params = config.get(section, {})
            if not isinstance(params, dict):
                errors.append(ValidationError(
                    field=section,
                    message="Must be a mapping",
                    value=params
                ))
                continue
            errors.extend(validator(params))

        return errors

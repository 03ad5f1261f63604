"""Configuration loader with 3-tier parameter precedence."""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional, Union

import structlog
import yaml

from ..errors import ConfigurationError
from .defaults import SaveSyncConfig, get_default_config
from .validation import ConfigValidator, ValidationError

logger = structlog.get_logger(__name__)

CONFIG_FILENAME = "savesync.yaml"


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading with 3-tier precedence."""

    config_dir: Path
    defaults: SaveSyncConfig

    @classmethod
    def create(cls, config_dir: Optional[Union[str, Path]] = None) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_dir is None:
            config_dir = Path.cwd() / "config"

        return cls(
            config_dir=Path(config_dir),
            defaults=get_default_config(),
        )

    def load_file_config(self) -> dict[str, Any]:
        """Load overrides from ``savesync.yaml`` in the config directory."""
        config_file = self.config_dir / CONFIG_FILENAME

        if not config_file.exists():
            return {}

        try:
            with open(config_file) as f:
                file_config = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"Unable to read {config_file}: {e}",
                context={"path": str(config_file)}
            ) from e

        if file_config is None:
            return {}
        if not isinstance(file_config, dict):
            raise ConfigurationError(
                f"{config_file} must contain a mapping at the top level",
                context={"path": str(config_file)}
            )

        logger.debug("Loaded configuration file", path=str(config_file))
        return file_config

    def merge_config(self, overrides: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """
        Merge configuration with 3-tier precedence.

        Priority order:
        1. Explicit overrides (highest priority)
        2. ``savesync.yaml`` in the config directory
        3. Built-in defaults (lowest priority)
        """
        config = self._dataclass_to_dict(self.defaults)

        config = self._deep_merge(config, self.load_file_config())

        if overrides:
            config = self._deep_merge(config, overrides)

        return config

    def load(self, overrides: Optional[dict[str, Any]] = None) -> SaveSyncConfig:
        """Merge, validate and build a ``SaveSyncConfig``."""
        merged = self.merge_config(overrides)

        errors = self._unknown_keys(merged) + ConfigValidator.validate_config(merged)
        if errors:
            error_msgs = [f"{err.field}: {err.message} (got: {err.value!r})" for err in errors]
            logger.error("Configuration validation failed", errors=error_msgs)
            raise ConfigurationError(
                "Invalid saved-campaigns configuration",
                errors=error_msgs
            )

        return self._dict_to_config(merged)

    def _unknown_keys(self, config: dict[str, Any]) -> list[ValidationError]:
        """Report sections or settings that the defaults do not define."""
        known = self._dataclass_to_dict(self.defaults)
        errors = []

        for section, params in config.items():
            if section not in known:
                errors.append(ValidationError(
                    field=section, message="Unknown configuration section", value=params
                ))
                continue
            if isinstance(params, dict):
                for key, value in params.items():
                    if key not in known[section]:
                        errors.append(ValidationError(
                            field=f"{section}.{key}", message="Unknown setting", value=value
                        ))

        return errors

    def _dict_to_config(self, config: dict[str, Any]) -> SaveSyncConfig:
        """Build the nested frozen dataclasses from a merged dictionary."""
        sections = {}
        for section_field in fields(SaveSyncConfig):
            section_type = type(getattr(self.defaults, section_field.name))
            values = {}
            for key, value in config.get(section_field.name, {}).items():
                # YAML yields lists where the dataclasses hold tuples
                values[key] = tuple(value) if isinstance(value, list) else value
            sections[section_field.name] = section_type(**values)
        return SaveSyncConfig(**sections)

    def _dataclass_to_dict(self, obj: Any) -> dict[str, Any]:
        """Convert nested dataclasses to dictionary."""
        if hasattr(obj, '__dataclass_fields__'):
            result = {}
            for field_name, _field in obj.__dataclass_fields__.items():
                value = getattr(obj, field_name)
                if hasattr(value, '__dataclass_fields__'):
                    result[field_name] = self._dataclass_to_dict(value)
                else:
                    result[field_name] = value
            return result
        return obj  # type: ignore[no-any-return]

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

"""Configuration for the saved-campaigns sync engine."""

from .defaults import SaveSyncConfig, get_default_config
from .loader import ConfigLoader

__all__ = ["SaveSyncConfig", "get_default_config", "ConfigLoader"]

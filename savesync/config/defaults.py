"""Default configuration parameters for the saved-campaigns sync engine."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class RemoteParams:
    """Backend connection parameters."""
    base_url: str = "http://localhost:8080/api"
    timeout_seconds: float = 15.0                    # Fixed per-request timeout
    user_agent: str = "savesync/0.1"


@dataclass(frozen=True)
class BreakerParams:
    """Circuit breaker parameters."""
    failure_threshold: int = 3                       # Consecutive failures before Open


@dataclass(frozen=True)
class CacheParams:
    """Local persisted cache parameters."""
    storage_path: str = "saved_campaigns.db"         # ":memory:" for a throwaway store
    storage_key: str = "brandconnect_saved_campaigns"


@dataclass(frozen=True)
class ClassifierParams:
    """Error classification parameters."""
    save_noop_patterns: tuple[str, ...] = ("already saved",)
    unsave_noop_patterns: tuple[str, ...] = ("not found", "does not exist")
    permanent_status_codes: tuple[int, ...] = ()


@dataclass(frozen=True)
class ReconciliationParams:
    """Reconciliation parameters."""
    stale_after_seconds: int = 300


@dataclass(frozen=True)
class LoggingParams:
    """Logging output parameters."""
    level: str = "INFO"
    format_json: bool = False


@dataclass(frozen=True)
class SaveSyncConfig:
    """Complete engine configuration."""
    remote: RemoteParams = field(default_factory=RemoteParams)
    breaker: BreakerParams = field(default_factory=BreakerParams)
    cache: CacheParams = field(default_factory=CacheParams)
    classifier: ClassifierParams = field(default_factory=ClassifierParams)
    reconciliation: ReconciliationParams = field(default_factory=ReconciliationParams)
    logging: LoggingParams = field(default_factory=LoggingParams)


def get_default_config() -> SaveSyncConfig:
    """Get the default configuration instance."""
    return SaveSyncConfig(
        remote=RemoteParams(),
        breaker=BreakerParams(),
        cache=CacheParams(),
        classifier=ClassifierParams(),
        reconciliation=ReconciliationParams(),
        logging=LoggingParams(),
    )

"""Configuration models for the snapshot sync engine."""

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RetryPolicy(BaseModel):
    """Immutable timeout and retry settings for one resilient call.

    The default backoff is a constant delay between attempts. A
    ``backoff_multiplier`` above 1.0 turns it into exponential backoff
    capped at ``max_backoff_delay``.
    """

    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(
        default=4, ge=1, description="Total attempts per call (initial try included)"
    )
    per_attempt_timeout: float = Field(
        default=2.0, gt=0.0, description="Seconds one attempt may take before it times out"
    )
    backoff_delay: float = Field(
        default=1.0, ge=0.0, description="Seconds to wait before the next attempt"
    )
    backoff_multiplier: float = Field(
        default=1.0, ge=1.0, description="Growth factor applied to the delay per retry"
    )
    max_backoff_delay: float = Field(
        default=60.0, ge=0.0, description="Upper bound for a single exponential backoff delay"
    )

    @property
    def worst_case_seconds(self) -> float:
        """Upper bound on the wall time of one resilient call."""
        if self.backoff_multiplier == 1.0:
            delays = (self.max_attempts - 1) * self.backoff_delay
        else:
            delays = sum(
                min(self.backoff_delay * self.backoff_multiplier**i, self.max_backoff_delay)
                for i in range(self.max_attempts - 1)
            )
        return self.max_attempts * self.per_attempt_timeout + delays


class RemoteSourceConfig(BaseModel):
    """Configuration for the remote data source."""

    type: str = Field(default="http", description="Source type (http or simulated)")
    base_url: HttpUrl | None = Field(default=None, description="Base URL of the remote API")
    users_path: str = Field(default="/users", description="Path of the users endpoint")
    transactions_path: str = Field(
        default="/transactions", description="Path of the transactions endpoint"
    )
    auth_token: str | None = Field(default=None, description="Optional bearer token")
    request_timeout: float = Field(
        default=10.0, gt=0.0, description="Socket timeout for a single HTTP request"
    )
    failure_rate: float = Field(
        default=0.3, ge=0.0, le=1.0, description="Failure probability of the simulated source"
    )
    min_latency: float = Field(
        default=0.5, ge=0.0, description="Minimum latency of the simulated source in seconds"
    )
    max_latency: float = Field(
        default=1.5, ge=0.0, description="Maximum latency of the simulated source in seconds"
    )

    @model_validator(mode="after")
    def check_source_settings(self) -> "RemoteSourceConfig":
        """Require a base URL for HTTP sources and a sane latency range."""
        if self.type == "http" and self.base_url is None:
            raise ValueError("base_url is required when remote source type is 'http'")
        if self.min_latency > self.max_latency:
            raise ValueError("min_latency must not exceed max_latency")
        return self


class StorageConfig(BaseModel):
    """Configuration for snapshot persistence."""

    snapshot_path: str = Field(
        default="./data/snapshot.json", description="Location of the persisted snapshot"
    )


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    json_logs: bool = Field(
        default=True,
        description="If True, output JSON logs. If False, use console format.",
    )
    log_file: str | None = Field(
        default=None,
        description="Optional path to log file. If None, logs only to stdout.",
    )


class AppConfig(BaseSettings):
    """Main application configuration.

    This class uses pydantic-settings to load configuration from environment
    variables with the SYNC_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="SYNC_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    remote: RemoteSourceConfig
    retry: RetryPolicy = Field(default_factory=RetryPolicy)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

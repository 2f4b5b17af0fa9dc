from enum import StrEnum

from pydantic_settings import BaseSettings


class FreshnessSource(StrEnum):
    """Where the location-update throttle reads the time of the previous update."""

    TOKEN = "token"  # lastUpdated claim baked into the session token at login
    RECORD = "record"  # latest of the token claim and the stored user record


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    host: str = "127.0.0.1"
    port: int = 3000
    debug: bool = False
    environment: str = "development"  # "production" marks the session cookie as secure
    jwt_secret_key: str
    jwt_expires_hours: int = 24
    database_url: str | None = None  # MongoDB URL; in-memory user store when unset
    cors_origins: list[str] = []
    forwarded_allow_ips: str = "127.0.0.1"  # proxies trusted for X-Forwarded-For
    login_rate_limit: int = 5  # login attempts per window per client address
    login_rate_limit_window_ms: int = 60 * 1000
    rate_limit_max_keys: int = 500  # distinct keys tracked before the oldest is evicted
    location_min_interval_seconds: float = 10
    freshness_source: FreshnessSource = FreshnessSource.RECORD
    store_retry_attempts: int = 3

    model_config = {
        "env_file": [".env"],
        "env_prefix": "TRACEPOINT_",
        "extra": "ignore",
    }

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(".env", "optistats/.env"), env_ignore_empty=True, extra="ignore"
    )

    ENVIRONMENT: Literal["local", "staging", "development", "production"] = "local"
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str | None = None
    LOG_FILE: str = "optistats.log"

    # Logs are exported over OTLP/gRPC only when an endpoint is configured.
    OTEL_SDK_DISABLED: bool = False
    OTEL_SERVICE_NAME: str = "optistats"
    OTEL_EXPORTER_OTLP_ENDPOINT: str | None = None

    # Histogram cache sizing and freshness. None disables the policy.
    STATS_HISTOGRAM_CACHE_MAX_SIZE: int | None = 100_000
    STATS_HISTOGRAM_CACHE_EXPIRE_AFTER_WRITE_S: float | None = 60 * 60 * 24
    STATS_HISTOGRAM_CACHE_REFRESH_AFTER_WRITE_S: float | None = 60 * 10

    STATS_HISTOGRAM_TABLE: str = "_statistics_.histogram_statistics"
    STATS_SQL_DIALECT: str = "mysql"
    STATS_QUERY_TIMEOUT_S: int = 30
    STATS_TIMEZONE: str = "UTC"


settings = Settings()  # type: ignore

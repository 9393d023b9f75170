"""Environment-driven settings.

Read once by the host process (API startup or a script) and passed down;
components never read the environment themselves.
"""

import os

from pydantic import BaseModel, ConfigDict, Field


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Runtime configuration for the ledger and API."""

    model_config = ConfigDict(frozen=True)

    environment: str = "dev"
    table_prefix: str = "hostel-dev"
    region_name: str | None = None
    horizon_days: int = Field(default=30, ge=1)
    read_max_attempts: int = Field(default=4, ge=1)
    contention_max_retries: int = Field(default=5, ge=0)
    expose_error_details: bool = True
    log_level: str = "INFO"
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"]
    )

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables.

        Returns:
            Settings with defaults for anything unset
        """
        environment = os.getenv("ENVIRONMENT", "dev")
        cors = os.getenv("CORS_ORIGINS")
        kwargs = {}
        if cors:
            kwargs["cors_origins"] = [o.strip() for o in cors.split(",") if o.strip()]
        return cls(
            environment=environment,
            # Allow override via DYNAMODB_TABLE_PREFIX for testing
            table_prefix=os.getenv("DYNAMODB_TABLE_PREFIX", f"hostel-{environment}"),
            region_name=os.getenv("AWS_DEFAULT_REGION"),
            horizon_days=int(os.getenv("INVENTORY_HORIZON_DAYS", "30")),
            read_max_attempts=int(os.getenv("READ_MAX_ATTEMPTS", "4")),
            contention_max_retries=int(os.getenv("CONTENTION_MAX_RETRIES", "5")),
            expose_error_details=_env_bool("EXPOSE_ERROR_DETAILS", environment != "prod"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            **kwargs,
        )

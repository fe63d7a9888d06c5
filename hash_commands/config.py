"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - get_settings() is cached (lru_cache): single instance per process
    - run_method / route_method must have the "<namespace>:<qualifier>" shape

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults match the wire examples ("e:run", "e:route"), works out-of-the-box
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="HASH_COMMANDS_", case_sensitive=False,
    )

    # Dispatcher families
    run_method: str = "e:run"
    route_method: str = "e:route"

    @field_validator("run_method", "route_method")
    @classmethod
    def check_method_shape(cls, v: str) -> str:
        """A method is exactly two non-empty colon-delimited segments."""
        parts = v.split(":")
        if len(parts) != 2 or not all(parts):
            raise ValueError(f"method must look like 'ns:qualifier', got {v!r}")
        return v

    # API
    hash_max_length: int = 8_192
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()

"""Library Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - get_settings() is cached (lru_cache): one instance per process
    - stack_depth >= 1; log_format is "json" or "text"

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - FAULTCHAIN_ prefix: the host application owns the unprefixed namespace
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from faultchain.core.stack import STACK_DEPTH


class Settings(BaseSettings):
    """faultchain settings from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="FAULTCHAIN_", env_file=".env", extra="ignore",
        case_sensitive=False,
    )

    # Stack capture
    stack_depth: int = Field(default=STACK_DEPTH, ge=1)

    # Observability
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


@lru_cache
def get_settings() -> Settings:
    return Settings()

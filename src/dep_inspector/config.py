"""Runtime settings, read from the environment (``.env`` is loaded by the CLI)."""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PREFIX = "DEP_INSPECTOR_"


class Settings(BaseSettings):
    """Scanner and logging settings, from ``DEP_INSPECTOR_*`` variables."""

    log_level: str = "WARNING"
    max_concurrency: int = Field(default=8, ge=1)
    fail_fast: bool = False  # stop at the first file that fails to parse

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, env_ignore_empty=True, extra="ignore")

    @field_validator("log_level")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.strip().upper()


def load_settings() -> Settings:
    """Build ``Settings`` from the process environment.

    Raises ``pydantic.ValidationError`` when a variable holds a bad value.
    """
    return Settings()

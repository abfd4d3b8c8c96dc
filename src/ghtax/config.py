import os
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .tax_tables import DEFAULT_TABLES_DIR

BASE_DIR = Path.cwd()


class Settings(BaseSettings):
    env: str = Field(default="dev", description="Deployment environment")
    app_name: str = "Ghana Tax Calculator API"
    log_level: str = "INFO"
    default_tax_year: str = Field(default="2024", description="Tax year used when a caller does not pick one")
    tax_tables_dir: Path = Field(default=DEFAULT_TABLES_DIR, description="Directory holding <year>.json tables")
    default_working_days: int = Field(default=22, gt=0)

    model_config = SettingsConfigDict(env_prefix="GHTAX_", extra="ignore")

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_level(cls, value: str) -> str:
        return value.upper() if isinstance(value, str) else value

    @field_validator("default_tax_year", mode="before")
    @classmethod
    def year_as_string(cls, value) -> str:
        return str(value)


@lru_cache
def get_settings() -> Settings:
    return Settings(_env_file=get_settings_env_file())


def get_settings_env_file() -> str | None:
    """Resolve environment-specific env file if it exists."""
    env = os.getenv("GHTAX_ENV", "dev")
    env_file = BASE_DIR / f".env.{env}"
    default_file = BASE_DIR / ".env"
    if env_file.exists():
        return str(env_file)
    if default_file.exists():
        return str(default_file)
    return None

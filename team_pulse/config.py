"""
Configuration for the Team Pulse service.

Values are read from environment variables prefixed with ``TEAM_PULSE_``
(or a local ``.env`` file), e.g. ``TEAM_PULSE_DATABASE_PATH=/data/pulse.db``.
"""

from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from the environment."""

    database_path: str = "team-pulse.db"
    api_prefix: str = "/api"
    cors_origins: Annotated[list[str], NoDecode] = ["http://localhost:5173"]
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    model_config = SettingsConfigDict(
        env_prefix="TEAM_PULSE_", env_file=".env", env_file_encoding="utf-8"
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_origins(cls, v):
        # Comma-separated in the environment
        if isinstance(v, str):
            return [i.strip() for i in v.split(",") if i.strip()]
        return v


settings = Settings()

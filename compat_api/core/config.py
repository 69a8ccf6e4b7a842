"""Application configuration using Pydantic Settings"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    model_config = SettingsConfigDict(
        env_file=Path(__file__).parent.parent.parent / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # GitHub (canonical document + issue threads)
    github_token: str = Field(
        default="", description="Fine-grained PAT with Contents + Issues access"
    )
    github_owner: str = Field(default="xenios-jp", description="Repository owner")
    github_repo: str = Field(default="xenios.jp", description="Repository name")
    compat_path: str = Field(
        default="data/compatibility.json", description="Path of the compatibility document"
    )
    branch: str = Field(default="main", description="Branch holding the compatibility document")

    # App channel
    api_key: str = Field(default="", description="Shared secret embedded in the app")

    # Discord
    discord_webhook: str = Field(default="", description="Webhook URL of the reports channel")
    discord_application_id: str = Field(default="", description="Discord application ID")
    discord_public_key: str = Field(default="", description="Discord public key (Ed25519, hex)")
    discord_board_message_id: str = Field(
        default="", description="Webhook message id of the rolling status board"
    )
    discord_bot_token: str = Field(
        default="", description="Bot token, only used to register slash commands"
    )
    discord_invite_url: str = Field(default="https://discord.gg/QwcTtNKTGf")

    # Interaction sessions
    session_ttl_seconds: int = Field(default=600, description="Pending /report session lifetime")
    session_max_entries: int = Field(default=1024, description="Pending /report session capacity")

    # Public URLs
    site_url: str = Field(default="https://xenios.jp", description="Public website URL")
    emulator_repo_url: str = Field(default="https://github.com/xenios-jp/XeniOS")

    # Environment
    environment: str = Field(default="development", description="Environment name")
    log_level: str = Field(default="INFO", description="Logging level")

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid logging level"""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            logger.warning(f"Invalid log level '{v}', defaulting to INFO")
            return "INFO"
        return v_upper

    @field_validator("site_url", "emulator_repo_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def repo_full_name(self) -> str:
        return f"{self.github_owner}/{self.github_repo}"

    @property
    def compatibility_url(self) -> str:
        """Public compatibility list on the website"""
        return f"{self.site_url}/compatibility"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.environment.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()

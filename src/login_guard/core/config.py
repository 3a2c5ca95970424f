"""Configuration handling for login guard."""

from pathlib import Path

import toml
from pydantic import BaseModel, Field

from .errors import ConfigError
from .events import RemediationMode


class TelegramConfig(BaseModel):
    """Telegram bot credentials and target chat."""

    api_key: str = ""
    chat_id: int | None = None
    poll_timeout_seconds: int = Field(default=30, gt=0)


class VerificationConfig(BaseModel):
    """Configuration for the operator verification wait."""

    timeout_seconds: int = Field(default=120, gt=0)


class RemediationConfig(BaseModel):
    """Configuration for the action taken on denied or unanswered logins."""

    default_mode: RemediationMode = RemediationMode.LOCKDOWN
    password_length: int = Field(default=16, ge=16)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    file: str = ""
    max_size_mb: int = 10
    backup_count: int = 5


class Config(BaseModel):
    """Main configuration class."""

    telegram: TelegramConfig = TelegramConfig()
    verification: VerificationConfig = VerificationConfig()
    remediation: RemediationConfig = RemediationConfig()
    logging: LoggingConfig = LoggingConfig()

    @classmethod
    def load(cls, config_path: Path) -> "Config":
        """Load configuration from TOML file."""
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path) as f:
            data = toml.load(f)

        return cls(**data)

    def require_messaging(self) -> None:
        """Fail before any network action when the bot cannot be used."""
        if not self.telegram.api_key:
            raise ConfigError("Telegram API key not configured")
        if not self.telegram.chat_id:
            raise ConfigError("Telegram chat ID not configured")

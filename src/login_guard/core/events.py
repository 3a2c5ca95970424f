"""Event definitions for login verification."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, model_validator


class LoginEvent(BaseModel):
    """Represents the login being verified."""

    model_config = ConfigDict(frozen=True)

    username: str
    hostname: str
    timestamp: datetime
    source_ip: str = "unknown location"
    access_method: str = "unknown"

    def summary_lines(self) -> str:
        return (
            f"User: {self.username}\n"
            f"Host: {self.hostname}\n"
            f"Time: {format_timestamp(self.timestamp)}\n"
            f"IP: {self.source_ip}\n"
            f"Access: {self.access_method}"
        )


class Outcome(str, Enum):
    CONFIRMED = "confirmed"
    DENIED = "denied"
    TIMED_OUT = "timed_out"


class RemediationMode(str, Enum):
    LOCKDOWN = "lockdown"
    WIPE = "wipe"

    @property
    def action_description(self) -> str:
        if self is RemediationMode.WIPE:
            return "Wiping user data"
        return "Locking down account and resetting credentials"


class VerificationPrompt(BaseModel):
    """A sent verification message awaiting exactly one resolution."""

    event: LoginEvent
    message_id: int
    created_at: datetime
    deadline: datetime
    outcome: Outcome | None = None

    @property
    def timeout_seconds(self) -> float:
        return (self.deadline - self.created_at).total_seconds()

    @property
    def resolved(self) -> bool:
        return self.outcome is not None

    def resolve(self, outcome: Outcome) -> bool:
        """Record the outcome; later calls are ignored and return False."""
        if self.outcome is not None:
            return False
        self.outcome = outcome
        return True


class Credentials(BaseModel):
    """Freshly generated recovery credentials, held in memory only."""

    private_key: str
    public_key: str
    password: str

    def __repr__(self) -> str:
        return "Credentials(<redacted>)"

    __str__ = __repr__


class RemediationResult(BaseModel):
    """Result of a Lockdown or Wipe run."""

    mode: RemediationMode
    username: str
    credentials: Credentials | None = None
    success: bool = True
    error: str | None = None
    warnings: list[str] = []

    @model_validator(mode="after")
    def _wipe_has_no_credentials(self) -> "RemediationResult":
        if self.mode is RemediationMode.WIPE and self.credentials is not None:
            raise ValueError("wipe results never carry credentials")
        return self


def format_timestamp(timestamp: datetime) -> str:
    """Format a timestamp the way it is shown to the operator."""
    return timestamp.strftime("%Y-%m-%d %H:%M:%S %Z").rstrip()

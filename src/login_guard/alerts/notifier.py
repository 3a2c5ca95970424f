"""Verification prompt sent to the operator."""

import logging
from datetime import datetime, timedelta

from ..core.errors import NetworkError
from ..core.events import LoginEvent, VerificationPrompt, format_timestamp

logger = logging.getLogger(__name__)

YES = "yes"
NO = "no"


class Notifier:
    """Ask the operator whether a login was theirs."""

    def __init__(self, backend, timeout_seconds: int = 120):
        self.backend = backend
        self.timeout_seconds = timeout_seconds

    def _format_prompt(self, event: LoginEvent) -> str:
        return (
            f"Login detected for user {event.username} on {event.hostname}.\n"
            f"Time: {format_timestamp(event.timestamp)}\n"
            f"IP: {event.source_ip}\n"
            f"Access: {event.access_method}\n\n"
            "Was this you?"
        )

    async def send_prompt(self, event: LoginEvent) -> VerificationPrompt:
        """Send the Yes/No prompt. NetworkError is fatal to the run."""
        message_id = await self.backend.send_message(
            self._format_prompt(event), buttons=[("Yes", YES), ("No", NO)]
        )
        created_at = datetime.now().astimezone()
        logger.info(
            "Verification prompt %s sent for %s, waiting %ss",
            message_id,
            event.username,
            self.timeout_seconds,
        )
        return VerificationPrompt(
            event=event,
            message_id=message_id,
            created_at=created_at,
            deadline=created_at + timedelta(seconds=self.timeout_seconds),
        )

    async def withdraw(self, prompt: VerificationPrompt):
        """Remove the prompt so its buttons cannot be pressed again."""
        try:
            await self.backend.delete_message(prompt.message_id)
        except NetworkError as e:
            logger.warning("Failed to delete prompt %s: %s", prompt.message_id, e)

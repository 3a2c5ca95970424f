"""Outcome and result messages sent back to the operator."""

import logging

from ..core.events import LoginEvent, Outcome, RemediationMode, RemediationResult

logger = logging.getLogger(__name__)


class Reporter:
    """Report verification outcomes and remediation results."""

    def __init__(self, backend, test_mode: bool = False):
        self.backend = backend
        self.test_mode = test_mode

    async def _send(self, text: str, parse_mode: str | None = None):
        if self.test_mode:
            text = f"[TEST MODE] {text}"
        await self.backend.send_message(text, parse_mode=parse_mode)

    async def report_confirmed(self, event: LoginEvent):
        logger.info("Login of %s confirmed by operator", event.username)
        await self._send(
            f"✅ LOGIN CONFIRMED AS AUTHORIZED\n\n{event.summary_lines()}"
        )

    def _format_alert_message(
        self,
        event: LoginEvent,
        mode: RemediationMode,
        outcome: Outcome,
        timeout_seconds: int,
    ) -> str:
        if outcome is Outcome.TIMED_OUT:
            return (
                f"⚠️ VERIFICATION TIMEOUT ({timeout_seconds} seconds) ⚠️\n\n"
                f"{event.summary_lines()}\n\n"
                f"For security, {mode.action_description.lower()}..."
            )
        return (
            "⚠️ UNAUTHORIZED LOGIN DETECTED ⚠️\n\n"
            f"{event.summary_lines()}\n\n"
            f"{mode.action_description}..."
        )

    async def report_alert(
        self,
        event: LoginEvent,
        mode: RemediationMode,
        outcome: Outcome,
        timeout_seconds: int,
    ):
        """Announce the remediation that is about to run."""
        logger.warning(
            "ALERT: login of %s %s, starting %s",
            event.username,
            outcome.value,
            mode.value,
        )
        await self._send(self._format_alert_message(event, mode, outcome, timeout_seconds))

    def _format_credentials_message(self, result: RemediationResult, hostname: str) -> str:
        credentials = result.credentials
        message = (
            "🔐 *ACCOUNT RECOVERY CREDENTIALS*\n\n"
            "User account has been locked down. "
            "Use these credentials to regain access:\n\n"
            f"🔑 *New SSH Private Key:*\n```\n{credentials.private_key.rstrip()}\n```\n\n"
            f"🔐 *New Password:*\n`{credentials.password}`\n\n"
            "To use the new SSH key:\n"
            "1. Save the key to a file (e.g., recovery\\_key)\n"
            "2. Set permissions: `chmod 600 recovery_key`\n"
            f"3. Connect: `ssh -i recovery_key {result.username}@{hostname}`\n"
            f"4. Re-enable password login: `sudo usermod -U {result.username}`"
        )
        if result.warnings:
            warnings = "\n".join(result.warnings).replace("`", "'")
            message += f"\n\nWarnings:\n```\n{warnings}\n```"
        return message

    async def report_result(self, result: RemediationResult, hostname: str):
        """Deliver the remediation result.

        For Lockdown this is the only message that carries the new secrets.
        """
        if result.mode is RemediationMode.LOCKDOWN:
            if result.credentials is None:
                logger.error("Lockdown result for %s has no credentials", result.username)
                await self._send(
                    f"🔒 User {result.username} has been locked down, "
                    "but no recovery credentials are available."
                )
                return

            await self._send(
                self._format_credentials_message(result, hostname), parse_mode="Markdown"
            )
            logger.info("Recovery credentials for %s delivered", result.username)
            return

        await self._send(
            f"🗑️ User {result.username} and its home directory have been deleted."
        )

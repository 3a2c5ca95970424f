"""Account remediation after a denied or unanswered login."""

import logging

from ..core.errors import HardAccountError, SoftAccountError
from ..core.events import Outcome, RemediationMode, RemediationResult
from .credentials import DEFAULT_PASSWORD_LENGTH, CredentialForge
from .system import SystemActions

logger = logging.getLogger(__name__)


class Remediator:
    """
    Run Lockdown or Wipe against a local account.

    Prerequisite and irreversible steps (credential generation, the
    authorized_keys write, account deletion) stop the sequence. Ownership,
    password and lock failures are logged and collected as warnings.
    Session termination is best-effort and never reported.
    """

    def __init__(
        self,
        actions: SystemActions,
        forge: CredentialForge | None = None,
        password_length: int = DEFAULT_PASSWORD_LENGTH,
    ):
        self.actions = actions
        self.forge = forge or CredentialForge()
        self.password_length = password_length

    @staticmethod
    def should_remediate(outcome: Outcome) -> bool:
        return outcome is not Outcome.CONFIRMED

    async def remediate(self, username: str, mode: RemediationMode) -> RemediationResult:
        """
        Execute the remediation for ``username``.

        Raises:
            GenerationError: Lockdown credentials could not be generated;
                nothing on the system has been changed.

        Returns:
            RemediationResult, with ``success`` False when a hard step failed
        """
        if mode is RemediationMode.WIPE:
            return await self._wipe(username)
        return await self._lockdown(username)

    async def _soft_step(self, step, warnings: list[str], *args):
        try:
            await step(*args)
        except SoftAccountError as e:
            logger.warning("Warning: %s", e)
            warnings.append(str(e))

    async def _kill_sessions(self, username: str):
        try:
            await self.actions.kill_sessions(username)
        except SoftAccountError as e:
            logger.debug("Ignoring session kill failure: %s", e)

    async def _lockdown(self, username: str) -> RemediationResult:
        logger.info("Locking down user %s", username)

        credentials = await self.forge.forge(username, self.password_length)
        warnings: list[str] = []

        try:
            ssh_dir = await self.actions.install_authorized_key(
                username, credentials.public_key
            )
        except HardAccountError as e:
            logger.error("Lockdown of %s aborted: %s", username, e)
            return RemediationResult(
                mode=RemediationMode.LOCKDOWN,
                username=username,
                success=False,
                error=str(e),
            )

        await self._soft_step(self.actions.fix_ownership, warnings, username, ssh_dir)
        await self._soft_step(
            self.actions.set_password, warnings, username, credentials.password
        )
        await self._kill_sessions(username)
        await self._soft_step(self.actions.lock_password, warnings, username)

        logger.info("Lockdown of %s complete (%d warnings)", username, len(warnings))
        return RemediationResult(
            mode=RemediationMode.LOCKDOWN,
            username=username,
            credentials=credentials,
            warnings=warnings,
        )

    async def _wipe(self, username: str) -> RemediationResult:
        logger.info("Wiping user data for %s", username)

        await self._kill_sessions(username)
        try:
            await self.actions.delete_account(username)
        except HardAccountError as e:
            logger.error("Wipe of %s failed: %s", username, e)
            return RemediationResult(
                mode=RemediationMode.WIPE, username=username, success=False, error=str(e)
            )

        logger.info("Wiped user %s", username)
        return RemediationResult(mode=RemediationMode.WIPE, username=username)

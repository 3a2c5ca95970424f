"""Verification and remediation flow for a single login."""

import logging

from ..alerts.notifier import Notifier
from ..alerts.reporter import Reporter
from ..remediation.credentials import CredentialForge
from ..remediation.remediator import Remediator
from ..remediation.system import SystemActions
from ..verification.waiter import DecisionWaiter
from .config import Config
from .errors import HardAccountError
from .events import LoginEvent, Outcome, RemediationMode

logger = logging.getLogger(__name__)


class LoginVerification:
    """Ask, wait, and remediate once for one login event."""

    def __init__(
        self,
        config: Config,
        backend,
        actions: SystemActions,
        forge: CredentialForge | None = None,
        test_mode: bool = False,
    ):
        self.config = config
        self.timeout_seconds = config.verification.timeout_seconds
        self.notifier = Notifier(backend, timeout_seconds=self.timeout_seconds)
        self.waiter = DecisionWaiter(backend)
        self.remediator = Remediator(
            actions, forge, password_length=config.remediation.password_length
        )
        self.reporter = Reporter(backend, test_mode=test_mode)

    async def run(self, event: LoginEvent, mode: RemediationMode | None = None) -> Outcome:
        """Verify the login and remediate unless the operator confirms it."""
        mode = mode or self.config.remediation.default_mode
        logger.info(
            "Verifying %s login of %s on %s (mode: %s)",
            event.access_method,
            event.username,
            event.hostname,
            mode.value,
        )

        prompt = await self.notifier.send_prompt(event)
        try:
            outcome = await self.waiter.wait(prompt, self.timeout_seconds)
        finally:
            await self.notifier.withdraw(prompt)

        if not self.remediator.should_remediate(outcome):
            await self.reporter.report_confirmed(event)
            return outcome

        await self.reporter.report_alert(event, mode, outcome, self.timeout_seconds)

        result = await self.remediator.remediate(event.username, mode)
        if not result.success:
            # TODO: tell the operator when a hard step fails instead of only exiting non-zero
            raise HardAccountError(
                f"failed to execute security action after {outcome.value}: {result.error}"
            )

        await self.reporter.report_result(result, event.hostname)
        return outcome

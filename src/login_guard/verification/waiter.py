"""Race between the operator's answer and the verification deadline."""

import asyncio
import logging
from contextlib import aclosing

from ..alerts.notifier import NO, YES
from ..core.errors import NetworkError
from ..core.events import Outcome, VerificationPrompt

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 120

_ANSWERS = {YES: Outcome.CONFIRMED, NO: Outcome.DENIED}


class DecisionWaiter:
    """Wait for a Yes/No answer to a prompt, bounded by a deadline."""

    def __init__(self, backend):
        self.backend = backend

    async def wait(
        self, prompt: VerificationPrompt, timeout_seconds: float | None = None
    ) -> Outcome:
        """Resolve the prompt exactly once as Confirmed, Denied or TimedOut."""
        if timeout_seconds is None:
            timeout_seconds = prompt.timeout_seconds or DEFAULT_TIMEOUT_SECONDS
        if timeout_seconds <= 0:
            raise ValueError(f"timeout must be positive, got {timeout_seconds}")

        listener = asyncio.create_task(self.listen_for_answer(prompt))
        timer = asyncio.create_task(asyncio.sleep(timeout_seconds))

        try:
            done, _ = await asyncio.wait(
                {listener, timer}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for task in (listener, timer):
                task.cancel()
            await asyncio.gather(listener, timer, return_exceptions=True)

        if listener in done:
            # re-raises NetworkError from the listener
            outcome = listener.result()
        else:
            outcome = Outcome.TIMED_OUT
            logger.warning(
                "No answer for prompt %s within %ss", prompt.message_id, timeout_seconds
            )

        if not prompt.resolve(outcome):
            logger.debug("Prompt %s already resolved, ignoring %s", prompt.message_id, outcome)
            return prompt.outcome

        logger.info("Prompt %s resolved: %s", prompt.message_id, outcome.value)
        return outcome

    async def listen_for_answer(self, prompt: VerificationPrompt) -> Outcome:
        """Return the first Yes/No answer addressed to this prompt."""
        async with aclosing(self.backend.callbacks()) as callbacks:
            async for callback in callbacks:
                if callback.message_id != prompt.message_id:
                    logger.debug(
                        "Ignoring callback for message %s", callback.message_id
                    )
                    continue

                outcome = _ANSWERS.get(callback.data)
                if outcome is None:
                    logger.debug("Ignoring unexpected callback data %r", callback.data)
                    continue

                try:
                    await self.backend.answer_callback(callback.callback_id)
                except NetworkError as e:
                    logger.warning("Failed to acknowledge callback: %s", e)

                return outcome

        raise NetworkError("Callback stream ended before an answer arrived")

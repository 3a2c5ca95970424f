"""Telegram Bot API messaging backend."""

import logging
from collections.abc import AsyncIterator
from typing import Any, NamedTuple

import aiohttp

from ..core.errors import NetworkError

logger = logging.getLogger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org"


class CallbackEvent(NamedTuple):
    """An inline button press."""

    callback_id: str
    message_id: int | None
    data: str


class TelegramBackend:
    """Send messages and receive button callbacks through a Telegram bot."""

    def __init__(
        self,
        api_key: str,
        chat_id: int,
        poll_timeout_seconds: int = 30,
        base_url: str = TELEGRAM_API_URL,
    ):
        self.chat_id = chat_id
        self.poll_timeout_seconds = poll_timeout_seconds
        self._base_url = f"{base_url.rstrip('/')}/bot{api_key}"
        self._session: aiohttp.ClientSession | None = None
        self._offset = 0

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            # long polls must not be cut short by the client timeout
            timeout = aiohttp.ClientTimeout(total=self.poll_timeout_seconds + 15)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def close(self):
        """Close the underlying HTTP session."""
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def _call(self, method: str, payload: dict[str, Any]) -> Any:
        session = await self._get_session()
        try:
            async with session.post(f"{self._base_url}/{method}", json=payload) as response:
                try:
                    body = await response.json(content_type=None)
                except ValueError:
                    body = None
                if response.status != 200 or not body or not body.get("ok"):
                    description = (body or {}).get("description", "no description")
                    raise NetworkError(
                        f"Telegram {method} failed ({response.status}): {description}"
                    )
                return body.get("result")
        except aiohttp.ClientError as e:
            raise NetworkError(f"Telegram {method} failed: {e}") from e
        except TimeoutError as e:
            raise NetworkError(f"Telegram {method} timed out") from e

    async def send_message(
        self,
        text: str,
        parse_mode: str | None = None,
        buttons: list[tuple[str, str]] | None = None,
    ) -> int:
        """Send a message to the configured chat and return its id."""
        payload: dict[str, Any] = {"chat_id": self.chat_id, "text": text}
        if parse_mode:
            payload["parse_mode"] = parse_mode
        if buttons:
            payload["reply_markup"] = {
                "inline_keyboard": [
                    [{"text": label, "callback_data": data} for label, data in buttons]
                ]
            }

        result = await self._call("sendMessage", payload)
        return result["message_id"]

    async def delete_message(self, message_id: int):
        await self._call(
            "deleteMessage", {"chat_id": self.chat_id, "message_id": message_id}
        )

    async def answer_callback(self, callback_id: str, text: str = ""):
        await self._call(
            "answerCallbackQuery", {"callback_query_id": callback_id, "text": text}
        )

    async def callbacks(self) -> AsyncIterator[CallbackEvent]:
        """Long-poll for inline button presses."""
        while True:
            updates = await self._call(
                "getUpdates",
                {
                    "offset": self._offset,
                    "timeout": self.poll_timeout_seconds,
                    "allowed_updates": ["callback_query"],
                },
            )

            for update in updates or []:
                self._offset = max(self._offset, update["update_id"] + 1)

                query = update.get("callback_query")
                if not query:
                    continue

                message = query.get("message") or {}
                logger.debug(
                    "Callback %s for message %s", query.get("id"), message.get("message_id")
                )
                yield CallbackEvent(
                    callback_id=query.get("id", ""),
                    message_id=message.get("message_id"),
                    data=query.get("data", ""),
                )

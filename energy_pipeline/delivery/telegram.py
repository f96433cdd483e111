"""Telegram Bot API client and operator notifier."""

from __future__ import annotations

from typing import Any

import httpx

from ..config.constants import DEFAULT_REQUEST_TIMEOUT, TELEGRAM_API_BASE
from ..core.errors import PipelineError, RateLimitError
from ..observability.logger import get_logger
from ..sources.http import check_response, translate_transport_error
from .formatter import split_message

logger = get_logger(__name__)

SOURCE = "telegram"


class TelegramClient:
    """Minimal async client for sendMessage.

    Usage:
        async with TelegramClient(bot_token) as telegram:
            await telegram.send_message(chat_id, "hello")
    """

    def __init__(
        self,
        bot_token: str,
        *,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.bot_token = bot_token
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> TelegramClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    @property
    def _send_url(self) -> str:
        return f"{TELEGRAM_API_BASE}/bot{self.bot_token}/sendMessage"

    async def send_message(
        self,
        chat_id: str,
        text: str,
        *,
        parse_mode: str | None = "Markdown",
    ) -> None:
        """Send one message, split into chunks when it exceeds Telegram's limit.

        Raises:
            RateLimitError: Telegram flood control (429), with retry_after
            PipelineError: any other rejection or transport failure
        """
        for chunk in split_message(text):
            await self._send_chunk(chat_id, chunk, parse_mode)

    async def _send_chunk(self, chat_id: str, text: str, parse_mode: str | None) -> None:
        payload: dict[str, Any] = {
            "chat_id": chat_id,
            "text": text,
            "disable_web_page_preview": True,
        }
        if parse_mode:
            payload["parse_mode"] = parse_mode

        try:
            response = await self.client.post(self._send_url, json=payload)
        except httpx.HTTPError as e:
            raise translate_transport_error(e, SOURCE) from e

        if response.status_code == 429:
            retry_after = _json(response).get("parameters", {}).get("retry_after")
            raise RateLimitError(
                "Telegram flood control",
                retry_after=float(retry_after) if retry_after is not None else None,
                source=SOURCE,
            )

        check_response(response, SOURCE)

        body = _json(response)
        if body and not body.get("ok", True):
            raise PipelineError(
                f"Telegram rejected message: {body.get('description', 'unknown error')}",
                source=SOURCE,
            )


def _json(response: httpx.Response) -> dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


class TelegramNotifier:
    """Operator channel: a single admin chat."""

    def __init__(self, client: TelegramClient, chat_id: str) -> None:
        self.client = client
        self.chat_id = chat_id

    async def send(self, message: str) -> None:
        await self.client.send_message(self.chat_id, message)
        logger.debug("Admin message sent", extra={"chat_id": self.chat_id})

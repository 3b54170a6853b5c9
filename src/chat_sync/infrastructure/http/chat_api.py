"""HTTP client for the chat backend: history reads and outbound actions."""
from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from chat_sync.application.exceptions import UpstreamError
from chat_sync.config import Settings
from chat_sync.domain.entities.message import Message
from chat_sync.infrastructure.push.mappers import history_item_to_message
from chat_sync.infrastructure.push.protocol import HistoryItem

logger = logging.getLogger(__name__)


class HttpChatApi:
    """Implements application.ports.history.HistoryFetcher and
    application.ports.actions.MessageActions."""

    def __init__(
        self,
        base_url: str,
        *,
        token: str = "",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> HttpChatApi:
        return cls(
            settings.CHAT_API_URL,
            token=settings.CHAT_API_TOKEN,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_history(self, user_id: str, peer_id: str) -> list[Message]:
        if not user_id or not peer_id:
            logger.warning("History fetch skipped: user_id=%r peer_id=%r", user_id, peer_id)
            return []

        try:
            resp = await self._client.get(f"/messages/{user_id}/with/{peer_id}")
            resp.raise_for_status()
            raw = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("History fetch for %s failed: %s", peer_id, exc)
            return []

        if not isinstance(raw, list):
            logger.warning("History for %s is not a list, got %s", peer_id, type(raw).__name__)
            return []

        messages: list[Message] = []
        for entry in raw:
            try:
                item = HistoryItem.model_validate(entry)
            except PydanticValidationError as exc:
                logger.warning("Skipping malformed history item for %s: %s", peer_id, exc)
                continue
            messages.append(history_item_to_message(item, user_id, peer_id))
        return messages

    async def delete_for_all(self, message_id: str) -> None:
        await self._send("DELETE", f"/messages/{message_id}")

    async def delete_for_me(self, user_id: str, message_id: str) -> None:
        await self._send("DELETE", f"/users/{user_id}/messages/{message_id}")

    async def edit(self, message_id: str, text: str) -> None:
        await self._send("PUT", f"/messages/{message_id}", json={"message_text": text})

    async def _send(self, method: str, url: str, **kwargs: Any) -> None:
        try:
            resp = await self._client.request(method, url, **kwargs)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise UpstreamError(f"{method} {url}: {exc}") from exc
        logger.debug("%s %s -> %d", method, url, resp.status_code)

from __future__ import annotations

from typing import Protocol

from chat_sync.domain.entities.message import Message


class HistoryFetcher(Protocol):
    async def fetch_history(self, user_id: str, peer_id: str) -> list[Message]:
        """Return the conversation with ``peer_id`` in server order.

        Implementations must not raise on transport failures: an unreachable
        or failing backend yields an empty list.
        """
        ...

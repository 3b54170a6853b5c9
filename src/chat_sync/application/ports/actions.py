from __future__ import annotations

from typing import Protocol


class MessageActions(Protocol):
    """Outbound requests for changes the server must confirm."""

    async def delete_for_all(self, message_id: str) -> None: ...

    async def delete_for_me(self, user_id: str, message_id: str) -> None: ...

    async def edit(self, message_id: str, text: str) -> None: ...

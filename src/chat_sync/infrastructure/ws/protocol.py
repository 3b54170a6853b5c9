"""WebSocket message envelope models."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class WsOutbound(BaseModel):
    """Server → UI client."""

    type: str  # conversation.<reason> | ping
    data: dict[str, Any] = {}

"""JSON envelope codec for the push channel: ``{"event": <name>, "data": {...}}``."""
from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from chat_sync.application.exceptions import MalformedEventError


class _Encoder(json.JSONEncoder):
    def default(self, o: object) -> Any:
        if isinstance(o, datetime):
            return o.isoformat()
        if isinstance(o, (set, frozenset)):
            return sorted(o)
        return super().default(o)


def serialize_event(event_type: str, payload: dict[str, Any]) -> str:
    return json.dumps({"event": event_type, "data": payload}, cls=_Encoder)


def deserialize_event(raw: str | bytes) -> tuple[str, Any]:
    """Split an envelope into its event name and data.

    Only the envelope itself is checked here; ``data`` is validated per event
    by the push protocol models.
    """
    try:
        envelope = json.loads(raw)
    except ValueError as exc:
        raise MalformedEventError("envelope", f"Not JSON: {exc}") from exc
    if not isinstance(envelope, dict) or not isinstance(envelope.get("event"), str):
        raise MalformedEventError("envelope", "Missing event name")
    return envelope["event"], envelope.get("data")

"""Push channel and history payload models.

Every inbound event is validated into one member of a tagged union keyed by
the event name; anything that does not fit is rejected here, before it can
reach the reconciler.
"""
from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from chat_sync.application.exceptions import MalformedEventError


class WireAttachment(BaseModel):
    media_type: str
    media_url: str
    media_name: str = ""
    media_size: int = 0

    model_config = ConfigDict(extra="ignore")


class WireMessage(BaseModel):
    message_id: str = Field(min_length=1)
    from_user_id: str = Field(min_length=1)
    to_user_id: str = Field(min_length=1)
    message_text: str | None = ""
    created_at: datetime
    updated_at: datetime | None = None
    attachments: list[WireAttachment] = []

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)


class NewMessagePayload(WireMessage):
    event: Literal["newMessage"] = "newMessage"


class MessageUpdatedPayload(WireMessage):
    event: Literal["messageUpdated"] = "messageUpdated"


class MessageDeletedPayload(BaseModel):
    event: Literal["messageDeleted"] = "messageDeleted"
    message_id: str = Field(min_length=1)
    contact_id: str = Field(alias="contactId", min_length=1)

    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)


class MessageDeletedForMePayload(BaseModel):
    event: Literal["messageDeletedForMe"] = "messageDeletedForMe"
    message_id: str = Field(min_length=1)
    contact_id: str = Field(alias="contactId", min_length=1)
    user_id: str | None = None

    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)


InboundPayload = Annotated[
    Union[
        NewMessagePayload,
        MessageUpdatedPayload,
        MessageDeletedPayload,
        MessageDeletedForMePayload,
    ],
    Field(discriminator="event"),
]

_inbound_adapter: TypeAdapter[InboundPayload] = TypeAdapter(InboundPayload)


def parse_event(event_type: str, data: Any) -> InboundPayload:
    """Validate a decoded push envelope. Raises MalformedEventError."""
    if not isinstance(data, dict):
        raise MalformedEventError(event_type, f"Expected an object, got {type(data).__name__}")
    try:
        return _inbound_adapter.validate_python({**data, "event": event_type})
    except PydanticValidationError as exc:
        raise MalformedEventError(event_type, str(exc)) from exc


class HistoryItem(WireMessage):
    is_deleted: bool = False
    is_visible: bool = True
    hidden_at: datetime | None = None
    read_at: datetime | None = None


history_adapter: TypeAdapter[list[HistoryItem]] = TypeAdapter(list[HistoryItem])

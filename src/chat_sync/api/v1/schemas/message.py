from __future__ import annotations

from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field


class AttachmentResponse(BaseModel):
    kind: str
    url: str
    name: str
    size: int

    model_config = {"from_attributes": True}


class MessageResponse(BaseModel):
    id: str
    conversation_id: str
    sender_id: str
    recipient_id: str
    side: str
    text: str
    caption: str | None
    attachments: list[AttachmentResponse]
    file_url: str | None
    file_name: str | None
    file_type: str | None
    audio_url: str | None
    video_url: str | None
    created_at: datetime
    updated_at: datetime
    read_at: datetime | None
    deleted: bool = Field(validation_alias=AliasChoices("deleted_for_all", "deleted"))
    seq: int

    model_config = {"from_attributes": True}


class EditMessageRequest(BaseModel):
    text: str

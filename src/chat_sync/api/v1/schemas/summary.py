from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class SummaryResponse(BaseModel):
    conversation_id: str
    message_id: str
    preview: str
    created_at: datetime
    updated_at: datetime
    deleted: bool
    anchored: bool

    model_config = {"from_attributes": True}

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body

from chat_sync.api.deps import ContextDep
from chat_sync.api.v1.schemas.message import MessageResponse
from chat_sync.services import action_service

router = APIRouter(prefix="/api/v1/messages", tags=["messages"])


@router.post("/echo", response_model=MessageResponse, status_code=201)
async def echo_sent_message(
    ctx: ContextDep,
    response: dict[str, Any] = Body(...),
) -> MessageResponse:
    """Record a send response locally before the push channel delivers it."""
    message = action_service.echo_sent_message(response, ctx)
    return MessageResponse.model_validate(message, from_attributes=True)

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Query
from fastapi.responses import Response

from chat_sync.api.deps import ChatApiDep, ContextDep
from chat_sync.api.v1.schemas.message import EditMessageRequest, MessageResponse
from chat_sync.api.v1.schemas.summary import SummaryResponse
from chat_sync.application.exceptions import NotFoundError, UpstreamError
from chat_sync.services import action_service, history_service, summary_service

router = APIRouter(prefix="/api/v1/conversations", tags=["conversations"])


@router.get("/{peer_id}/messages", response_model=list[MessageResponse])
async def list_messages(
    peer_id: str,
    ctx: ContextDep,
    viewer_id: str | None = Query(None),
) -> list[MessageResponse]:
    sequence = ctx.visible_sequence(peer_id, viewer_id)
    return [MessageResponse.model_validate(m, from_attributes=True) for m in sequence]


@router.get("/{peer_id}/summary", response_model=SummaryResponse)
async def get_summary(
    peer_id: str,
    ctx: ContextDep,
    viewer_id: str | None = Query(None),
) -> SummaryResponse:
    if viewer_id is not None:
        summary_service.track_viewer(viewer_id, ctx)
    summary = ctx.last_message_summary(peer_id, viewer_id)
    if summary is None:
        raise NotFoundError("No messages in conversation")
    return SummaryResponse.model_validate(summary, from_attributes=True)


@router.post("/{peer_id}/open", status_code=204)
async def open_conversation(peer_id: str, ctx: ContextDep, api: ChatApiDep) -> Response:
    await history_service.open_conversation(peer_id, api, ctx)
    return Response(status_code=204)


@router.post("/{peer_id}/close", status_code=204)
async def close_conversation(peer_id: str, ctx: ContextDep) -> Response:
    history_service.close_conversation(peer_id, ctx)
    return Response(status_code=204)


@router.delete("/{peer_id}/messages/{message_id}", status_code=204)
async def delete_message(
    peer_id: str,
    message_id: str,
    ctx: ContextDep,
    api: ChatApiDep,
    scope: Literal["all", "me"] = Query("me"),
) -> Response:
    if scope == "all":
        ok = await action_service.delete_for_all(peer_id, message_id, api, ctx)
    else:
        ok = await action_service.delete_for_me(peer_id, message_id, api, ctx)
    if not ok:
        raise UpstreamError("Chat backend rejected the delete")
    return Response(status_code=204)


@router.patch("/{peer_id}/messages/{message_id}", response_model=MessageResponse)
async def edit_message(
    peer_id: str,
    message_id: str,
    body: EditMessageRequest,
    ctx: ContextDep,
    api: ChatApiDep,
) -> MessageResponse:
    ok = await action_service.edit_message(peer_id, message_id, body.text, api, ctx)
    if not ok:
        raise UpstreamError("Chat backend rejected the edit")
    message = ctx.store.get(peer_id, message_id)
    return MessageResponse.model_validate(message, from_attributes=True)

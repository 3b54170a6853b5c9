from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect, status

from chat_sync.api.v1.schemas.summary import SummaryResponse
from chat_sync.application.context import ReconciliationContext
from chat_sync.application.listeners import ALL_CONVERSATIONS, ConversationChanged, Listener
from chat_sync.config import settings
from chat_sync.infrastructure.ws.protocol import WsOutbound

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])


def change_to_outbound(change: ConversationChanged) -> WsOutbound:
    return WsOutbound(
        type=f"conversation.{change.reason.value}",
        data={
            "conversation_id": change.conversation_id,
            "message_id": change.message_id,
            "summaries": {
                viewer: SummaryResponse.model_validate(s, from_attributes=True).model_dump(mode="json")
                if s is not None else None
                for viewer, s in change.summaries.items()
            },
        },
    )


def bounded_listener(queue: asyncio.Queue[ConversationChanged | None]) -> Listener:
    """Feeds one socket's queue. A client that falls so far behind that the
    queue fills loses its backlog and gets a ``None`` marker, after which the
    sender closes the socket and the client reloads state."""
    overflowed = False

    def _enqueue(change: ConversationChanged) -> None:
        nonlocal overflowed
        if overflowed:
            return
        try:
            queue.put_nowait(change)
        except asyncio.QueueFull:
            overflowed = True
            while not queue.empty():
                queue.get_nowait()
            queue.put_nowait(None)
            logger.warning("WS client fell behind on %s, closing", change.conversation_id)

    return _enqueue


@router.websocket("/ws/updates")
async def ws_updates(
    websocket: WebSocket,
    conversation_id: str = Query(ALL_CONVERSATIONS),
) -> None:
    ctx: ReconciliationContext = websocket.app.state.ctx
    await websocket.accept()

    queue: asyncio.Queue[ConversationChanged | None] = asyncio.Queue(maxsize=settings.WS_QUEUE_MAXSIZE)
    subscription = ctx.subscribe(conversation_id, bounded_listener(queue))

    heartbeat_task = asyncio.create_task(
        _heartbeat(websocket), name=f"ws-heartbeat-{conversation_id}",
    )
    try:
        while True:
            change = await queue.get()
            if change is None:
                await websocket.close(code=status.WS_1013_TRY_AGAIN_LATER)
                break
            await websocket.send_text(change_to_outbound(change).model_dump_json())
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WS error for subscription on %s", conversation_id)
    finally:
        heartbeat_task.cancel()
        ctx.unsubscribe(subscription)


async def _heartbeat(ws: WebSocket) -> None:
    interval = settings.WS_HEARTBEAT_SECONDS
    try:
        while True:
            await asyncio.sleep(interval)
            await ws.send_text(WsOutbound(type="ping", data={}).model_dump_json())
    except asyncio.CancelledError:
        pass
    except Exception:
        logger.debug("Heartbeat stopped", exc_info=True)

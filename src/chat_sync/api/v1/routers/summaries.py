from __future__ import annotations

from fastapi import APIRouter, Query

from chat_sync.api.deps import ContextDep
from chat_sync.api.v1.schemas.summary import SummaryResponse
from chat_sync.services import summary_service

router = APIRouter(prefix="/api/v1/summaries", tags=["summaries"])


@router.get("", response_model=list[SummaryResponse])
async def list_summaries(
    ctx: ContextDep,
    viewer_id: str | None = Query(None),
) -> list[SummaryResponse]:
    if viewer_id is not None:
        summary_service.track_viewer(viewer_id, ctx)
    return [
        SummaryResponse.model_validate(s, from_attributes=True)
        for s in ctx.contact_summaries(viewer_id)
    ]

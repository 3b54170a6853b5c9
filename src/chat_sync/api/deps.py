"""FastAPI dependency injection helpers."""
from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from chat_sync.application.context import ReconciliationContext
from chat_sync.infrastructure.http.chat_api import HttpChatApi


def get_context(request: Request) -> ReconciliationContext:
    return request.app.state.ctx


def get_chat_api(request: Request) -> HttpChatApi:
    return request.app.state.chat_api


ContextDep = Annotated[ReconciliationContext, Depends(get_context)]
ChatApiDep = Annotated[HttpChatApi, Depends(get_chat_api)]

"""Entrypoint: python -m chat_sync"""
from __future__ import annotations

import logging

import uvicorn

from chat_sync.api.middleware.correlation_id import CorrelationIdFilter


def main() -> None:
    handler = logging.StreamHandler()
    handler.addFilter(CorrelationIdFilter())
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s [%(request_id)s]: %(message)s",
        handlers=[handler],
    )
    uvicorn.run(
        "chat_sync.app:create_app",
        factory=True,
        host="127.0.0.1",
        port=8000,
        log_level="info",
        log_config=None,
    )


if __name__ == "__main__":
    main()

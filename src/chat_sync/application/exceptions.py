from __future__ import annotations


class AppError(Exception):
    """Base application error."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class NotFoundError(AppError):
    pass


class ValidationError(AppError):
    pass


class MalformedEventError(ValidationError):
    """Inbound push payload failed validation at the boundary."""

    def __init__(self, event_type: str, detail: str = "") -> None:
        self.event_type = event_type
        super().__init__(detail or f"Malformed {event_type} event")


class UpstreamError(AppError):
    """The chat backend rejected or failed an outbound request."""

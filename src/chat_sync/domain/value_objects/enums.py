from __future__ import annotations

from enum import StrEnum


class MediaKind(StrEnum):
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"
    FILE = "file"

    @classmethod
    def from_media_type(cls, media_type: str | None) -> MediaKind:
        """Accepts bare kinds ("audio") as well as MIME types ("audio/ogg")."""
        if not media_type:
            return cls.FILE
        head = media_type.strip().lower().split("/", 1)[0]
        try:
            return cls(head)
        except ValueError:
            return cls.FILE


class MessageSide(StrEnum):
    OWN = "own"
    PEER = "peer"


class EventKind(StrEnum):
    NEW_MESSAGE = "newMessage"
    MESSAGE_UPDATED = "messageUpdated"
    MESSAGE_DELETED = "messageDeleted"
    MESSAGE_DELETED_FOR_ME = "messageDeletedForMe"


class Transition(StrEnum):
    APPLIED = "applied"
    UNCHANGED = "unchanged"
    MISS = "miss"


class ChangeReason(StrEnum):
    APPENDED = "appended"
    EDITED = "edited"
    DELETED_FOR_ALL = "deleted_for_all"
    DELETED_FOR_ME = "deleted_for_me"
    HISTORY_LOADED = "history_loaded"

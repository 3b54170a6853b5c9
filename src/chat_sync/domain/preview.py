"""Short contact-list previews for messages."""
from __future__ import annotations

from collections.abc import Sequence

from chat_sync.domain.entities.message import Attachment, Message
from chat_sync.domain.value_objects.enums import MediaKind

DELETED_PLACEHOLDER = "This message was deleted"

_TAGS: dict[MediaKind, str] = {
    MediaKind.AUDIO: "[Audio]",
    MediaKind.VIDEO: "[Video]",
    MediaKind.IMAGE: "[Image]",
    MediaKind.FILE: "[File]",
}

# Kinds whose accompanying text is shown instead of the tag.
_CAPTIONED = frozenset({MediaKind.IMAGE, MediaKind.FILE})


def message_preview(
    text: str | None,
    attachments: Sequence[Attachment] = (),
    *,
    caption: str | None = None,
    deleted: bool = False,
) -> str:
    if deleted:
        return DELETED_PLACEHOLDER

    if attachments:
        kind = attachments[0].kind
        if kind in _CAPTIONED:
            accompanying = caption or text
            if accompanying and accompanying.strip():
                return accompanying
        return _TAGS[kind]

    return text or ""


def preview_of(message: Message) -> str:
    return message_preview(
        message.text,
        message.attachments,
        caption=message.caption,
        deleted=message.deleted_for_all,
    )

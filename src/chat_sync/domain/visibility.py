"""Per-message visibility transitions.

Two independent, one-directional axes: ``deleted_for_all`` (shared by every
viewer) and ``hidden_for`` (the viewers that deleted the message for
themselves). Neither axis can be reverted and setting one never touches the
other. Functions here return the patch to apply rather than mutating.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any

from chat_sync.domain.entities.message import Message
from chat_sync.domain.value_objects.enums import Transition

Patch = dict[str, Any]


def delete_for_all(message: Message, at: datetime) -> tuple[Transition, Patch]:
    if message.deleted_for_all:
        return Transition.UNCHANGED, {}
    return Transition.APPLIED, {
        "deleted_for_all": True,
        "text": "",
        "caption": None,
        "attachments": (),
        "file_url": None,
        "file_name": None,
        "file_type": None,
        "audio_url": None,
        "video_url": None,
        "updated_at": max(at, message.updated_at),
    }


def delete_for_me(message: Message, viewer_id: str) -> tuple[Transition, Patch]:
    if message.is_hidden_for(viewer_id):
        return Transition.UNCHANGED, {}
    return Transition.APPLIED, {"hidden_for": message.hidden_for | {viewer_id}}


def merge_visibility(a: Message, b: Message) -> Patch:
    """Visibility of two copies of the same message combined; nothing undeletes."""
    patch: Patch = {"hidden_for": a.hidden_for | b.hidden_for}
    if a.deleted_for_all or b.deleted_for_all:
        survivor = a if a.deleted_for_all else b
        patch.update(
            deleted_for_all=True,
            text=survivor.text,
            caption=survivor.caption,
            attachments=survivor.attachments,
            file_url=None,
            file_name=None,
            file_type=None,
            audio_url=None,
            video_url=None,
        )
    return patch

from __future__ import annotations

import dataclasses

import pytest

from chat_sync.domain.entities.message import Attachment
from chat_sync.domain.preview import DELETED_PLACEHOLDER, message_preview, preview_of
from chat_sync.domain.value_objects.enums import MediaKind
from chat_sync.domain.visibility import delete_for_all
from tests.conftest import T0, audio, image, make_message


def _attachment(kind: MediaKind) -> Attachment:
    return Attachment(kind=kind, url=f"https://cdn.test/{kind}", name=str(kind), size=1)


def test_plain_text():
    assert message_preview("hi there") == "hi there"


def test_empty_text_allowed():
    assert message_preview("") == ""
    assert message_preview(None) == ""


def test_deleted_wins_over_everything():
    assert message_preview("secret", [audio()], deleted=True) == DELETED_PLACEHOLDER


@pytest.mark.parametrize(
    ("kind", "tag"),
    [
        (MediaKind.AUDIO, "[Audio]"),
        (MediaKind.VIDEO, "[Video]"),
        (MediaKind.IMAGE, "[Image]"),
        (MediaKind.FILE, "[File]"),
    ],
)
def test_attachment_tags_without_text(kind, tag):
    assert message_preview("", [_attachment(kind)]) == tag


def test_image_with_caption_shows_caption():
    assert message_preview("", [image()], caption="look at this") == "look at this"
    assert message_preview("sunset", [image()]) == "sunset"


def test_file_with_blank_text_uses_tag():
    assert message_preview("   ", [_attachment(MediaKind.FILE)]) == "[File]"


def test_audio_and_video_ignore_text():
    assert message_preview("voice note", [audio()]) == "[Audio]"
    assert message_preview("clip", [_attachment(MediaKind.VIDEO)]) == "[Video]"


def test_audio_message_before_and_after_delete_for_all():
    msg = make_message("m1", "", attachments=(audio(),))
    assert preview_of(msg) == "[Audio]"

    _, patch = delete_for_all(msg, T0)
    deleted = dataclasses.replace(msg, **patch)
    assert preview_of(deleted) == DELETED_PLACEHOLDER


@pytest.mark.parametrize(
    ("media_type", "expected"),
    [
        ("audio", MediaKind.AUDIO),
        ("audio/ogg", MediaKind.AUDIO),
        ("VIDEO/mp4", MediaKind.VIDEO),
        ("image/png", MediaKind.IMAGE),
        ("application/pdf", MediaKind.FILE),
        ("", MediaKind.FILE),
        (None, MediaKind.FILE),
    ],
)
def test_media_kind_from_media_type(media_type, expected):
    assert MediaKind.from_media_type(media_type) is expected

import pytest
from pydantic import ValidationError

from conftest import make_update, voice
from tgscribe.media.locator import classify, decode_update, locate
from tgscribe.media.types import ChatKind, Command, MediaKind, MediaMessage, Unhandled


def _message(**kwargs):
    return decode_update(make_update(**kwargs))


def test_decode_message():
    msg = _message(text="hi", chat_id=5, message_id=9)
    assert msg.chat_id == 5
    assert msg.message_id == 9
    assert msg.chat_kind is ChatKind.PRIVATE
    assert msg.text == "hi"
    assert msg.attachments == ()


def test_decode_channel_post():
    msg = _message(key="channel_post", chat_type="channel", voice=voice())
    assert msg.chat_kind is ChatKind.CHANNEL
    assert msg.attachment(MediaKind.VOICE).file_id == "voice-1"


def test_decode_other_update_types():
    assert decode_update({"update_id": 1}) is None
    assert decode_update({"update_id": 1, "edited_message": {"message_id": 1}}) is None


def test_decode_malformed_message():
    with pytest.raises(ValidationError):
        decode_update({"update_id": 1, "message": {"chat": {"id": 1, "type": "private"}}})


def test_locate_voice():
    ref = locate(_message(voice=voice(size=2048, duration=12)))
    assert ref.file_id == "voice-1"
    assert ref.declared_size == 2048
    assert ref.duration == 12
    assert ref.kind is MediaKind.VOICE


def test_voice_wins_over_audio():
    msg = _message(
        audio={"file_id": "audio-1", "file_unique_id": "a", "duration": 60},
        voice=voice(),
    )
    assert locate(msg).file_id == "voice-1"


def test_precedence_video_note_audio_video():
    video_note = {"file_id": "vn", "file_unique_id": "v", "length": 240, "duration": 5}
    audio = {"file_id": "au", "file_unique_id": "a", "duration": 5}
    video = {"file_id": "vi", "file_unique_id": "w", "width": 1, "height": 1, "duration": 5}

    assert locate(_message(video_note=video_note, audio=audio, video=video)).file_id == "vn"
    assert locate(_message(audio=audio, video=video)).file_id == "au"
    assert locate(_message(video=video)).kind is MediaKind.VIDEO


@pytest.mark.parametrize("mime", ["audio/mpeg", "video/mp4"])
def test_document_with_media_mime(mime):
    doc = {"file_id": "doc-1", "file_unique_id": "d", "mime_type": mime, "file_size": 10}
    ref = locate(_message(document=doc))
    assert ref.kind is MediaKind.DOCUMENT
    assert ref.mime_type == mime
    assert ref.duration is None


@pytest.mark.parametrize("doc", [
    {"file_id": "d", "file_unique_id": "d", "mime_type": "application/pdf"},
    {"file_id": "d", "file_unique_id": "d"},
])
def test_document_without_media_mime(doc):
    assert locate(_message(document=doc)) is None


def test_nothing_to_locate():
    assert locate(_message(text="just text")) is None
    assert locate(_message(photo=[{"file_id": "p", "file_unique_id": "p", "width": 1, "height": 1}])) is None


def test_classify_start_in_private_chat():
    result = classify(_message(text="/start"))
    assert isinstance(result, Command)
    assert result.name == "/start"


@pytest.mark.parametrize("chat_type", ["group", "supergroup"])
def test_classify_start_in_group_is_unhandled(chat_type):
    assert isinstance(classify(_message(text="/start", chat_type=chat_type)), Unhandled)


def test_classify_start_checked_before_media():
    result = classify(_message(text="/start", voice=voice()))
    assert isinstance(result, Command)


def test_classify_media():
    result = classify(_message(voice=voice(), chat_type="group"))
    assert isinstance(result, MediaMessage)
    assert result.kind is MediaKind.VOICE


def test_classify_custom_commands():
    assert isinstance(classify(_message(text="/help"), ["/start", "/help"]), Command)
    assert isinstance(classify(_message(text="/start now")), Unhandled)

"""
Inbound update decoding and media detection.

A raw Telegram update is validated with pydantic, turned into an
InboundMessage, then classified into exactly one of Command,
MediaMessage or Unhandled before the pipeline does anything else.
"""

from typing import Any, Sequence

from pydantic import BaseModel

from tgscribe.media.types import (
    Attachment,
    ChatKind,
    Classified,
    Command,
    InboundMessage,
    MediaKind,
    MediaMessage,
    MediaReference,
    Unhandled,
)

DEFAULT_COMMANDS = ("/start",)

# Documents only count when they are really audio or video
TRANSCRIBABLE_MIME_PREFIXES = ("audio/", "video/")

# First match wins
MEDIA_PRECEDENCE = (
    MediaKind.VOICE,
    MediaKind.VIDEO_NOTE,
    MediaKind.AUDIO,
    MediaKind.VIDEO,
)


class TelegramFile(BaseModel):
    """Common subset of Voice, VideoNote, Audio, Video and Document."""

    file_id: str
    file_size: int | None = None
    duration: int | None = None
    mime_type: str | None = None
    file_name: str | None = None


class TelegramChat(BaseModel):
    id: int
    type: ChatKind


class TelegramMessage(BaseModel):
    """The parts of a Telegram Message object we read."""

    message_id: int
    chat: TelegramChat
    text: str | None = None
    voice: TelegramFile | None = None
    video_note: TelegramFile | None = None
    audio: TelegramFile | None = None
    video: TelegramFile | None = None
    document: TelegramFile | None = None

    def to_inbound(self) -> InboundMessage:
        attachments = []
        for kind in MediaKind:
            raw = getattr(self, kind.value)
            if raw is None:
                continue
            attachments.append(
                Attachment(
                    kind=kind,
                    file_id=raw.file_id,
                    file_size=raw.file_size,
                    duration=raw.duration,
                    mime_type=raw.mime_type,
                    file_name=raw.file_name,
                )
            )
        return InboundMessage(
            chat_id=self.chat.id,
            message_id=self.message_id,
            chat_kind=self.chat.type,
            text=self.text,
            attachments=tuple(attachments),
        )


class TelegramUpdate(BaseModel):
    update_id: int | None = None
    message: TelegramMessage | None = None
    channel_post: TelegramMessage | None = None


def decode_update(payload: dict[str, Any]) -> InboundMessage | None:
    """
    Decode a webhook payload.

    Args:
        payload: Parsed JSON body of a Telegram webhook call

    Returns:
        The message (or channel post), or None for other update types.

    Raises:
        pydantic.ValidationError: If the message part is malformed.
    """
    update = TelegramUpdate.model_validate(payload)
    msg = update.message or update.channel_post
    if msg is None:
        return None
    return msg.to_inbound()


def locate(message: InboundMessage) -> MediaReference | None:
    """
    Find the transcribable attachment of a message.

    Precedence: voice, video note, audio, video, then a document whose
    MIME type is audio/* or video/*.
    """
    for kind in MEDIA_PRECEDENCE:
        item = message.attachment(kind)
        if item is not None:
            return MediaReference(
                file_id=item.file_id,
                declared_size=item.file_size,
                duration=item.duration,
                kind=kind,
                mime_type=item.mime_type,
            )

    doc = message.attachment(MediaKind.DOCUMENT)
    if doc is not None and (doc.mime_type or "").startswith(TRANSCRIBABLE_MIME_PREFIXES):
        # Telegram documents have no duration
        return MediaReference(
            file_id=doc.file_id,
            declared_size=doc.file_size,
            duration=None,
            kind=MediaKind.DOCUMENT,
            mime_type=doc.mime_type,
        )

    return None


def classify(
    message: InboundMessage, commands: Sequence[str] = DEFAULT_COMMANDS
) -> Classified:
    """
    Classify a message before any other processing.

    Greeting commands are only recognized outside group chats and are
    checked before media.
    """
    if message.text in commands and not message.chat_kind.is_group:
        return Command(message=message, name=message.text)

    reference = locate(message)
    if reference is not None:
        return MediaMessage(message=message, reference=reference)

    return Unhandled(message=message)

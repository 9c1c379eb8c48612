"""
Value types flowing through the transcription pipeline.

Everything here is invocation-local: built from one webhook update,
consumed once, then dropped.
"""

from dataclasses import dataclass
from enum import Enum


class ChatKind(str, Enum):
    """Telegram chat type."""

    PRIVATE = "private"
    GROUP = "group"
    SUPERGROUP = "supergroup"
    CHANNEL = "channel"

    @property
    def is_group(self) -> bool:
        return self in (ChatKind.GROUP, ChatKind.SUPERGROUP)


class MediaKind(str, Enum):
    """Attachment kinds that may carry speech, in lookup order."""

    VOICE = "voice"
    VIDEO_NOTE = "video_note"
    AUDIO = "audio"
    VIDEO = "video"
    DOCUMENT = "document"


@dataclass(frozen=True)
class Attachment:
    """A single file attached to a Telegram message."""

    kind: MediaKind
    file_id: str
    file_size: int | None = None
    duration: int | None = None
    mime_type: str | None = None
    file_name: str | None = None


@dataclass(frozen=True)
class InboundMessage:
    """
    The fields of a Telegram message the pipeline reads.

    Attributes:
        chat_id: Chat the message was posted in
        message_id: Message ID, used for reply threading
        chat_kind: Private, group, supergroup or channel
        text: Message text, if any
        attachments: Every candidate attachment present on the message.
            Telegram normally sends at most one; precedence between
            several is decided by the media locator.
    """

    chat_id: int
    message_id: int
    chat_kind: ChatKind
    text: str | None = None
    attachments: tuple[Attachment, ...] = ()

    def attachment(self, kind: MediaKind) -> Attachment | None:
        """Return the attachment of the given kind, if present."""
        for item in self.attachments:
            if item.kind is kind:
                return item
        return None


@dataclass(frozen=True)
class MediaReference:
    """Normalized pointer to a Telegram file."""

    file_id: str
    declared_size: int | None
    duration: int | None
    kind: MediaKind
    mime_type: str | None = None


@dataclass(frozen=True)
class Command:
    """A greeting command such as /start."""

    message: InboundMessage
    name: str


@dataclass(frozen=True)
class MediaMessage:
    """A message carrying transcribable media."""

    message: InboundMessage
    reference: MediaReference

    @property
    def kind(self) -> MediaKind:
        return self.reference.kind


@dataclass(frozen=True)
class Unhandled:
    """Anything else: plain text, stickers, photos, ..."""

    message: InboundMessage


Classified = Command | MediaMessage | Unhandled


@dataclass(frozen=True)
class MediaStream:
    """Downloaded media bytes plus a filename/content-type hint."""

    content: bytes
    filename: str
    content_type: str

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class TranscriptResult:
    """Text returned by the speech-to-text provider."""

    text: str

    @property
    def is_empty(self) -> bool:
        return not self.text.strip()


@dataclass(frozen=True)
class OutboundReply:
    """A text message to send back to the chat."""

    chat_id: int
    text: str
    in_reply_to: int | None = None

"""
Message-to-transcript pipeline.

One webhook update in, at most one reply out:

    classify → size check → typing → resolve → download → transcribe → reply

Fixed-outcome branches (greeting, oversize, unresolvable file, empty
transcript) are answered directly. Download and transcription errors are
caught once here, logged, and turned into a generic failure reply.
"""

import logging
from enum import Enum
from typing import Any

from tgscribe.channels.telegram import TelegramClient
from tgscribe.media.fetcher import MediaFetcher
from tgscribe.media.locator import DEFAULT_COMMANDS, classify, decode_update
from tgscribe.media.types import (
    Command,
    InboundMessage,
    MediaMessage,
    OutboundReply,
    TranscriptResult,
    Unhandled,
)
from tgscribe.reply import Outcome, ReplyComposer
from tgscribe.transcribe.whisper import Transcriber

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    IDLE = "idle"
    CLASSIFIED = "classified"
    SIZE_CHECKED = "size_checked"
    FETCHING = "fetching"
    TRANSCRIBING = "transcribing"
    REPLIED = "replied"


class MessagePipeline:
    """
    Processes one Telegram message per call.

    Holds no per-message state; concurrent calls for distinct updates
    are independent.
    """

    def __init__(
        self,
        telegram: TelegramClient,
        fetcher: MediaFetcher,
        transcriber: Transcriber,
        composer: ReplyComposer,
        max_file_size: int,
        commands: tuple[str, ...] | list[str] = DEFAULT_COMMANDS,
    ):
        self.telegram = telegram
        self.fetcher = fetcher
        self.transcriber = transcriber
        self.composer = composer
        self.max_file_size = max_file_size
        self.commands = tuple(commands)

    async def handle_update(self, payload: dict[str, Any]) -> OutboundReply | None:
        """Decode a raw webhook payload and process the message in it."""
        message = decode_update(payload)
        if message is None:
            logger.debug("Update has no message or channel_post, ignoring")
            return None
        return await self.handle(message)

    async def handle(self, message: InboundMessage) -> OutboundReply | None:
        """
        Process a single message.

        Returns:
            The reply that was sent, or None if the message was ignored.
        """
        state = PipelineState.IDLE
        classified = classify(message, self.commands)
        state = self._advance(state, PipelineState.CLASSIFIED, message)

        if isinstance(classified, Unhandled):
            return None

        if isinstance(classified, Command):
            # Standalone help message, not threaded
            reply = OutboundReply(
                chat_id=message.chat_id,
                text=self.composer.compose(Outcome.HELP),
            )
            return await self._send(reply, state)

        assert isinstance(classified, MediaMessage)
        reference = classified.reference

        # Files without a declared size skip this check
        if reference.declared_size and reference.declared_size > self.max_file_size:
            logger.info(
                f"Rejecting {reference.kind.value} of {reference.declared_size} bytes "
                f"in chat {message.chat_id}"
            )
            return await self._reply(message, Outcome.TOO_LARGE, state)
        state = self._advance(state, PipelineState.SIZE_CHECKED, message)

        await self._send_typing(message.chat_id)

        state = self._advance(state, PipelineState.FETCHING, message)
        try:
            url = await self.fetcher.resolve(reference.file_id)
            if url is None:
                return await self._reply(message, Outcome.RETRIEVAL_FAILED, state)

            stream = await self.fetcher.fetch(url, reference)

            state = self._advance(state, PipelineState.TRANSCRIBING, message)
            result = TranscriptResult(text=await self.transcriber.transcribe(stream))
        except Exception:
            logger.exception(
                f"Transcription error (chat {message.chat_id}, message {message.message_id})"
            )
            return await self._reply(message, Outcome.FAILED, state)

        if result.is_empty:
            return await self._reply(message, Outcome.NO_SPEECH, state)

        return await self._reply(message, Outcome.TRANSCRIBED, state, result.text)

    async def _send_typing(self, chat_id: int) -> None:
        """Best effort: a failed typing indicator is logged and ignored."""
        try:
            await self.telegram.send_action(chat_id)
        except Exception as e:
            logger.debug(f"Typing indicator failed for chat {chat_id}: {e}")

    async def _reply(
        self,
        message: InboundMessage,
        outcome: Outcome,
        state: PipelineState,
        transcript: str | None = None,
    ) -> OutboundReply | None:
        """Send a reply threaded to the originating message."""
        reply = OutboundReply(
            chat_id=message.chat_id,
            text=self.composer.compose(outcome, transcript),
            in_reply_to=message.message_id,
        )
        logger.info(f"Replying to {message.chat_id}/{message.message_id}: {outcome.value}")
        return await self._send(reply, state)

    async def _send(self, reply: OutboundReply, state: PipelineState) -> OutboundReply | None:
        """Send once; a failed send is logged, never raised."""
        try:
            await self.telegram.send(reply)
        except Exception:
            logger.exception(f"Error sending reply to chat {reply.chat_id}")
            return None
        self._advance(state, PipelineState.REPLIED, None)
        return reply

    @staticmethod
    def _advance(
        current: PipelineState, new: PipelineState, message: InboundMessage | None
    ) -> PipelineState:
        where = f" ({message.chat_id}/{message.message_id})" if message else ""
        logger.debug(f"Pipeline {current.value} → {new.value}{where}")
        return new

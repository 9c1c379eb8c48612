"""
Component wiring.

Everything is built from one Config value at startup; components never
read the environment themselves.
"""

import httpx

from tgscribe.channels.telegram import TelegramClient
from tgscribe.config.schema import Config
from tgscribe.media.fetcher import MediaFetcher
from tgscribe.pipeline import MessagePipeline
from tgscribe.reply import ReplyComposer
from tgscribe.transcribe.whisper import Transcriber


def build_http_client(config: Config) -> httpx.AsyncClient:
    """Shared client for file downloads and transcription calls."""
    return httpx.AsyncClient(timeout=config.http_timeout)


def build_pipeline(
    config: Config,
    http: httpx.AsyncClient,
    telegram: TelegramClient | None = None,
) -> MessagePipeline:
    """Assemble a MessagePipeline from configuration."""
    if telegram is None:
        telegram = TelegramClient(config.telegram)
    return MessagePipeline(
        telegram=telegram,
        fetcher=MediaFetcher(telegram, http),
        transcriber=Transcriber(config.transcription, http),
        composer=ReplyComposer(
            max_file_size=config.max_file_size,
            max_length=TelegramClient.MAX_MESSAGE_LENGTH,
        ),
        max_file_size=config.max_file_size,
        commands=config.greeting_commands,
    )

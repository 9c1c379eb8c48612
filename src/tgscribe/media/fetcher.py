"""
Media retrieval from Telegram.

Two steps: resolve the file_id to a URL through the Bot API, then
download it. Each is attempted once.
"""

import logging

import httpx
from telegram.error import TelegramError

from tgscribe.channels.telegram import TelegramClient
from tgscribe.errors import DownloadError
from tgscribe.media.types import MediaKind, MediaReference, MediaStream

logger = logging.getLogger(__name__)

# Filename/content-type hints per attachment kind
DEFAULT_HINTS: dict[MediaKind, tuple[str, str]] = {
    MediaKind.VOICE: ("audio.ogg", "audio/ogg"),
    MediaKind.VIDEO_NOTE: ("video.mp4", "video/mp4"),
    MediaKind.AUDIO: ("audio.mp3", "audio/mpeg"),
    MediaKind.VIDEO: ("video.mp4", "video/mp4"),
    MediaKind.DOCUMENT: ("file", "application/octet-stream"),
}


class MediaFetcher:
    """Resolves and downloads Telegram files."""

    def __init__(self, telegram: TelegramClient, http: httpx.AsyncClient):
        self.telegram = telegram
        self.http = http

    async def resolve(self, file_id: str) -> str | None:
        """
        Resolve a file_id to a download URL.

        Returns:
            The URL, or None if Telegram could not provide one.
        """
        try:
            url = await self.telegram.get_file_url(file_id)
        except TelegramError as e:
            logger.warning(f"getFile failed for {file_id}: {e}")
            return None
        if url is None:
            logger.warning(f"getFile returned no file_path for {file_id}")
        return url

    async def fetch(self, url: str, reference: MediaReference) -> MediaStream:
        """
        Download the file.

        Raises:
            DownloadError: On a non-success HTTP status.
        """
        response = await self.http.get(url)
        if not response.is_success:
            raise DownloadError(response.status_code)

        filename, content_type = _hint(reference, response.headers.get("content-type"))
        logger.debug(f"Downloaded {len(response.content)} bytes ({content_type})")
        return MediaStream(
            content=response.content,
            filename=filename,
            content_type=content_type,
        )


def _hint(reference: MediaReference, header: str | None) -> tuple[str, str]:
    """Pick a filename and content type for the downloaded bytes."""
    filename, content_type = DEFAULT_HINTS[reference.kind]
    if reference.mime_type:
        content_type = reference.mime_type
    elif reference.kind is MediaKind.DOCUMENT and header:
        content_type = header.split(";")[0].strip()
    return filename, content_type

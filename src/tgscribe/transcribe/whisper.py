"""
OpenAI-compatible speech-to-text client.

Posts the media as multipart/form-data to /audio/transcriptions and
returns the top-level ``text`` field of the JSON response. Confidence,
segments and language in the response are ignored.
"""

import logging

import httpx

from tgscribe.config.schema import TranscriptionConfig
from tgscribe.errors import TranscriptionError
from tgscribe.media.types import MediaStream

logger = logging.getLogger(__name__)

# The provider sniffs the real format from the bytes
UPLOAD_FILENAME = "audio.ogg"


class Transcriber:
    """Single-shot transcription calls, no retry."""

    def __init__(self, config: TranscriptionConfig, http: httpx.AsyncClient):
        self.config = config
        self.http = http

    async def transcribe(self, stream: MediaStream) -> str:
        """
        Transcribe media bytes.

        Args:
            stream: Downloaded media

        Returns:
            Transcript text (may be empty or whitespace).

        Raises:
            TranscriptionError: On a non-success HTTP status.
        """
        data = {"model": self.config.model}
        if self.config.language:
            data["language"] = self.config.language

        logger.info(
            f"Transcribing {stream.size} bytes ({stream.content_type}) "
            f"with {self.config.model}"
        )
        response = await self.http.post(
            self.config.endpoint,
            headers={"Authorization": f"Bearer {self.config.api_key}"},
            data=data,
            files={"file": (UPLOAD_FILENAME, stream.content, stream.content_type)},
        )
        if not response.is_success:
            raise TranscriptionError(response.status_code, response.text)

        return response.json().get("text") or ""

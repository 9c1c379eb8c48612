"""
Exceptions raised by the fetch and transcription steps.

Both propagate up to the pipeline, which logs them and answers the user
with a generic failure message.
"""


class TgScribeError(Exception):
    """Base class for tgscribe errors."""


class DownloadError(TgScribeError):
    """Telegram file download returned a non-success status."""

    def __init__(self, status: int):
        self.status = status
        super().__init__(f"Telegram file download failed: {status}")


class TranscriptionError(TgScribeError):
    """Transcription provider returned a non-success status."""

    def __init__(self, status: int, body: str):
        self.status = status
        self.body = body
        super().__init__(f"Transcription API error {status}: {body}")

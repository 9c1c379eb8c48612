"""Speech-to-text providers."""

from tgscribe.transcribe.whisper import Transcriber

__all__ = ["Transcriber"]

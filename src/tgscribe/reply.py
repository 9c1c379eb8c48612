"""
User-facing reply text for each pipeline outcome.
"""

from enum import Enum


class Outcome(str, Enum):
    """How processing of one message ended."""

    HELP = "help"
    TOO_LARGE = "too_large"
    RETRIEVAL_FAILED = "retrieval_failed"
    TRANSCRIBED = "transcribed"
    NO_SPEECH = "no_speech"
    FAILED = "failed"


HELP_TEXT = (
    "Send me a voice message and I'll transcribe it for you. "
    "Also works in group chats: just add me to a group."
)

FIXED_REPLIES = {
    Outcome.HELP: HELP_TEXT,
    Outcome.TOO_LARGE: "That file is too large for me to transcribe (max {max_mb}MB).",
    Outcome.RETRIEVAL_FAILED: "Couldn't retrieve the file from Telegram.",
    Outcome.NO_SPEECH: "No speech detected.",
    Outcome.FAILED: "Something went wrong with the transcription.",
}


class ReplyComposer:
    """Maps an Outcome to reply text."""

    def __init__(self, max_file_size: int, max_length: int = 4096):
        self.max_file_size = max_file_size
        self.max_length = max_length

    def compose(self, outcome: Outcome, transcript: str | None = None) -> str:
        """
        Build the reply text.

        Args:
            outcome: Pipeline outcome
            transcript: Transcript text, required for TRANSCRIBED

        Returns:
            Text ready to send.
        """
        if outcome is Outcome.TRANSCRIBED:
            if transcript is None:
                raise ValueError("TRANSCRIBED outcome requires a transcript")
            return self._truncate(transcript.strip())

        return FIXED_REPLIES[outcome].format(max_mb=self.max_file_size // (1024 * 1024))

    def _truncate(self, text: str) -> str:
        """Keep a single message under Telegram's length limit."""
        if len(text) <= self.max_length:
            return text
        return text[: self.max_length - 1].rstrip() + "…"

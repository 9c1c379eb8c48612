"""Chat platform integrations."""

from tgscribe.channels.telegram import TelegramClient

__all__ = ["TelegramClient"]

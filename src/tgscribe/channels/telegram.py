"""
Telegram Bot API client using python-telegram-bot.
"""

import logging

from telegram import Bot, ReplyParameters
from telegram.constants import ChatAction

from tgscribe.config.schema import TelegramConfig
from tgscribe.media.types import OutboundReply

logger = logging.getLogger(__name__)


class TelegramClient:
    """
    Thin wrapper around telegram.Bot for the calls the relay makes.

    Handles:
    - sendMessage (optionally threaded as a reply)
    - sendChatAction (the "typing..." indicator)
    - getFile (file_id → download URL)
    - setWebhook
    """

    # Telegram message length limit
    MAX_MESSAGE_LENGTH = 4096

    def __init__(self, config: TelegramConfig, bot: Bot | None = None):
        self.config = config
        self._bot = bot

    @property
    def bot(self) -> Bot:
        if self._bot is None:
            self._bot = Bot(
                token=self.config.token,
                base_url=self.config.base_url,
                base_file_url=self.config.base_file_url,
            )
        return self._bot

    async def start(self) -> None:
        """Initialize the underlying HTTP connection pool."""
        await self.bot.initialize()

    async def stop(self) -> None:
        """Close the underlying HTTP connection pool."""
        if self._bot is not None:
            await self._bot.shutdown()

    async def send(self, reply: OutboundReply) -> None:
        """Send a text reply, threaded when in_reply_to is set."""
        reply_parameters = None
        if reply.in_reply_to is not None:
            reply_parameters = ReplyParameters(
                message_id=reply.in_reply_to,
                allow_sending_without_reply=True,
            )
        await self.bot.send_message(
            chat_id=reply.chat_id,
            text=reply.text,
            reply_parameters=reply_parameters,
        )

    async def send_action(self, chat_id: int, action: str = ChatAction.TYPING) -> None:
        """Show a chat action such as "typing..."."""
        await self.bot.send_chat_action(chat_id=chat_id, action=action)

    async def get_file_url(self, file_id: str) -> str | None:
        """
        Resolve a file_id to a download URL.

        Raises:
            telegram.error.TelegramError: If Telegram rejects the call
                (bad or expired file_id, file too big for the Bot API, ...).
        """
        tg_file = await self.bot.get_file(file_id)
        if not tg_file.file_path:
            return None
        if tg_file.file_path.startswith(("http://", "https://")):
            return tg_file.file_path
        return f"{self.config.base_file_url}{self.config.token}/{tg_file.file_path}"

    async def set_webhook(self, url: str) -> bool:
        """Register the webhook URL with Telegram."""
        return await self.bot.set_webhook(
            url=url,
            allowed_updates=["message", "channel_post"],
        )

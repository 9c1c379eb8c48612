from unittest.mock import AsyncMock, Mock

import pytest
from telegram.error import BadRequest

from tgscribe.channels.telegram import TelegramClient
from tgscribe.config.schema import TelegramConfig
from tgscribe.media.types import OutboundReply


@pytest.fixture
def bot():
    return AsyncMock()


@pytest.fixture
def client(bot):
    return TelegramClient(TelegramConfig(token="123:T"), bot=bot)


async def test_send_threaded(client, bot):
    await client.send(OutboundReply(chat_id=1, text="hi", in_reply_to=9))
    kwargs = bot.send_message.await_args.kwargs
    assert kwargs["chat_id"] == 1
    assert kwargs["text"] == "hi"
    assert kwargs["reply_parameters"].message_id == 9


async def test_send_unthreaded(client, bot):
    await client.send(OutboundReply(chat_id=1, text="help"))
    assert bot.send_message.await_args.kwargs["reply_parameters"] is None


async def test_send_action(client, bot):
    await client.send_action(5)
    bot.send_chat_action.assert_awaited_once_with(chat_id=5, action="typing")


async def test_get_file_url_absolute(client, bot):
    bot.get_file.return_value = Mock(file_path="https://api.telegram.org/file/bot123:T/voice/a.oga")
    assert await client.get_file_url("f") == "https://api.telegram.org/file/bot123:T/voice/a.oga"


async def test_get_file_url_relative(client, bot):
    bot.get_file.return_value = Mock(file_path="voice/a.oga")
    assert await client.get_file_url("f") == "https://api.telegram.org/file/bot123:T/voice/a.oga"


async def test_get_file_url_missing_path(client, bot):
    bot.get_file.return_value = Mock(file_path=None)
    assert await client.get_file_url("f") is None


async def test_get_file_errors_propagate(client, bot):
    bot.get_file.side_effect = BadRequest("Invalid file_id")
    with pytest.raises(BadRequest):
        await client.get_file_url("f")


async def test_set_webhook(client, bot):
    bot.set_webhook.return_value = True
    assert await client.set_webhook("https://example.com/webhook") is True
    assert bot.set_webhook.await_args.kwargs["allowed_updates"] == ["message", "channel_post"]


def test_bot_built_from_config():
    client = TelegramClient(TelegramConfig(token="123:T", api_base="http://localhost:8081"))
    assert client.bot.token == "123:T"
    assert client.bot.base_url == "http://localhost:8081/bot123:T"

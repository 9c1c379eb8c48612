import itertools

import httpx
import pytest

from tgscribe.config.schema import Config, TelegramConfig, TranscriptionConfig
from tgscribe.media.fetcher import MediaFetcher
from tgscribe.pipeline import MessagePipeline
from tgscribe.reply import ReplyComposer
from tgscribe.transcribe.whisper import Transcriber

TOKEN = "123:TEST"
FILE_URL = f"https://api.telegram.org/file/bot{TOKEN}/voice/file_1.oga"
STT_URL = "https://api.openai.com/v1/audio/transcriptions"

_ids = itertools.count(100)


def make_update(text=None, chat_type="private", chat_id=42, message_id=7, key="message", **media):
    """Build a raw Telegram update dict."""
    msg = {
        "message_id": message_id,
        "date": 1700000000,
        "chat": {"id": chat_id, "type": chat_type},
    }
    if text is not None:
        msg["text"] = text
    msg.update(media)
    return {"update_id": next(_ids), key: msg}


def voice(file_id="voice-1", size=1000, duration=3):
    return {"file_id": file_id, "file_unique_id": "u", "file_size": size, "duration": duration}


class FakeTelegram:
    """Records Bot API calls made by the pipeline."""

    def __init__(self, file_url=FILE_URL):
        self.file_url = file_url
        self.sent = []
        self.actions = []
        self.resolved = []
        self.fail_action = False
        self.fail_send = False
        self.get_file_error = None

    async def send(self, reply):
        if self.fail_send:
            raise RuntimeError("send failed")
        self.sent.append(reply)

    async def send_action(self, chat_id, action="typing"):
        if self.fail_action:
            raise RuntimeError("action failed")
        self.actions.append((chat_id, action))

    async def get_file_url(self, file_id):
        self.resolved.append(file_id)
        if self.get_file_error:
            raise self.get_file_error
        return self.file_url


class FakeHttp:
    """httpx handler answering download and transcription calls."""

    def __init__(self):
        self.requests = []
        self.download_status = 200
        self.download_body = b"OggS-fake-audio"
        self.stt_status = 200
        self.stt_json = {"text": "hello world"}
        self.stt_body = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if str(request.url) == STT_URL:
            if self.stt_body is not None:
                return httpx.Response(self.stt_status, text=self.stt_body)
            return httpx.Response(self.stt_status, json=self.stt_json)
        return httpx.Response(
            self.download_status,
            content=self.download_body,
            headers={"content-type": "audio/ogg"},
        )

    @property
    def downloads(self):
        return [r for r in self.requests if r.method == "GET"]

    @property
    def transcriptions(self):
        return [r for r in self.requests if str(r.url) == STT_URL]


@pytest.fixture
def config():
    return Config(
        telegram=TelegramConfig(token=TOKEN),
        transcription=TranscriptionConfig(api_key="sk-test"),
    )


@pytest.fixture
def fake_http():
    return FakeHttp()


@pytest.fixture
async def http(fake_http):
    async with httpx.AsyncClient(transport=httpx.MockTransport(fake_http)) as client:
        yield client


@pytest.fixture
def telegram():
    return FakeTelegram()


@pytest.fixture
def pipeline(config, telegram, http):
    return MessagePipeline(
        telegram=telegram,
        fetcher=MediaFetcher(telegram, http),
        transcriber=Transcriber(config.transcription, http),
        composer=ReplyComposer(max_file_size=config.max_file_size),
        max_file_size=config.max_file_size,
        commands=config.greeting_commands,
    )

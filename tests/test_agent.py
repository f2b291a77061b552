import asyncio
import time
from types import SimpleNamespace

import httpx
import openai
import pytest
from langchain_core.messages import HumanMessage, SystemMessage

from vitalflow.adapters.dashscope_adapter import DashScopeImageAdapter
from vitalflow.adapters.gemini_adapter import GeminiImageAdapter
from vitalflow.agent import LLMClient, build_image_adapter, extract_message_text
from vitalflow.config import Settings
from vitalflow.utils.errors import UpstreamError
from vitalflow.utils.models import ChatMessage


class _FakeChatModel:
    """Minimal stand-in for ChatOpenAI.ainvoke."""

    def __init__(self, content=None, error=None, delay=0.0):
        self.content = content
        self.error = error
        self.delay = delay
        self.calls = []

    async def ainvoke(self, messages, **kwargs):
        self.calls.append((messages, kwargs))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return SimpleNamespace(content=self.content)


class _FakeImageAdapter:
    def __init__(self, result=None, delay=0.0):
        self.result = result
        self.delay = delay

    def generate_image(self, prompt):
        if self.delay:
            time.sleep(self.delay)
        return self.result


MESSAGES = [
    ChatMessage(role="system", content="你是教练"),
    ChatMessage(role="user", content="给个建议"),
]


def _client(settings, chat_model, image_adapter=None):
    return LLMClient(settings, image_adapter=image_adapter or _FakeImageAdapter(), llm=chat_model)


# --- Text extraction ---

@pytest.mark.parametrize(
    "content, expected",
    [
        ("  plain text \n", "plain text"),
        ([{"type": "image_url", "image_url": "x"}, {"type": "text", "text": " from parts "}], "from parts"),
        ([{"type": "image_url", "image_url": "x"}], ""),
        (None, ""),
    ],
)
def test_extract_message_text(content, expected):
    assert extract_message_text(content) == expected


# --- complete_chat ---

@pytest.mark.asyncio
async def test_complete_chat_sends_options_and_trims(settings):
    model = _FakeChatModel(content='  {"ok": true}  ')
    client = _client(settings, model)

    text = await client.complete_chat(MESSAGES, response_format="json_object", temperature=0.4)

    assert text == '{"ok": true}'
    messages, kwargs = model.calls[0]
    assert isinstance(messages[0], SystemMessage)
    assert isinstance(messages[1], HumanMessage)
    assert kwargs == {"temperature": 0.4, "response_format": {"type": "json_object"}}


@pytest.mark.asyncio
async def test_complete_chat_omits_unset_options(settings):
    model = _FakeChatModel(content="hi")
    client = _client(settings, model)

    await client.complete_chat(MESSAGES)

    assert model.calls[0][1] == {}


@pytest.mark.asyncio
async def test_complete_chat_rejects_empty_messages(settings):
    client = _client(settings, _FakeChatModel(content="hi"))

    with pytest.raises(ValueError):
        await client.complete_chat([])


@pytest.mark.asyncio
async def test_complete_chat_timeout(settings):
    settings = settings.model_copy(update={"QWEN_TIMEOUT_SECONDS": 0.01})
    client = _client(settings, _FakeChatModel(content="late", delay=0.5))

    with pytest.raises(UpstreamError) as excinfo:
        await client.complete_chat(MESSAGES)

    assert excinfo.value.timeout_seconds == 0.01


@pytest.mark.asyncio
async def test_complete_chat_status_error_carries_status_and_body(settings):
    request = httpx.Request("POST", "https://dashscope.example.com/chat/completions")
    response = httpx.Response(429, text="rate limited", request=request)
    error = openai.RateLimitError("rate limited", response=response, body=None)
    client = _client(settings, _FakeChatModel(error=error))

    with pytest.raises(UpstreamError) as excinfo:
        await client.complete_chat(MESSAGES)

    assert excinfo.value.status_code == 429
    assert excinfo.value.body == "rate limited"


@pytest.mark.asyncio
async def test_complete_chat_empty_text_raises(settings):
    client = _client(settings, _FakeChatModel(content=[{"type": "text", "text": "   "}]))

    with pytest.raises(UpstreamError):
        await client.complete_chat(MESSAGES)


# --- generate_image ---

@pytest.mark.asyncio
async def test_generate_image_returns_adapter_result(settings):
    client = _client(settings, _FakeChatModel(), _FakeImageAdapter(result="https://img.example.com/a.png"))

    assert await client.generate_image("a chair") == "https://img.example.com/a.png"


@pytest.mark.asyncio
async def test_generate_image_timeout(settings):
    settings = settings.model_copy(update={"QWEN_IMAGE_TIMEOUT_SECONDS": 0.01})
    client = _client(settings, _FakeChatModel(), _FakeImageAdapter(result="late", delay=0.3))

    with pytest.raises(UpstreamError):
        await client.generate_image("a chair")


# --- Provider selection ---

def test_build_image_adapter_defaults_to_dashscope(settings):
    assert isinstance(build_image_adapter(settings), DashScopeImageAdapter)


def test_build_image_adapter_gemini():
    settings = Settings(_env_file=None, QWEN_API_KEY="sk-test", IMAGE_PROVIDER="gemini", GEMINI_API_KEY="g-key")
    adapter = build_image_adapter(settings)

    assert isinstance(adapter, GeminiImageAdapter)
    assert adapter.url.endswith("/gemini-2.5-flash-image:generateContent")


def test_build_image_adapter_gemini_requires_key():
    settings = Settings(_env_file=None, QWEN_API_KEY="sk-test", IMAGE_PROVIDER="gemini", GEMINI_API_KEY=None)

    with pytest.raises(ValueError):
        build_image_adapter(settings)

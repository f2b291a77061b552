import asyncio
from typing import Any, List, Literal, Optional, Sequence

import openai
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from vitalflow.adapters.base_adapter import ImageAdapter
from vitalflow.adapters.dashscope_adapter import DashScopeImageAdapter
from vitalflow.adapters.gemini_adapter import GeminiImageAdapter
from vitalflow.config import Settings
from vitalflow.logger import get_logger
from vitalflow.utils.errors import UpstreamError
from vitalflow.utils.models import ChatMessage

logger = get_logger(__name__)

_MESSAGE_TYPES = {
    "system": SystemMessage,
    "user": HumanMessage,
    "assistant": AIMessage,
}


def build_image_adapter(settings: Settings) -> ImageAdapter:
    """Picks the image provider named by IMAGE_PROVIDER."""
    if settings.IMAGE_PROVIDER == "gemini":
        if not settings.GEMINI_API_KEY:
            raise ValueError("GEMINI_API_KEY must be set when IMAGE_PROVIDER is 'gemini'.")
        return GeminiImageAdapter(
            api_key=settings.GEMINI_API_KEY,
            base_url=settings.GEMINI_IMAGE_URL,
            model=settings.GEMINI_IMAGE_MODEL,
            timeout_seconds=settings.QWEN_IMAGE_TIMEOUT_SECONDS,
        )
    return DashScopeImageAdapter(
        api_key=settings.QWEN_API_KEY,
        url=settings.QWEN_IMAGE_URL,
        model=settings.QWEN_IMAGE_MODEL,
        size=settings.QWEN_IMAGE_SIZE,
        timeout_seconds=settings.QWEN_IMAGE_TIMEOUT_SECONDS,
    )


def extract_message_text(content: Any) -> str:
    """
    Chat content arrives either as a plain string or as a list of typed
    parts. Returns the trimmed text, or "" when nothing usable is found.
    """
    if isinstance(content, str):
        return content.strip()
    if isinstance(content, list):
        for chunk in content:
            if isinstance(chunk, str):
                return chunk.strip()
            if isinstance(chunk, dict) and chunk.get("type") == "text":
                return (chunk.get("text") or "").strip()
    return ""


def to_langchain_messages(messages: Sequence[ChatMessage]) -> List[BaseMessage]:
    return [_MESSAGE_TYPES[message.role](content=message.content) for message in messages]


class LLMClient:
    """
    Thin wrapper around the upstream provider: one chat completion and
    one image generation, each bounded by its own timeout.
    """

    def __init__(
        self,
        settings: Settings,
        image_adapter: Optional[ImageAdapter] = None,
        llm: Optional[ChatOpenAI] = None,
    ):
        self.settings = settings
        # Retries are disabled; a failed call goes straight to the caller's fallback
        self.llm = llm or ChatOpenAI(
            model=settings.QWEN_TEXT_MODEL,
            api_key=settings.QWEN_API_KEY,
            base_url=settings.QWEN_CHAT_URL,
            timeout=settings.QWEN_TIMEOUT_SECONDS,
            max_retries=0,
        )
        self.image_adapter = image_adapter or build_image_adapter(settings)

    async def complete_chat(
        self,
        messages: Sequence[ChatMessage],
        response_format: Optional[Literal["json_object"]] = None,
        temperature: Optional[float] = None,
    ) -> str:
        """
        Sends the messages to the chat endpoint and returns the assistant
        text, trimmed. Raises UpstreamError on timeout, non-success status
        or an empty answer.
        """
        if not messages:
            raise ValueError("complete_chat needs at least one message.")

        call_kwargs = {}
        if temperature is not None:
            call_kwargs["temperature"] = temperature
        if response_format:
            call_kwargs["response_format"] = {"type": response_format}

        timeout = self.settings.QWEN_TIMEOUT_SECONDS
        try:
            result = await asyncio.wait_for(
                self.llm.ainvoke(to_langchain_messages(messages), **call_kwargs),
                timeout=timeout,
            )
        except (asyncio.TimeoutError, openai.APITimeoutError) as e:
            raise UpstreamError(f"Chat request timed out after {timeout}s", timeout_seconds=timeout) from e
        except openai.APIStatusError as e:
            body = e.response.text if e.response is not None else ""
            raise UpstreamError(
                f"Chat request failed: {e.status_code} {body}",
                status_code=e.status_code,
                body=body,
            ) from e
        except openai.APIConnectionError as e:
            raise UpstreamError(f"Chat request failed: {e}") from e

        text = extract_message_text(result.content)
        if not text:
            raise UpstreamError("Chat response contained no text")
        return text

    async def generate_image(self, prompt: str) -> Optional[str]:
        """
        Best-effort illustration. Returns None when the provider answers
        without an image; raises UpstreamError on timeout or HTTP failure.
        """
        timeout = self.settings.QWEN_IMAGE_TIMEOUT_SECONDS
        try:
            # The worker thread is abandoned on timeout; its result is never read
            return await asyncio.wait_for(
                asyncio.to_thread(self.image_adapter.generate_image, prompt),
                timeout=timeout,
            )
        except asyncio.TimeoutError as e:
            raise UpstreamError(f"Image request timed out after {timeout}s", timeout_seconds=timeout) from e

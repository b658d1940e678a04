from collections.abc import AsyncIterator
from typing import Any

from openai import AsyncOpenAI

from ..base import ModelProvider
from ..models import ResponseFragment, StreamingResponse, Turn

DEFAULT_MODEL = "gpt-4o-mini"

# Chat Completions calls the model side "assistant"
_ROLE_MAP = {"user": "user", "model": "assistant"}


def _turns_to_messages(turns: list[Turn]) -> list[dict[str, Any]]:
    """Convert turns to Chat Completions messages.

    Text-only turns use plain string content. Turns with images use the
    content-part list, with images sent as data URIs.

    Returns:
        List of message dicts with 'role' and 'content' keys
    """
    messages: list[dict[str, Any]] = []

    for turn in turns:
        role = _ROLE_MAP[turn.role]
        if not any(part.is_image for part in turn.parts):
            messages.append({
                "role": role,
                "content": "".join(part.text or "" for part in turn.parts),
            })
            continue

        content: list[dict[str, Any]] = []
        for part in turn.parts:
            if part.is_image:
                content.append({
                    "type": "image_url",
                    "image_url": {"url": f"data:{part.mime_type or 'image/jpeg'};base64,{part.data}"},
                })
            elif part.text:
                content.append({"type": "text", "text": part.text})
        messages.append({"role": role, "content": content})

    return messages


class OpenAIProvider(ModelProvider):
    """OpenAI model provider implementation.

    Hidden design decisions:
    - OpenAI API client initialization
    - Turn and image part conversion
    - Authentication mechanism

    Only text is streamed back; Chat Completions does not return images.
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: str | None = None,
        organization: str | None = None,
        **client_kwargs: Any
    ):
        """Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key
            model: Default vision-capable model to use
            base_url: Optional custom API base URL
            organization: Optional organization ID
            **client_kwargs: Additional kwargs for AsyncOpenAI client
        """
        self._model = model
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            organization=organization,
            **client_kwargs
        )
        self._current_stream_response: StreamingResponse | None = None

    @property
    def model(self) -> str:
        """Get the default model name."""
        return self._model

    async def stream_content(
        self,
        turns: list[Turn],
        model: str | None = None,
        temperature: float | None = None,
        **kwargs: Any
    ) -> StreamingResponse:
        """Start a streaming chat completion using OpenAI.

        Args:
            turns: Conversation turns
            model: Model to use (overrides default)
            temperature: Sampling temperature
            **kwargs: Additional OpenAI-specific parameters

        Returns:
            StreamingResponse that yields fragments and captures usage info
        """
        model_to_use = model or self._model
        messages = _turns_to_messages(turns)

        response = StreamingResponse(self._chat_stream_generator(
            model_to_use, messages, temperature, **kwargs
        ))
        self._current_stream_response = response
        return response

    async def _chat_stream_generator(
        self,
        model: str,
        messages: list[dict[str, Any]],
        temperature: float | None,
        **kwargs: Any,
    ) -> AsyncIterator[ResponseFragment]:
        """Internal generator for Chat Completions streaming with usage capture."""
        owner = self._current_stream_response
        request_params: dict[str, Any] = {
            "model": model,
            "messages": messages,
            "stream": True,
            "stream_options": {"include_usage": True},
            **kwargs,
        }
        if temperature is not None:
            request_params["temperature"] = temperature

        stream = await self._client.chat.completions.create(**request_params)

        async for chunk in stream:
            # Usage arrives in the final chunk
            if chunk.usage is not None and owner is not None:
                owner.set_usage({
                    "prompt_tokens": chunk.usage.prompt_tokens,
                    "completion_tokens": chunk.usage.completion_tokens,
                    "total_tokens": chunk.usage.total_tokens,
                })
            if chunk.choices:
                yield ResponseFragment(text=chunk.choices[0].delta.content or "")

    async def close(self) -> None:
        """Close the OpenAI client.

        Note: Uses the OpenAI SDK's async context manager for proper cleanup.
        See: https://github.com/openai/openai-python#async-usage
        """
        await self._client.close()

"""Google Gemini model provider implementation.

Uses the official Google GenAI SDK for async streaming generation.
Reference: https://github.com/googleapis/python-genai

Image models (e.g. gemini-2.5-flash-image) can return generated images
as inline data parts interleaved with text parts.
"""

import base64
from collections.abc import AsyncIterator
from typing import Any

from google import genai
from google.genai import types

from ..base import ModelProvider
from ..models import ResponseFragment, StreamingResponse, Turn

DEFAULT_MODEL = "gemini-2.5-flash-image"

# Default safety settings - relaxed so ordinary image prompts are not blocked
DEFAULT_SAFETY_SETTINGS = [
    types.SafetySetting(category="HARM_CATEGORY_HARASSMENT", threshold="BLOCK_ONLY_HIGH"),
    types.SafetySetting(category="HARM_CATEGORY_HATE_SPEECH", threshold="BLOCK_ONLY_HIGH"),
    types.SafetySetting(category="HARM_CATEGORY_SEXUALLY_EXPLICIT", threshold="BLOCK_ONLY_HIGH"),
    types.SafetySetting(category="HARM_CATEGORY_DANGEROUS_CONTENT", threshold="BLOCK_ONLY_HIGH"),
]


class GeminiProvider(ModelProvider):
    """Google Gemini model provider implementation.

    Hidden design decisions:
    - Google GenAI client initialization
    - Turn and inline image conversion
    - Splitting a chunk into text and image fragments
    - Relaxed safety settings
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        **client_kwargs: Any
    ):
        """Initialize Gemini provider.

        Args:
            api_key: Google AI API key
            model: Default model (gemini-2.5-flash-image, gemini-2.5-flash, ...)
            **client_kwargs: Additional kwargs for Client
        """
        self._model = model
        self._client = genai.Client(api_key=api_key, **client_kwargs)
        self._current_stream_response: StreamingResponse | None = None

    @property
    def model(self) -> str:
        """Get the default model name."""
        return self._model

    def _convert_turns(self, turns: list[Turn]) -> list[types.Content]:
        """Convert turns to Gemini contents.

        Args:
            turns: Ordered conversation turns

        Returns:
            List of Gemini Content objects
        """
        contents = []

        for turn in turns:
            parts = []
            for part in turn.parts:
                if part.is_image:
                    parts.append(types.Part.from_bytes(
                        data=base64.b64decode(part.data),
                        mime_type=part.mime_type or "image/jpeg",
                    ))
                elif part.text:
                    parts.append(types.Part(text=part.text))
            contents.append(types.Content(role=turn.role, parts=parts))

        return contents

    def _extract_fragments(self, chunk) -> list[ResponseFragment]:
        """Split a stream chunk into response fragments.

        The chunk's text and first image share one fragment; every further
        image in the same chunk gets a fragment of its own.

        Args:
            chunk: Gemini GenerateContentResponse

        Returns:
            Fragments in part order; a chunk with no content gives one
            empty fragment
        """
        texts: list[str] = []
        images: list[str] = []

        if chunk.candidates and chunk.candidates[0].content and chunk.candidates[0].content.parts:
            for part in chunk.candidates[0].content.parts:
                if getattr(part, "thought", False):
                    continue
                if part.text:
                    texts.append(part.text)
                if part.inline_data and part.inline_data.data:
                    images.append(base64.b64encode(part.inline_data.data).decode("ascii"))

        text = "".join(texts)
        if not text and not images:
            return [ResponseFragment()]

        fragments = [ResponseFragment(text=text, image=images[0] if images else None)]
        fragments.extend(ResponseFragment(image=image) for image in images[1:])
        return fragments

    async def stream_content(
        self,
        turns: list[Turn],
        model: str | None = None,
        temperature: float | None = None,
        **kwargs: Any
    ) -> StreamingResponse:
        """Start a streaming generation using Google Gemini.

        Args:
            turns: Conversation turns
            model: Model to use (overrides default)
            temperature: Sampling temperature
            **kwargs: Additional GenerateContentConfig parameters

        Returns:
            StreamingResponse that yields fragments and captures usage info
        """
        model_to_use = model or self._model
        contents = self._convert_turns(turns)

        config = types.GenerateContentConfig(
            temperature=temperature,
            safety_settings=DEFAULT_SAFETY_SETTINGS,
            **kwargs
        )

        response = StreamingResponse(self._stream_generator(model_to_use, contents, config))
        self._current_stream_response = response
        return response

    async def _stream_generator(
        self,
        model: str,
        contents: list[types.Content],
        config: types.GenerateContentConfig,
    ) -> AsyncIterator[ResponseFragment]:
        """Internal generator that yields fragments and captures usage from chunks."""
        usage = None
        owner = self._current_stream_response

        stream = await self._client.aio.models.generate_content_stream(
            model=model, contents=contents, config=config
        )
        async for chunk in stream:
            # usage_metadata arrives with the final chunk
            if chunk.usage_metadata:
                usage = {
                    "prompt_tokens": chunk.usage_metadata.prompt_token_count or 0,
                    "completion_tokens": chunk.usage_metadata.candidates_token_count or 0,
                    "total_tokens": chunk.usage_metadata.total_token_count or 0,
                }

            for fragment in self._extract_fragments(chunk):
                yield fragment

        if usage and owner is not None:
            owner.set_usage(usage)

    async def close(self) -> None:
        """Close the Gemini client.

        Note: The Google GenAI client doesn't require explicit closing,
        but we implement this for interface consistency.
        """
        pass

from collections.abc import AsyncIterator
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class StreamingResponse:
    """Wrapper for streaming model responses that captures usage info.

    Acts as an async iterator of response fragments while storing token
    usage that becomes available at the end of the stream.

    Usage:
        stream = await provider.stream_content(turns)
        async for fragment in stream:
            print(fragment.text, end="")
        # After iteration, usage is available
        print(stream.usage)  # {"prompt_tokens": 100, "completion_tokens": 50, ...}
    """

    def __init__(self, async_iter: AsyncIterator["ResponseFragment"]):
        """Initialize with an async iterator of fragments.

        Args:
            async_iter: Async iterator yielding response fragments
        """
        self._iter = async_iter
        self._usage: dict[str, Any] | None = None

    @property
    def usage(self) -> dict[str, Any] | None:
        """Get token usage info (available after iteration completes)."""
        return self._usage

    def set_usage(self, usage: dict[str, Any]) -> None:
        """Set token usage info (called by provider at end of stream)."""
        self._usage = usage

    def __aiter__(self) -> "StreamingResponse":
        return self

    async def __anext__(self) -> "ResponseFragment":
        return await self._iter.__anext__()


class Part(BaseModel):
    """One part of a turn: either text or an inline image."""

    model_config = ConfigDict(frozen=True)

    text: str | None = Field(default=None, description="Text content")
    data: str | None = Field(default=None, description="Base64 image payload without prefix")
    mime_type: str | None = Field(default=None, description="Media type of the image payload")

    @classmethod
    def from_text(cls, text: str) -> "Part":
        return cls(text=text)

    @classmethod
    def from_image(cls, data: str, mime_type: str) -> "Part":
        return cls(data=data, mime_type=mime_type)

    @property
    def is_image(self) -> bool:
        return self.data is not None


class Turn(BaseModel):
    """A single conversation turn sent to the model."""

    model_config = ConfigDict(frozen=True)

    role: Literal["user", "model"] = Field(description="Author of the turn")
    parts: tuple[Part, ...] = Field(default=(), description="Ordered content parts")


class ResponseFragment(BaseModel):
    """A partial response delivered by a streaming call."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(default="", description="Text delta")
    image: str | None = Field(default=None, description="Base64 image payload, if any")

    @property
    def has_content(self) -> bool:
        return bool(self.text) or self.image is not None

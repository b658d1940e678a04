from abc import ABC, abstractmethod
from typing import Any

from .models import StreamingResponse, Turn


class ModelProvider(ABC):
    """Abstract base class for hosted model providers.

    This module hides the design decision of which model service to use.
    Implementations must handle provider-specific details like:
    - API client setup and authentication
    - Turn and image part conversion to the wire format
    - Extracting text deltas and inline images from stream chunks

    Supports async context manager protocol for proper resource cleanup:
        async with provider:
            stream = await provider.stream_content(turns)
        # Automatically cleaned up
    """

    @property
    @abstractmethod
    def model(self) -> str:
        """Get the default model name."""

    @abstractmethod
    async def stream_content(
        self,
        turns: list[Turn],
        model: str | None = None,
        temperature: float | None = None,
        **kwargs: Any
    ) -> StreamingResponse:
        """Start a streaming generation.

        Args:
            turns: Ordered conversation turns, the last one being the new prompt
            model: Model to use (None uses provider's default)
            temperature: Sampling temperature (None uses the service default)
            **kwargs: Provider-specific parameters

        Returns:
            StreamingResponse that yields ResponseFragment objects and
            captures usage info. After iteration, access usage via
            stream_response.usage

        Raises:
            Exception: Provider-specific errors, before or during iteration
        """

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections or resources."""

    async def __aenter__(self) -> "ModelProvider":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit with automatic cleanup.

        Note: Suppresses "Event loop is closed" errors during cleanup.
        This is a known harmless race condition in httpx/anyio cleanup:
        https://github.com/encode/httpx/issues/914
        """
        try:
            await self.close()
        except RuntimeError as e:
            if "Event loop is closed" not in str(e):
                raise

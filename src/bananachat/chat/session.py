"""Chat session: the submit boundary between the UI and the core.

Validates a submission, enforces one exchange at a time, records the
user message and the streaming placeholder, then hands over to the
aggregator.
"""

from collections.abc import Sequence
from typing import Any

from ..conversation import ConversationStore, Message, MessageRole
from ..images import strip_data_uri
from ..llm import ModelProvider
from .aggregator import StreamAggregator
from .history import build_request


class ChatError(Exception):
    """Base class for chat submission errors."""


class EmptyPromptError(ChatError):
    """Submission has neither text nor images."""

    def __init__(self) -> None:
        super().__init__("Cannot submit an empty message")


class ExchangeInProgressError(ChatError):
    """A response is still streaming."""

    def __init__(self, message_id: str):
        super().__init__(f"Response {message_id[:8]} is still streaming")
        self.message_id = message_id


class ChatSession:
    """One conversation with a model provider.

    Example:
        async with ChatSession(provider) as session:
            reply = await session.submit("Describe this", [image_b64])
            print(reply.text, reply.latency)
    """

    def __init__(
        self,
        provider: ModelProvider,
        store: ConversationStore | None = None,
        aggregator: StreamAggregator | None = None,
    ) -> None:
        self._provider = provider
        self._store = store if store is not None else ConversationStore()
        self._aggregator = aggregator or StreamAggregator(provider, self._store)
        self._debug_callback: Any = None

    @property
    def store(self) -> ConversationStore:
        return self._store

    @property
    def provider(self) -> ModelProvider:
        return self._provider

    @property
    def is_loading(self) -> bool:
        """True while a model response is streaming."""
        return self._store.is_busy

    def set_debug_callback(self, callback: Any) -> None:
        """Set the debug callback and propagate it to the aggregator.

        Args:
            callback: Callable(level: str, component: str, message: str)
        """
        self._debug_callback = callback
        self._aggregator.set_debug_callback(callback)

    def _debug(self, level: str, component: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, component, message)

    async def submit(self, text: str, images: Sequence[str] = ()) -> Message | None:
        """Send a prompt and stream the reply into the store.

        Args:
            text: Prompt text
            images: Base64 images (a data URI prefix is stripped)

        Returns:
            The finalized model message

        Raises:
            EmptyPromptError: If text is blank and there are no images
            ExchangeInProgressError: If another response is still streaming
        """
        if not text.strip() and not images:
            raise EmptyPromptError()
        in_flight = self._store.streaming_message
        if in_flight is not None:
            raise ExchangeInProgressError(in_flight.id)

        history = self._store.messages
        payloads = tuple(strip_data_uri(image) for image in images)

        self._store.append(Message(role=MessageRole.USER, text=text, images=payloads))
        placeholder = Message(role=MessageRole.MODEL, is_streaming=True)
        started_at = self._aggregator.clock()
        self._store.append(placeholder)

        self._debug(
            "info",
            "Chat",
            f"Submitted prompt ({len(text)} chars, {len(payloads)} image(s), "
            f"{len(history)} prior message(s))"
        )
        turns = build_request(history, text, payloads)
        return await self._aggregator.run(placeholder.id, turns, started_at)

    async def close(self) -> None:
        """Close the underlying provider."""
        await self._provider.close()

    async def __aenter__(self) -> "ChatSession":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self._provider.__aexit__(exc_type, exc_val, exc_tb)

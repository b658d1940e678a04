"""Stream aggregation into the conversation store.

Hides how a provider's fragment stream becomes one evolving message:
- Text deltas are concatenated, image payloads appended in order
- Latency is taken once, on the first fragment received
- Provider failures become one in-band error fragment
- The streaming flag is always cleared at the end
"""

import time
from collections.abc import AsyncIterator, Callable
from contextlib import aclosing
from typing import Any

from ..conversation import ConversationStore, Message
from ..llm import ModelProvider, ResponseFragment, Turn

ERROR_MESSAGE = "[Error: Failed to generate response. Please check your connection or API key.]"


class StreamAggregator:
    """Drives one streaming exchange and reconciles it into the store.

    Only one exchange runs at a time, so the aggregator is the single
    writer of the in-flight message.

    Example:
        aggregator = StreamAggregator(provider, store)
        started = time.perf_counter()
        store.append(placeholder)
        final = await aggregator.run(placeholder.id, turns, started)
    """

    def __init__(
        self,
        provider: ModelProvider,
        store: ConversationStore,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self._provider = provider
        self._store = store
        self._clock = clock
        self._debug_callback: Any = None

    @property
    def clock(self) -> Callable[[], float]:
        """Monotonic clock (seconds) used for latency measurement."""
        return self._clock

    def set_debug_callback(self, callback: Any) -> None:
        """Set the debug callback for detailed execution logging.

        Args:
            callback: Callable(level: str, component: str, message: str)
                      level: 'debug', 'info', 'warning', 'error'
                      component: Source component name
                      message: Log message
        """
        self._debug_callback = callback

    def _debug(self, level: str, component: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, component, message)

    async def run(
        self,
        message_id: str,
        turns: list[Turn],
        started_at: float,
    ) -> Message | None:
        """Stream a response into the message with the given id.

        Args:
            message_id: Id of the streaming placeholder in the store
            turns: Outbound request turns
            started_at: Clock reading taken when the placeholder was created

        Returns:
            The finalized message (None if the id is not in the store)
        """
        text = ""
        images: list[str] = []
        latency: float | None = None
        count = 0

        self._debug("info", "Stream", f"Starting exchange for message {message_id[:8]}")
        try:
            async with aclosing(self._fragments(turns)) as fragments:
                async for fragment in fragments:
                    count += 1
                    if latency is None:
                        latency = (self._clock() - started_at) * 1000
                        self._debug("debug", "Stream", f"First fragment after {latency:.0f}ms")

                    if fragment.text:
                        text += fragment.text
                    if fragment.image is not None:
                        images.append(fragment.image)

                    self._store.update_by_id(
                        message_id,
                        text=text,
                        images=tuple(images),
                        latency=latency,
                    )
        finally:
            final = self._store.update_by_id(message_id, is_streaming=False)
            self._debug(
                "info",
                "Stream",
                f"Exchange finished: {count} fragment(s), {len(text)} chars, {len(images)} image(s)"
            )

        return final

    async def _fragments(self, turns: list[Turn]) -> AsyncIterator[ResponseFragment]:
        """Yield provider fragments, ending with an error fragment on failure."""
        delivered_text = False
        try:
            stream = await self._provider.stream_content(turns)
            async for fragment in stream:
                delivered_text = delivered_text or bool(fragment.text)
                yield fragment
        except Exception as e:
            self._debug("error", "LLM", f"Generation failed: {type(e).__name__}: {e}")
            prefix = "\n" if delivered_text else ""
            yield ResponseFragment(text=prefix + ERROR_MESSAGE)

"""Ordered, append-only conversation store.

Hides how the message sequence is held and how observers are notified.
The only mutations are append() and update_by_id(); readers always get
an immutable snapshot.
"""

from collections.abc import Callable, Iterator
from typing import Any

from .models import Message

Observer = Callable[[tuple[Message, ...]], None]

_FROZEN_FIELDS = ("id", "role")


class ConversationStore:
    """Holds the conversation and publishes snapshots to observers.

    At most one message may be streaming at a time. A message whose
    streaming flag has cleared is immutable from then on.

    Example:
        store = ConversationStore()
        unsubscribe = store.subscribe(lambda messages: print(len(messages)))
        store.append(Message(role=MessageRole.USER, text="Hello"))
        unsubscribe()
    """

    def __init__(self) -> None:
        self._messages: list[Message] = []
        self._observers: list[Observer] = []

    @property
    def messages(self) -> tuple[Message, ...]:
        """Snapshot of all messages in insertion order."""
        return tuple(self._messages)

    @property
    def streaming_message(self) -> Message | None:
        """The in-flight message, if any."""
        for message in reversed(self._messages):
            if message.is_streaming:
                return message
        return None

    @property
    def is_busy(self) -> bool:
        """Whether an exchange is currently streaming."""
        return self.streaming_message is not None

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(self.messages)

    def get(self, message_id: str) -> Message | None:
        """Look up a message by id."""
        index = self._index_of(message_id)
        return None if index is None else self._messages[index]

    def append(self, message: Message) -> tuple[Message, ...]:
        """Add a message at the tail.

        Args:
            message: The message to add

        Returns:
            The updated snapshot

        Raises:
            ValueError: If the id already exists, or if the message is
                streaming while another message is still streaming
        """
        if self._index_of(message.id) is not None:
            raise ValueError(f"Duplicate message id: {message.id}")
        if message.is_streaming and self.is_busy:
            raise ValueError("Another message is already streaming")

        self._messages.append(message)
        return self._notify()

    def update_by_id(self, message_id: str, **changes: Any) -> Message | None:
        """Replace a message with a copy that has the given fields overwritten.

        An unknown id is not an error: nothing happens and None is returned.

        Args:
            message_id: Id of the message to update
            **changes: Fields to overwrite

        Returns:
            The updated message, or None if the id is unknown

        Raises:
            ValueError: If a field name is unknown, or the update would
                change id or role, touch a finalized message, or change an
                already-set latency
        """
        index = self._index_of(message_id)
        if index is None:
            return None

        unknown = sorted(set(changes) - set(Message.model_fields))
        if unknown:
            raise ValueError(f"Unknown message field(s): {', '.join(unknown)}")

        current = self._messages[index]
        for name in _FROZEN_FIELDS:
            if name in changes and changes[name] != getattr(current, name):
                raise ValueError(f"Cannot change '{name}' of message {message_id}")
        if not current.is_streaming:
            raise ValueError(f"Message {message_id} is finalized")
        latency = changes.get("latency")
        if current.latency is not None and latency is not None and latency != current.latency:
            raise ValueError(f"Latency of message {message_id} is already set")
        if latency is None:
            changes.pop("latency", None)

        updated = Message.model_validate({**current.model_dump(), **changes})
        self._messages[index] = updated
        self._notify()
        return updated

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register an observer for snapshot updates.

        Args:
            observer: Called with the new snapshot after every mutation

        Returns:
            A callable that removes the observer
        """
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _index_of(self, message_id: str) -> int | None:
        for index, message in enumerate(self._messages):
            if message.id == message_id:
                return index
        return None

    def _notify(self) -> tuple[Message, ...]:
        snapshot = self.messages
        for observer in list(self._observers):
            observer(snapshot)
        return snapshot

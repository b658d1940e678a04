"""Conversation store module for bananachat.

Holds the ordered message log that the UI renders and the
aggregator updates while a response streams in.
"""

from .models import Message, MessageRole
from .store import ConversationStore, Observer

__all__ = [
    "ConversationStore",
    "Message",
    "MessageRole",
    "Observer",
]

"""
bananachat: a streaming multimodal chat client for hosted generative models.

Each module hides one design decision: the conversation store hides how
messages are held and observed, the chat module hides how streamed
fragments are folded into a message, and the llm module hides which
model service answers.
"""

__version__ = "0.1.0"

from .chat import ChatSession, StreamAggregator
from .conversation import ConversationStore, Message, MessageRole
from .llm import ModelProvider, create_model_provider

__all__ = [
    "ChatSession",
    "ConversationStore",
    "Message",
    "MessageRole",
    "ModelProvider",
    "StreamAggregator",
    "create_model_provider",
]

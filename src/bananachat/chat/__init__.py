"""Chat module for bananachat.

Turns a user submission into a streamed model reply:
- history.py: outbound request construction
- aggregator.py: folds streamed fragments into the in-flight message
- session.py: submission validation and the one-exchange-at-a-time gate
"""

from .aggregator import ERROR_MESSAGE, StreamAggregator
from .history import build_current_turn, build_history_turns, build_request
from .session import ChatError, ChatSession, EmptyPromptError, ExchangeInProgressError

__all__ = [
    "ERROR_MESSAGE",
    "ChatError",
    "ChatSession",
    "EmptyPromptError",
    "ExchangeInProgressError",
    "StreamAggregator",
    "build_current_turn",
    "build_history_turns",
    "build_request",
]

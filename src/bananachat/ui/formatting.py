"""Text formatting utilities for the TUI.

Hides how message headers, latency and attachment summaries are shown.
"""

from ..conversation import Message, MessageRole
from .config import MESSAGE_TIMESTAMP_FORMAT, NO_ATTACHMENTS_LABEL


def format_latency(latency: float | None) -> str:
    """Latency in whole milliseconds, or an empty string if unset."""
    if latency is None:
        return ""
    return f"{latency:.0f}ms"


def format_message_header(message: Message) -> str:
    """Header line for a rendered message.

    Examples:
        "> You [14:02:11]"
        "< Model [14:02:12]  312ms"
        "< Model [14:02:12]  streaming"
    """
    if message.role == MessageRole.USER:
        header = f"> You [{message.timestamp.strftime(MESSAGE_TIMESTAMP_FORMAT)}]"
    else:
        header = f"< Model [{message.timestamp.strftime(MESSAGE_TIMESTAMP_FORMAT)}]"

    latency = format_latency(message.latency)
    if latency:
        header += f"  {latency}"
    if message.is_streaming:
        header += "  streaming"
    return header


def format_attachments(count: int) -> str:
    """Summary of images waiting to be sent."""
    if count == 0:
        return NO_ATTACHMENTS_LABEL
    noun = "image" if count == 1 else "images"
    return f"{count} {noun} attached (ctrl+x removes last)"

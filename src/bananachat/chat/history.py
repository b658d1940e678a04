"""Outbound request construction.

Hides how the conversation is turned into model turns:
- Which history records are replayed
- That replayed history is text-only
- Image-before-text ordering of the current turn
"""

from collections.abc import Iterable, Sequence

from ..conversation import Message, MessageRole
from ..images import sniff_mime_type, strip_data_uri
from ..llm.models import Part, Turn

_ROLE_MAP = {MessageRole.USER: "user", MessageRole.MODEL: "model"}

# Replayed in place of a record that carried only images
IMAGE_PLACEHOLDER_TEXT = "[image]"


def build_history_turns(history: Iterable[Message]) -> list[Turn]:
    """Convert prior messages into text-only turns.

    Images from earlier turns are never replayed. A record holding only
    images is sent as IMAGE_PLACEHOLDER_TEXT so user and model turns keep
    alternating. Records with neither text nor images are skipped.

    Args:
        history: Messages preceding the current exchange, in order

    Returns:
        Turns in conversation order
    """
    turns = []
    for message in history:
        if message.text.strip():
            text = message.text
        elif message.images:
            text = IMAGE_PLACEHOLDER_TEXT
        else:
            continue
        turns.append(Turn(
            role=_ROLE_MAP[message.role],
            parts=(Part.from_text(text),)
        ))
    return turns


def build_current_turn(prompt: str, images: Sequence[str] = ()) -> Turn:
    """Build the user turn for the new prompt.

    Images come first, each with a media type sniffed from its payload,
    followed by the prompt text unless it is blank.
    """
    parts = []
    for image in images:
        data = strip_data_uri(image)
        parts.append(Part.from_image(data, sniff_mime_type(data)))
    if prompt.strip():
        parts.append(Part.from_text(prompt))
    return Turn(role="user", parts=tuple(parts))


def build_request(
    history: Iterable[Message],
    prompt: str,
    images: Sequence[str] = ()
) -> list[Turn]:
    """Build the complete ordered turn list for one exchange.

    Args:
        history: Messages recorded before this exchange
        prompt: The new prompt text
        images: Base64 images attached to the prompt

    Returns:
        History turns followed by the current user turn
    """
    turns = build_history_turns(history)
    turns.append(build_current_turn(prompt, images))
    return turns

"""Data models for the conversation store.

Message records are immutable; every change produces a new copy
that replaces the old one in the store.
"""

from datetime import datetime
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class MessageRole(str, Enum):
    """Author of a message."""

    USER = "user"
    MODEL = "model"


class Message(BaseModel):
    """A single message record in the conversation."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid4().hex, description="Opaque unique id")
    role: MessageRole = Field(description="Who wrote the message")
    text: str = Field(default="", description="Accumulated message text")
    images: tuple[str, ...] = Field(
        default=(),
        description="Base64 image payloads without data URI prefix, in arrival order"
    )
    timestamp: datetime = Field(default_factory=datetime.now)
    is_streaming: bool = Field(default=False, description="True while still receiving updates")
    latency: float | None = Field(
        default=None,
        description="Milliseconds from creation to the first received fragment"
    )

    @property
    def has_content(self) -> bool:
        """Whether the message carries any text or images."""
        return bool(self.text) or bool(self.images)

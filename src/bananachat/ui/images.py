"""Image display module for the TUI.

Hidden design decisions:
- Image rendering approach (textual-image picks Sixel/TGP/halfcell per terminal)
- Decoding base64 payloads into PIL images
- Image sizing within chat messages
"""

import io

from PIL import Image as PILImage
from textual.events import Click
from textual.message import Message
from textual.widgets import Static
from textual_image.renderable import Image as AutoRenderable
from textual_image.widget import Image as TextualImageWidget

from ..images import decode_image
from .config import IMAGE_PREVIEW_WIDTH


def load_image(data: str) -> PILImage.Image:
    """Decode a base64 payload into a PIL image.

    Raises:
        ValueError: If the payload is not a readable image
    """
    try:
        image = PILImage.open(io.BytesIO(decode_image(data)))
        image.load()
    except (OSError, PILImage.DecompressionBombError) as e:
        raise ValueError(f"Unreadable image: {e}") from e
    return image


class ImagePreview(TextualImageWidget, Renderable=AutoRenderable):
    """Inline image inside a chat message.

    Clicking posts Selected so the app can open the full-size viewer.
    """

    DEFAULT_CSS = f"""
    ImagePreview {{
        width: {IMAGE_PREVIEW_WIDTH};
        height: auto;
        margin: 1 1 0 0;
    }}
    """

    class Selected(Message):
        """Posted when a preview is clicked."""

        def __init__(self, data: str) -> None:
            super().__init__()
            self.data = data

    def __init__(self, data: str, *args, **kwargs) -> None:
        super().__init__(load_image(data), *args, **kwargs)
        self._data = data

    @property
    def data(self) -> str:
        """Base64 payload being shown."""
        return self._data

    def on_click(self, event: Click) -> None:
        event.stop()
        self.post_message(self.Selected(self._data))


def build_preview(data: str, classes: str = "message-image") -> TextualImageWidget | Static:
    """Build a preview widget, or an error placeholder for a broken payload."""
    try:
        return ImagePreview(data, classes=classes)
    except ValueError as e:
        return Static(f"[Image error: {e}]", markup=False, classes=f"{classes} image-placeholder")

"""Modal screens for the TUI.

This module hides the design decisions about:
- How a full-size image is presented
- How the user picks an image file to attach
- Keyboard shortcuts for dialogs
"""

from pathlib import Path

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Static
from textual_image.widget import Image as TextualImageWidget

from ..images import encode_image_file, sniff_mime_type
from .images import load_image


class ImageViewerScreen(ModalScreen[None]):
    """Full-size view of one image over a dimmed backdrop.

    Any of escape, q or a click on the close button dismisses it.
    """

    CSS = """
    ImageViewerScreen {
        align: center middle;
        background: $background 80%;
    }

    #image-viewer {
        width: 90%;
        height: 90%;
        border: tall $accent;
        background: $surface;
        padding: 0 1;
    }

    #image-viewer-title {
        width: 100%;
        height: 1;
        text-style: bold;
        color: $accent;
    }

    #image-viewer-image {
        width: 100%;
        height: 1fr;
    }

    #image-viewer-close {
        dock: bottom;
        width: 100%;
    }
    """

    BINDINGS = [
        Binding("escape", "close", "Close", show=False),
        Binding("q", "close", "Close", show=False),
    ]

    def __init__(self, data: str) -> None:
        super().__init__()
        self._data = data
        # Raises ValueError before the screen is pushed
        self._image = load_image(data)

    def compose(self) -> ComposeResult:
        with Vertical(id="image-viewer"):
            yield Static(f"Image ({sniff_mime_type(self._data)})", id="image-viewer-title")
            yield TextualImageWidget(self._image, id="image-viewer-image")
            yield Button("Close", id="image-viewer-close", variant="primary")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "image-viewer-close":
            self.dismiss(None)

    def action_close(self) -> None:
        self.dismiss(None)


class AttachImageScreen(ModalScreen[str | None]):
    """Dialog asking for an image path.

    Dismisses with the encoded image (prefix-free base64), or None when
    cancelled. Invalid paths keep the dialog open and show the error.
    """

    CSS = """
    AttachImageScreen {
        align: center middle;
        background: $background 70%;
    }

    #attach-dialog {
        width: 70;
        height: auto;
        border: tall $accent;
        background: $surface;
        padding: 1 2;
    }

    #attach-title {
        width: 100%;
        text-align: center;
        text-style: bold;
        color: $accent;
        padding: 0 0 1 0;
    }

    #attach-error {
        color: $error;
        height: auto;
    }

    #attach-buttons {
        width: 100%;
        height: 3;
        align: center middle;
        margin-top: 1;
    }

    #attach-buttons Button {
        margin: 0 1;
        min-width: 10;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel", show=False),
    ]

    def compose(self) -> ComposeResult:
        with Vertical(id="attach-dialog"):
            yield Static("Attach Image", id="attach-title")
            yield Input(placeholder="Path to an image file", id="attach-path")
            yield Static("", id="attach-error", markup=False)
            with Horizontal(id="attach-buttons"):
                yield Button("Attach", id="btn-attach", variant="success")
                yield Button("Cancel", id="btn-cancel", variant="error")

    def on_mount(self) -> None:
        self.query_one("#attach-path", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self._attach(event.value)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-attach":
            self._attach(self.query_one("#attach-path", Input).value)
        elif event.button.id == "btn-cancel":
            self.dismiss(None)

    def action_cancel(self) -> None:
        self.dismiss(None)

    def _attach(self, value: str) -> None:
        path = value.strip()
        if not path:
            return
        try:
            encoded = encode_image_file(Path(path))
        except (ValueError, OSError) as e:
            self.query_one("#attach-error", Static).update(str(e))
            return
        self.dismiss(encoded)

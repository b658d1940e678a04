"""Main Textual TUI application.

Orchestrates the UI components and routes user interaction to a ChatSession.
The conversation store is the single source of truth: every store change
is pushed into the history, status and input widgets.
"""

import asyncio
import contextlib

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Footer, Header

from ..chat import ChatError, ChatSession
from ..conversation import Message
from .config import LogLevel
from .images import ImagePreview
from .screens import AttachImageScreen, ImageViewerScreen
from .styles import APP_CSS
from .themes import BANANA_DARK
from .widgets import ChatHistoryWidget, ChatInputBar, DebugPanel, StatusPanel


class BananaChatApp(App):
    """Textual TUI for multimodal chat."""

    CSS = APP_CSS
    TITLE = "Nano Banana"

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit"),
        Binding("ctrl+o", "attach_image", "Attach"),
        Binding("ctrl+x", "remove_last_image", "Drop Image"),
        Binding("ctrl+r", "copy_last_response", "Copy Response"),
        Binding("ctrl+y", "copy_status", "Copy Status"),
        Binding("escape", "cancel_exchange", "Cancel"),
        Binding("ctrl+d", "toggle_debug", "Debug"),
    ]

    def __init__(self, session: ChatSession, log_level: str | None = None) -> None:
        super().__init__()
        self._session = session
        self._log_level = log_level
        self._current_worker = None
        self._unsubscribe = None

    @property
    def session(self) -> ChatSession:
        return self._session

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield ChatHistoryWidget(id="chat-history")
        yield DebugPanel(id="debug-panel")

        with Vertical(id="bottom-bar"):
            yield StatusPanel(id="status", model=self._session.provider.model)
            yield ChatInputBar(id="chat-input-bar")

        yield Footer()

    def on_mount(self) -> None:
        """Called when app is mounted."""
        self.register_theme(BANANA_DARK)
        self.theme = "banana-dark"

        log_panel = self.query_one("#debug-panel", DebugPanel)
        if self._log_level is not None:
            log_panel.log_level = LogLevel.from_string(self._log_level)
            log_panel.show()
            log_panel.info("TUI", f"Log panel enabled with level: {self._log_level.upper()}")

        self.sub_title = self._session.provider.model
        self._session.set_debug_callback(self._route_debug)
        self._unsubscribe = self._session.store.subscribe(self._on_store_changed)
        self._on_store_changed(self._session.store.messages)
        self.query_one("#chat-input-bar", ChatInputBar).focus_input()

    def on_unmount(self) -> None:
        """Stop listening to the store."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._session.set_debug_callback(None)

    def _route_debug(self, level: str, component: str, message: str) -> None:
        """Route debug messages to the log panel."""
        log_panel = self.query_one("#debug-panel", DebugPanel)
        if level == "debug":
            log_panel.debug(component, message)
        elif level == "info":
            log_panel.info(component, message)
        elif level == "warning":
            log_panel.warning(component, message)
        elif level == "error":
            log_panel.error(component, message)

    def _on_store_changed(self, messages: tuple[Message, ...]) -> None:
        self.query_one("#chat-history", ChatHistoryWidget).sync(messages)
        self.query_one("#status", StatusPanel).update_status(messages)
        self.query_one("#chat-input-bar", ChatInputBar).set_busy(self._session.is_loading)

    def on_chat_input_bar_submitted(self, event: ChatInputBar.Submitted) -> None:
        """Handle user input submission."""
        if self._session.is_loading:
            self.notify("A response is still streaming", severity="warning", timeout=2)
            return
        self._current_worker = self._run_exchange(event.text, event.images)

    @work(exclusive=True)
    async def _run_exchange(self, text: str, images: list[str]) -> None:
        """Run one exchange as a background async worker."""
        log_panel = self.query_one("#debug-panel", DebugPanel)
        log_panel.info("TUI", f"Sending: '{text[:50]}' with {len(images)} image(s)")
        try:
            reply = await self._session.submit(text, images)
        except ChatError as e:
            log_panel.warning("TUI", str(e))
            self.notify(str(e), severity="warning", timeout=3)
        except asyncio.CancelledError:
            log_panel.warning("TUI", "Exchange cancelled")
            self.notify("Cancelled", severity="warning", timeout=2)
            raise
        else:
            if reply is not None and reply.latency is not None:
                log_panel.info("TUI", f"Reply finished, first fragment after {reply.latency:.0f}ms")

    def on_image_preview_selected(self, event: ImagePreview.Selected) -> None:
        """Open the full-size viewer for a clicked image."""
        try:
            self.push_screen(ImageViewerScreen(event.data))
        except ValueError as e:
            self.notify(str(e), severity="error", timeout=3)

    def action_attach_image(self) -> None:
        """Ask for an image file and attach it to the next message."""
        def attach(encoded: str | None) -> None:
            if encoded is None:
                return
            self.query_one("#chat-input-bar", ChatInputBar).add_image(encoded)
            self.notify("Image attached", timeout=2)

        self.push_screen(AttachImageScreen(), callback=attach)

    def action_remove_last_image(self) -> None:
        """Drop the most recently attached image."""
        input_bar = self.query_one("#chat-input-bar", ChatInputBar)
        count = len(input_bar.images)
        if count == 0:
            self.notify("No images attached", severity="warning", timeout=2)
            return
        input_bar.remove_image(count - 1)

    def action_cancel_exchange(self) -> None:
        """Cancel the streaming exchange, keeping what has arrived."""
        if self._current_worker and self._current_worker.is_running:
            self._current_worker.cancel()

    def action_toggle_debug(self) -> None:
        """Toggle the log panel visibility."""
        log_panel = self.query_one("#debug-panel", DebugPanel)
        is_visible = log_panel.toggle()
        self.notify(f"Log panel {'shown' if is_visible else 'hidden'}", timeout=2)

    def action_copy_status(self) -> None:
        """Copy the status line to clipboard."""
        status = self.query_one("#status", StatusPanel)
        self.copy_to_clipboard(status.get_plain_text())
        self.notify("Status copied")

    def action_copy_last_response(self) -> None:
        """Copy last model response to clipboard."""
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        response = chat.get_last_response()
        if response:
            self.copy_to_clipboard(response)
            self.notify("Response copied")
        else:
            self.notify("No response to copy", severity="warning")


async def run_textual_tui(session: ChatSession, log_level: str | None = None) -> None:
    """Run the Textual TUI.

    Args:
        session: Chat session wrapping the model provider
        log_level: Log level for panel (debug/info/warning/error), None to hide
    """
    app = BananaChatApp(session=session, log_level=log_level)
    try:
        await app.run_async()
    except (KeyboardInterrupt, asyncio.CancelledError):
        pass
    finally:
        with contextlib.suppress(BaseException):
            await session.close()

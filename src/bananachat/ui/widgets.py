"""Custom Textual widgets for the TUI.

Hides widget implementation details:
- Rendering message records and patching them as they stream
- Input history and image attachments
- Status display formatting
- Log rendering and scrolling
"""

from datetime import datetime

from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.events import Click
from textual.message import Message as TextualMessage
from textual.widgets import Button, Markdown, RichLog, Static, TextArea

from ..conversation import Message, MessageRole
from .config import INPUT_HISTORY_MAX_SIZE, LOG_TIMESTAMP_FORMAT, STREAMING_PLACEHOLDER, LogLevel
from .formatting import format_attachments, format_latency, format_message_header
from .images import build_preview


def _copy_text(widget, text: str, label: str) -> None:
    """Copy to the system clipboard, falling back to the terminal (OSC 52)."""
    try:
        import pyperclip
        pyperclip.copy(text)
        widget.app.notify(f"{label} copied", timeout=2)
    except Exception:
        widget.app.copy_to_clipboard(text)
        widget.app.notify(f"{label} copied (terminal)", timeout=2)


class MessageView(Vertical):
    """One rendered message record.

    Created once per message id and patched in place while the message
    streams. Clicking the message copies its text.
    """

    def __init__(self, message: Message, *args, **kwargs) -> None:
        role_class = "user-message" if message.role == MessageRole.USER else "model-message"
        super().__init__(*args, classes=f"chat-message {role_class}", **kwargs)
        self._message = message
        self._image_count = 0

    @property
    def message(self) -> Message:
        return self._message

    def compose(self):
        yield Static(format_message_header(self._message), classes="message-header", markup=False)
        if self._message.role == MessageRole.USER:
            yield Static(self._body_text(), classes="message-content", markup=False)
        else:
            yield Markdown(self._body_text(), classes="message-content")
        yield Horizontal(classes="message-images")

    def on_mount(self) -> None:
        # Updates that arrived between construction and mount
        self._refresh_view()

    def update_message(self, message: Message) -> None:
        """Show a newer version of the same message."""
        self._message = message
        if self.is_mounted:
            self._refresh_view()

    def _body_text(self) -> str:
        if self._message.is_streaming and not self._message.text:
            return STREAMING_PLACEHOLDER
        return self._message.text

    def _refresh_view(self) -> None:
        self.query_one(".message-header", Static).update(format_message_header(self._message))
        # Static and Markdown both take plain strings
        self.query_one(".message-content").update(self._body_text())
        self.set_class(self._message.is_streaming, "-streaming")

        images = self._message.images
        if len(images) > self._image_count:
            container = self.query_one(".message-images", Horizontal)
            container.mount_all([build_preview(data) for data in images[self._image_count:]])
            self._image_count = len(images)

    def on_click(self, event: Click) -> None:
        """Copy message text to the clipboard when clicked."""
        event.stop()
        if self._message.text:
            _copy_text(self, self._message.text, "Message")


class ChatHistoryWidget(VerticalScroll):
    """Scrollable rendering of the conversation store.

    Fed with store snapshots through sync(); never mutates messages.
    """

    BORDER_TITLE = "Chat"
    BORDER_SUBTITLE = "Conversation"
    ALLOW_MAXIMIZE = True
    ALLOW_SELECT = True

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._views: dict[str, MessageView] = {}

    def compose(self):
        yield Static(
            "Start a conversation. Ctrl+O attaches an image, Ctrl+J sends.",
            id="empty-state",
        )

    def sync(self, messages: tuple[Message, ...]) -> None:
        """Bring the rendering in line with a store snapshot."""
        added = False
        for message in messages:
            view = self._views.get(message.id)
            if view is None:
                view = MessageView(message)
                self._views[message.id] = view
                self.mount(view)
                added = True
            elif view.message != message:
                view.update_message(message)

        if messages:
            for placeholder in self.query("#empty-state"):
                placeholder.remove()
            self.border_subtitle = f"{len(messages)} messages"
        if added or any(message.is_streaming for message in messages[-1:]):
            self.scroll_end(animate=False)

    def get_last_response(self) -> str | None:
        """Get the text of the last model message."""
        for view in reversed(list(self._views.values())):
            if view.message.role == MessageRole.MODEL and view.message.text:
                return view.message.text
        return None


class ChatInputBar(Vertical):
    """Chat input bar with attachments, a TextArea and Attach/Send buttons."""

    class Submitted(TextualMessage):
        """Message sent when user submits input."""

        def __init__(self, text: str, images: list[str]) -> None:
            super().__init__()
            self.text = text
            self.images = images

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._history: list[str] = []
        self._history_index: int = -1
        self._images: list[str] = []
        self._busy = False

    @property
    def images(self) -> list[str]:
        """Images attached to the next submission."""
        return list(self._images)

    def compose(self):
        yield Static(format_attachments(0), id="attachments")
        with Horizontal(id="input-row"):
            text_area = TextArea(id="chat-input", show_line_numbers=False)
            text_area.cursor_blink = False
            yield text_area
            yield Button("Attach", id="attach-btn").with_tooltip("Attach an image (Ctrl+O)")
            yield Button("Send", id="send-btn", variant="success").with_tooltip(
                "Submit message (Ctrl+J)"
            )

    def on_mount(self) -> None:
        text_area = self.query_one("#chat-input", TextArea)
        text_area.focus()
        text_area.highlight_cursor_line = False

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send-btn":
            self._submit()
        elif event.button.id == "attach-btn":
            self.app.run_action("attach_image")

    def on_key(self, event) -> None:
        """Handle keyboard shortcuts.

        Note: ctrl+enter cannot work in terminals (terminal doesn't pass
        ctrl/shift modifiers with Enter). Use ctrl+j as the submit shortcut.
        """
        if event.key == "ctrl+j":
            self._submit()
            event.prevent_default()
            event.stop()
        elif event.key == "up" and self._is_cursor_at_start():
            self._navigate_history(-1)
            event.prevent_default()
            event.stop()
        elif event.key == "down" and self._is_cursor_at_end():
            self._navigate_history(1)
            event.prevent_default()
            event.stop()

    def _is_cursor_at_start(self) -> bool:
        text_area = self.query_one("#chat-input", TextArea)
        return text_area.cursor_location == (0, 0)

    def _is_cursor_at_end(self) -> bool:
        text_area = self.query_one("#chat-input", TextArea)
        lines = text_area.text.split("\n")
        last_row = len(lines) - 1
        last_col = len(lines[-1]) if lines else 0
        return text_area.cursor_location == (last_row, last_col)

    def _navigate_history(self, direction: int) -> None:
        if not self._history:
            return
        text_area = self.query_one("#chat-input", TextArea)
        if direction < 0:  # Up
            if self._history_index == -1:
                self._history_index = len(self._history) - 1
            elif self._history_index > 0:
                self._history_index -= 1
        else:  # Down
            if self._history_index < len(self._history) - 1:
                self._history_index += 1
            else:
                self._history_index = -1
                text_area.text = ""
                return
        text_area.text = self._history[self._history_index]

    def _submit(self) -> None:
        if self._busy:
            self.app.notify("Wait for the current response to finish", severity="warning", timeout=2)
            return
        text_area = self.query_one("#chat-input", TextArea)
        value = text_area.text.strip()
        if not value and not self._images:
            return
        if value and (not self._history or self._history[-1] != value):
            self._history.append(value)
            del self._history[:-INPUT_HISTORY_MAX_SIZE]
        self._history_index = -1
        images = list(self._images)
        text_area.text = ""
        self.clear_images()
        self.post_message(self.Submitted(value, images))

    def add_image(self, data: str) -> None:
        """Attach an image to the next submission."""
        self._images.append(data)
        self._update_attachments()

    def remove_image(self, index: int) -> None:
        """Drop one attached image by position."""
        if 0 <= index < len(self._images):
            del self._images[index]
            self._update_attachments()

    def clear_images(self) -> None:
        self._images.clear()
        self._update_attachments()

    def set_busy(self, busy: bool) -> None:
        """Enable or disable sending while a response streams."""
        self._busy = busy
        send_btn = self.query_one("#send-btn", Button)
        send_btn.disabled = busy
        send_btn.label = "..." if busy else "Send"

    def _update_attachments(self) -> None:
        self.query_one("#attachments", Static).update(format_attachments(len(self._images)))

    def focus_input(self) -> None:
        """Focus the text input."""
        self.query_one("#chat-input", TextArea).focus()


class StatusPanel(Static):
    """One-line status: model, message count, last latency, busy state."""

    def __init__(self, *args, model: str = "unknown", **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._model = model
        self._messages = 0
        self._latency: float | None = None
        self._streaming = False

    def on_mount(self) -> None:
        self._update_display()

    def update_status(self, messages: tuple[Message, ...]) -> None:
        """Recompute the status line from a store snapshot."""
        self._messages = len(messages)
        self._streaming = any(message.is_streaming for message in messages)
        for message in reversed(messages):
            if message.role == MessageRole.MODEL and message.latency is not None:
                self._latency = message.latency
                break
        self._update_display()

    def _update_display(self) -> None:
        state = "[bold yellow]STREAMING[/]" if self._streaming else "[bold green]READY[/]"
        latency = format_latency(self._latency) or "-"
        parts = [
            state,
            f"[bold cyan]Model:[/] {self._model}",
            f"[bold magenta]Messages:[/] {self._messages}",
            f"[bold yellow]Latency:[/] {latency}",
        ]
        self.update("  ".join(parts))

    def get_plain_text(self) -> str:
        """Get status as plain text for clipboard."""
        state = "STREAMING" if self._streaming else "READY"
        latency = format_latency(self._latency) or "-"
        return f"{state}  Model: {self._model}  Messages: {self._messages}  Latency: {latency}"


class DebugPanel(RichLog):
    """Log panel for real-time tracing with level filtering.

    Shows timestamped log messages from all components.
    Supports standard log levels: DEBUG < INFO < WARNING < ERROR.
    Hidden by default, shown with --log-level flag or toggled with Ctrl+D.
    """

    BORDER_TITLE = "Log"
    BORDER_SUBTITLE = "Trace log"

    def __init__(self, *args, log_level: int = LogLevel.DEBUG, **kwargs) -> None:
        super().__init__(
            *args,
            markup=True,
            highlight=False,
            auto_scroll=True,
            wrap=False,
            **kwargs
        )
        self._log_level = log_level

    @property
    def log_level(self) -> int:
        """Current log level threshold."""
        return self._log_level

    @log_level.setter
    def log_level(self, level: int) -> None:
        self._log_level = level
        self._update_subtitle()

    def _update_subtitle(self) -> None:
        if self.display:
            self.border_subtitle = f"Level: {LogLevel.name(self._log_level)}"
        else:
            self.border_subtitle = "Hidden"

    def on_mount(self) -> None:
        """Hide by default."""
        self.display = False

    def log(
        self,
        component: str,
        message: str,
        level: int = LogLevel.DEBUG
    ) -> None:
        """Add a log entry if it meets the current level threshold.

        Args:
            component: Component name (TUI, Chat, Stream, LLM)
            message: Log message
            level: Log level (LogLevel.DEBUG, INFO, WARNING, ERROR)
        """
        if level < self._log_level:
            return

        timestamp = datetime.now().strftime(LOG_TIMESTAMP_FORMAT)

        level_colors = {
            LogLevel.DEBUG: "dim white",
            LogLevel.INFO: "cyan",
            LogLevel.WARNING: "yellow",
            LogLevel.ERROR: "red",
        }
        level_color = level_colors.get(level, "white")
        level_name = LogLevel.name(level)

        component_colors = {
            "TUI": "cyan",
            "Chat": "green",
            "Stream": "bright_yellow",
            "LLM": "magenta",
        }
        comp_color = component_colors.get(component, "white")

        self.write(
            f"[dim]{timestamp}[/] "
            f"[{level_color}]{level_name:<5}[/] "
            f"[{comp_color}]\\[{component}][/] {message}"
        )

    def debug(self, component: str, message: str) -> None:
        self.log(component, message, LogLevel.DEBUG)

    def info(self, component: str, message: str) -> None:
        self.log(component, message, LogLevel.INFO)

    def warning(self, component: str, message: str) -> None:
        self.log(component, message, LogLevel.WARNING)

    def error(self, component: str, message: str) -> None:
        self.log(component, message, LogLevel.ERROR)

    def show(self) -> None:
        self.display = True
        self._update_subtitle()

    def hide(self) -> None:
        self.display = False
        self.border_subtitle = "Hidden"

    def toggle(self) -> bool:
        """Toggle visibility. Returns new state."""
        if self.display:
            self.hide()
            return False
        self.show()
        return True

    def get_plain_text(self) -> str:
        """Get plain text content of the log for copying."""
        return "\n".join(line.text for line in self.lines)

    def on_click(self, event: Click) -> None:
        """Copy log content to clipboard when clicked."""
        event.stop()
        text = self.get_plain_text()
        if not text.strip():
            self.app.notify("Debug log is empty", timeout=2)
            return
        _copy_text(self, text, "Debug log")

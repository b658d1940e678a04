"""Terminal UI module for bananachat.

Provides a Textual-based TUI over a ChatSession.

Module structure (each module hides a design decision):
- widgets.py: Custom widgets (message rendering, input, status, log)
- images.py: Inline image previews
- screens.py: Modal dialogs (image viewer, attach image)
- formatting.py: Header and label text
- styles.py: CSS styling (layout decisions)
- themes.py: Color palettes and theme configuration
- app.py: Application orchestration (user interaction flow)
"""

from .app import BananaChatApp, run_textual_tui
from .config import LogLevel
from .widgets import ChatHistoryWidget, ChatInputBar, DebugPanel, MessageView, StatusPanel

__all__ = [
    "BananaChatApp",
    "ChatHistoryWidget",
    "ChatInputBar",
    "DebugPanel",
    "LogLevel",
    "MessageView",
    "StatusPanel",
    "run_textual_tui",
]

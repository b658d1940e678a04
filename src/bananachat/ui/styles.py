"""CSS styles for the TUI.

Hides layout and styling decisions from the application logic.
Uses Textual CSS features: nesting, pseudo-classes, variables.

Layout is a single column: conversation on top, an optional log panel,
then the status line and input bar.
"""

APP_CSS = """
/* ============================================
   Main Screen Layout - Single Column
   ============================================ */
Screen {
    layout: vertical;
    background: $background;
}

/* ============================================
   Chat History Panel - Primary Focus Area
   ============================================ */
#chat-history {
    height: 1fr;
    background: $panel;
    border: round $primary 60%;
    border-title-color: $primary;
    border-title-style: bold;
    border-title-align: left;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    scrollbar-gutter: stable;

    &:focus {
        border: round $primary;
    }

    &:focus-within {
        border: round $primary-lighten-1;
    }
}

#empty-state {
    width: 100%;
    height: auto;
    padding: 2 0;
    color: $text-muted;
    text-align: center;
}

/* ============================================
   Debug/Log Panel
   ============================================ */
#debug-panel {
    height: auto;
    min-height: 6;
    max-height: 14;
    background: $panel;
    border: round $warning 60%;
    border-title-color: $warning;
    border-title-style: bold;
    border-title-align: left;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    overflow-y: scroll;
    overflow-x: auto;
    scrollbar-gutter: stable;
    margin-top: 1;

    &:focus {
        border: round $warning;
    }
}

/* ============================================
   Bottom Bar - Status + Input
   ============================================ */
#bottom-bar {
    height: auto;
    padding: 1;
    background: $panel;
    border-top: solid $border;
}

#status {
    height: 1;
    padding: 0 2;
    margin-bottom: 1;
    background: $surface;
    border: none;
    color: $foreground;
}

/* ============================================
   Chat Input Bar - Attachments + Text Entry
   ============================================ */
ChatInputBar {
    height: auto;
    border: round $primary 60%;
    background: $panel;

    &:focus-within {
        border: round $primary;
    }
}

#attachments {
    height: 1;
    padding: 0 1;
    color: $text-muted;
}

#input-row {
    height: 5;
}

#chat-input {
    width: 1fr;
    height: 100%;
    border: none;
    padding: 0 1;
    background: transparent;

    &:focus {
        background: transparent;
    }
}

#attach-btn {
    width: 10;
    height: 100%;
    margin: 0 0 0 1;
    min-width: 8;
}

#send-btn {
    width: 10;
    height: 100%;
    margin: 0 0 0 1;
    min-width: 8;
    border: tall $success;
    background: $success;
    color: $background;
    text-style: bold;

    &:hover {
        background: $success-lighten-1;
        border: tall $success-lighten-1;
    }

    &:disabled {
        background: $surface;
        border: tall $border;
        color: $text-muted;
    }
}

/* ============================================
   Chat Messages - Conversation Display
   ============================================ */
.chat-message {
    width: 100%;
    height: auto;
    margin: 0 0 1 0;
    padding: 1 2;
    border: none;
    background: transparent;
}

/* User messages - Banana accent */
.user-message {
    border-left: tall $primary;
    background: $primary 8%;

    & .message-header {
        color: $primary;
        text-style: bold;
    }

    &:hover {
        background: $primary 12%;
    }
}

/* Model messages - Violet accent */
.model-message {
    border-left: tall $secondary;
    background: $secondary 8%;

    & .message-header {
        color: $secondary;
        text-style: bold;
    }

    &:hover {
        background: $secondary 12%;
    }

    &.-streaming {
        border-left: tall $warning;

        & .message-header {
            color: $warning;
        }
    }
}

.message-header {
    height: auto;
    padding: 0;
}

.message-content {
    height: auto;
    padding: 0;
    margin: 0;
    color: $foreground;
}

.message-images {
    height: auto;
    width: 100%;
}

.image-placeholder {
    width: auto;
    height: auto;
    color: $error;
    padding: 0 1;
}

/* ============================================
   Notification Toasts
   ============================================ */
Toast {
    background: $surface;
    border: tall $border;
    padding: 0 1;

    &.-information {
        border: tall $primary;
        background: $primary 12%;
        color: $foreground;
    }

    &.-error {
        border: tall $error;
        background: $error 12%;
        color: $foreground;
    }

    &.-warning {
        border: tall $warning;
        background: $warning 12%;
        color: $foreground;
    }
}

* {
    scrollbar-background: $panel;
    scrollbar-color: $surface-lighten-1;
    scrollbar-color-hover: $primary 50%;
    scrollbar-color-active: $primary;
    scrollbar-size: 1 1;
}

Header {
    background: $panel;
    color: $foreground;
    dock: top;
    height: 1;
}

HeaderTitle {
    color: $primary;
    text-style: bold;
}

Footer {
    background: $panel;
    height: auto;
}

/* ============================================
   Markdown Content Styling
   ============================================ */
Markdown {
    margin: 0;
    padding: 0;
}

MarkdownH1 {
    color: $primary;
    text-style: bold;
    margin: 1 0;
}

MarkdownH2 {
    color: $secondary;
    text-style: bold;
    margin: 1 0;
}

MarkdownFence {
    background: $panel;
    border: round $border;
    margin: 1 0;
    padding: 1;
}
"""

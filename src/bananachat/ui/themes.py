"""Theme definitions for the TUI.

This module hides the design decisions about:
- Color palettes and visual appearance
- Theme variables (borders, scrollbars, etc.)

To add a new theme, define it here and register in the app.
"""

from textual.theme import Theme

# Dark obsidian surfaces with a banana-yellow accent
BANANA_DARK = Theme(
    name="banana-dark",
    primary="#facc15",      # Banana 400 - main accent
    secondary="#a78bfa",    # Violet - model messages
    accent="#fde047",       # Banana 300 - highlights
    foreground="#f4f4f5",   # Zinc 100
    background="#09090b",   # Obsidian
    success="#22c55e",      # Green - online/success
    warning="#fb923c",      # Orange - warnings
    error="#f87171",        # Red - errors
    surface="#18181b",      # Charcoal
    panel="#111113",
    dark=True,
    variables={
        "block-cursor-foreground": "#09090b",
        "block-cursor-background": "#facc15",
        "block-cursor-text-style": "bold",
        "block-hover-background": "#27272a 20%",

        "input-cursor-background": "#facc15",
        "input-cursor-foreground": "#09090b",
        "input-selection-background": "#facc15 30%",

        "border": "#3f3f46",
        "border-blurred": "#27272a",

        "scrollbar": "#27272a",
        "scrollbar-hover": "#3f3f46",
        "scrollbar-active": "#facc15",
        "scrollbar-background": "#111113",
        "scrollbar-corner-color": "#111113",

        "footer-foreground": "#a1a1aa",
        "footer-background": "#09090b",
        "footer-key-foreground": "#facc15",
        "footer-key-background": "#27272a",
        "footer-description-foreground": "#a1a1aa",

        "text-muted": "#71717a",
        "text-disabled": "#3f3f46",
    },
)

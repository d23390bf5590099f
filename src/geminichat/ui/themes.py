"""Theme definitions for the TUI.

This module hides the design decisions about:
- Color palettes and visual appearance
- Theme variables (borders, scrollbars, etc.)

To add a new theme, define it here and register in the app.
"""

from textual.theme import Theme

# Light palette: blue user turns, red model turns on a warm background
GEMINI_LIGHT = Theme(
    name="gemini-light",
    primary="#2566bc",      # Blue - user turns, header, send button
    secondary="#dc2626",    # Red - model turns
    accent="#f59e0b",       # Amber - highlights
    foreground="#1f2937",   # Dark text
    background="#fef6f6",   # Warm page background
    success="#16a34a",
    warning="#d97706",
    error="#b91c1c",
    surface="#ffffff",      # Card surface
    panel="#f9fafb",
    dark=False,
    variables={
        "border": "#d1d5db",
        "border-blurred": "#e5e7eb",

        "scrollbar": "#e5e7eb",
        "scrollbar-hover": "#d1d5db",
        "scrollbar-active": "#2566bc",
        "scrollbar-background": "#f9fafb",

        "footer-foreground": "#374151",
        "footer-background": "#e5e7eb",
        "footer-key-foreground": "#2566bc",

        "text-muted": "#6b7280",
        "text-error": "#b91c1c",

        "input-selection-background": "#2566bc 30%",
    },
)

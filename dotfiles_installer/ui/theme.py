"""
Styles for installer output.

Step lines, prompts and tables refer to these names in rich markup
(``[step]Installing gpg...[/]``), never to raw colors.
"""

from rich.style import Style
from rich.theme import Theme

SYMBOLS = {
    "success": "✓",
    "error": "✗",
    "warning": "⚠",
    "bullet": "•",
    "prompt": "❯",
}

COLORS = {
    "success": "#22c55e",
    "error": "#ef4444",
    "warning": "#eab308",
    "step": "#3b82f6",
    "detail": "#6b7280",
    "label": "#9ca3af",
    "value": "#ffffff",
    "choice": "#fbbf24",
    "spinner": "#8b5cf6",
    "border": "#4b5563",
}

INSTALLER_THEME = Theme(
    {
        "success": Style(color=COLORS["success"], bold=True),
        "error": Style(color=COLORS["error"], bold=True),
        "warning": Style(color=COLORS["warning"], bold=True),
        # an operation in flight
        "step": Style(color=COLORS["step"]),
        # timings, hints and other secondary text
        "detail": Style(color=COLORS["detail"], dim=True),
        "label": Style(color=COLORS["label"]),
        "value": Style(color=COLORS["value"]),
        # the default entry of a numbered choice
        "choice": Style(color=COLORS["choice"], bold=True),
        "spinner": Style(color=COLORS["spinner"], bold=True),
        "border": Style(color=COLORS["border"]),
    }
)

"""Shared rich console for the installer's user-facing messages."""

from typing import Dict, Optional

from rich.console import Console as RichConsole
from rich.panel import Panel
from rich.table import Table

from .theme import INSTALLER_THEME, SYMBOLS


class InstallerConsole:
    """Process-wide console pair.

    Results and tables go to stdout. Errors and recovery hints go to stderr
    so that ``dotfiles-installer compatibility > report.txt`` still shows
    failures on the terminal.
    """

    _instance: Optional["InstallerConsole"] = None

    def __new__(cls) -> "InstallerConsole":
        if cls._instance is None:
            instance = super().__new__(cls)
            instance._out = RichConsole(theme=INSTALLER_THEME)
            instance._err = RichConsole(theme=INSTALLER_THEME, stderr=True)
            cls._instance = instance
        return cls._instance

    @property
    def rich(self) -> RichConsole:
        return self._out

    @property
    def rich_stderr(self) -> RichConsole:
        return self._err

    def print(self, *args, **kwargs) -> None:
        self._out.print(*args, **kwargs)

    def blank(self) -> None:
        self._out.print()

    def success(self, message: str) -> None:
        self._out.print(f"[success]{SYMBOLS['success']} {message}[/]")

    def warning(self, message: str) -> None:
        self._out.print(f"[warning]{SYMBOLS['warning']}  {message}[/]")

    def error(self, message: str, details: Optional[str] = None) -> None:
        self._err.print(f"[error]{SYMBOLS['error']} {message}[/]")
        if details:
            self._err.print(f"  [detail]{details}[/]")

    def detail(self, message: str) -> None:
        self._out.print(f"  [detail]{message}[/]")

    def summary(self, title: str, fields: Dict[str, str]) -> None:
        """Print a bordered two-column summary, one row per field."""
        grid = Table.grid(padding=(0, 2))
        grid.add_column(style="label")
        grid.add_column(style="value")
        for name, value in fields.items():
            grid.add_row(name, value)
        self._out.print(Panel(grid, title=f"[success]{title}[/]", title_align="left", border_style="border"))


console = InstallerConsole()

"""Output utilities for the installer CLI.

Errors go to stderr with their recovery hint; missing prerequisites are
listed together with how to install each of them.
"""

from dotfiles_installer.compatibility import missing_prerequisite_hints
from dotfiles_installer.errors import IncompatibleError, InstallerError
from dotfiles_installer.ui import SYMBOLS, console


def print_error(error: InstallerError) -> None:
    """Print a surfaced error and whatever recovery advice it carries."""
    console.error(str(error), details=error.hint)
    if isinstance(error, IncompatibleError) and error.host_info is not None:
        print_missing_prerequisites(error.host_info)


def print_missing_prerequisites(host) -> None:
    hints = missing_prerequisite_hints(host)
    if not hints:
        return
    err = console.rich_stderr
    err.print()
    err.print("[warning]Missing prerequisites and how to install them:[/]")
    for hint in hints:
        err.print(f"  [label]{SYMBOLS['bullet']}[/] {hint}")

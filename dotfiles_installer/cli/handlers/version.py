"""Version command handler."""

import argparse
import platform

from dotfiles_installer import __version__
from dotfiles_installer.ui import console


class VersionHandler:
    """Handler for the version command."""

    def show(self) -> int:
        console.print(f"[bold]dotfiles-installer[/] {__version__}")
        console.detail(f"Platform: {platform.system().lower()}/{platform.machine().lower()}")
        console.detail(f"Python:   {platform.python_version()}")
        return 0


def add_version_parser(subparsers, parents=()) -> argparse.ArgumentParser:
    """Add version parser to subparsers."""
    return subparsers.add_parser("version", help="Show version information", parents=list(parents))

"""Installer UI - themed console, progress reporting and prompts."""

from .console import InstallerConsole, console
from .progress import NoopProgress, PlainProgress, ProgressReporter, SpinnerProgress, operation, paused
from .prompts import GpgKeySelector, PrerequisiteSelector, confirm, multi_select, select
from .theme import INSTALLER_THEME, SYMBOLS

__all__ = [
    "console", "InstallerConsole", "SYMBOLS", "INSTALLER_THEME",
    "ProgressReporter", "SpinnerProgress", "PlainProgress", "NoopProgress", "operation", "paused",
    "GpgKeySelector", "PrerequisiteSelector", "confirm", "select", "multi_select",
]

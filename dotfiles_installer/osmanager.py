"""
Operating-system queries: programs on PATH, the current user and the
process environment.
"""

import getpass
import logging
import os
import pwd
import re
import shutil
from pathlib import Path
from typing import Callable

from dotfiles_installer.errors import CommandError
from dotfiles_installer.runner import CommandRunner, DisplayMode, RunOptions

logger = logging.getLogger(__name__)

VERSION_PATTERN = re.compile(r"(\d+\.\d+(?:\.\d+)?)")


def extract_version(output: str) -> str | None:
    """Return the first dotted version number found in command output."""
    match = VERSION_PATTERN.search(output or "")
    return match.group(1) if match else None


class ProgramQuery:
    """Locates programs and reads their versions."""

    def __init__(self, runner: CommandRunner | None = None):
        self.runner = runner or CommandRunner()

    def get_program_path(self, program: str) -> str | None:
        return shutil.which(program)

    def program_exists(self, program: str) -> bool:
        if not program:
            return False
        return self.get_program_path(program) is not None

    def get_program_version(
        self,
        program: str,
        extractor: Callable[[str], str | None] = extract_version,
        query_args: tuple[str, ...] = ("--version",),
    ) -> str | None:
        """Run `<program> --version` and extract a version string.

        Returns None when the program is missing or exits non-zero.
        """
        try:
            result = self.runner.run(program, list(query_args), RunOptions(capture=True))
        except CommandError:
            return None
        if not result.ok:
            return None
        return extractor(result.stdout)


class UserManager:
    """Current user, home directories and login shell."""

    def __init__(self, runner: CommandRunner | None = None):
        self.runner = runner or CommandRunner()

    def get_home_dir(self) -> Path:
        return Path(os.environ.get("HOME") or Path.home())

    def get_config_dir(self) -> Path:
        """The config home dotfiles tools expect, always ~/.config."""
        return self.get_home_dir() / ".config"

    def get_current_username(self) -> str:
        return os.environ.get("USER") or getpass.getuser()

    def get_user_shell(self, username: str) -> str:
        return pwd.getpwnam(username).pw_shell

    def set_user_shell(self, username: str, shell_path: str) -> None:
        result = self.runner.run(
            "chsh", ["-s", shell_path, username], RunOptions(display_mode=DisplayMode.PASSTHROUGH)
        )
        if not result.ok:
            raise CommandError(f"chsh exited with code {result.exit_code}")


def prepend_to_path(directory: str) -> str:
    """Prepend a directory to PATH in the current process, without duplicates.

    Returns:
        The new PATH value
    """
    parts = [p for p in os.environ.get("PATH", "").split(os.pathsep) if p and p != directory]
    new_path = os.pathsep.join([directory] + parts)
    os.environ["PATH"] = new_path
    logger.debug(f"PATH updated with {directory}")
    return new_path

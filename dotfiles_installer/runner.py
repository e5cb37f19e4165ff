"""
Process execution for the installer.

All external commands (package managers, brew, gpg, chezmoi) go through
CommandRunner so that output handling, environment merging and timeouts
behave the same everywhere.
"""

import logging
import os
import shlex
import signal
import subprocess
import time
from dataclasses import dataclass, field
from enum import Enum

from dotfiles_installer.errors import CommandError, CommandTimeoutError

logger = logging.getLogger(__name__)


class DisplayMode(Enum):
    """How child process output is presented to the user."""

    PROGRESS = "progress"  # Spinner shown, child output discarded
    PLAIN = "plain"  # Plain status lines, child output discarded
    PASSTHROUGH = "passthrough"  # Child output streamed to the terminal

    @property
    def discards_output(self) -> bool:
        return self is not DisplayMode.PASSTHROUGH


@dataclass
class CommandResult:
    """Outcome of a finished command."""

    exit_code: int
    stdout: str = ""
    stderr: str = ""
    duration: float = 0.0

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


@dataclass
class RunOptions:
    """Per-invocation options for CommandRunner.run.

    Attributes:
        display_mode: Overrides the runner's default display mode
        env: Extra environment variables, merged over the current environment
        cwd: Working directory for the child
        input: Text written to the child's stdin
        timeout: Seconds before the child is killed
        capture: Capture stdout even when the display mode would discard it

    Children share the installer's terminal so sudo, gpg and chsh can
    prompt. Only a command with a timeout that does not stream to the
    terminal gets its own session, so that its whole process group can be
    killed on expiry.
    """

    display_mode: DisplayMode | None = None
    env: dict[str, str] = field(default_factory=dict)
    cwd: str | None = None
    input: str | None = None
    timeout: float | None = None
    capture: bool = False


class CommandRunner:
    """Runs external commands with a uniform output and timeout policy."""

    def __init__(self, display_mode: DisplayMode = DisplayMode.PLAIN):
        self.display_mode = display_mode

    def run(self, name: str, args: list[str] | None = None, options: RunOptions | None = None) -> CommandResult:
        """Run a command and wait for it to finish.

        Args:
            name: Executable name or path
            args: Command arguments
            options: Optional RunOptions

        Returns:
            CommandResult; a non-zero exit code is returned, not raised

        Raises:
            CommandError: If the executable cannot be started
            CommandTimeoutError: If the timeout expires
        """
        options = options or RunOptions()
        argv = [name] + list(args or [])
        mode = options.display_mode or self.display_mode

        if options.capture:
            stdout, stderr = subprocess.PIPE, subprocess.PIPE
        elif mode.discards_output:
            stdout, stderr = subprocess.DEVNULL, subprocess.PIPE
        else:
            stdout, stderr = None, None

        env = None
        if options.env:
            env = {**os.environ, **options.env}

        isolated = options.timeout is not None and mode is not DisplayMode.PASSTHROUGH

        logger.debug(f"Running: {shlex.join(argv)}")
        start = time.monotonic()

        try:
            proc = subprocess.Popen(
                argv,
                stdin=subprocess.PIPE if options.input is not None else None,
                stdout=stdout,
                stderr=stderr,
                env=env,
                cwd=options.cwd,
                text=True,
                start_new_session=isolated,
            )
        except FileNotFoundError as e:
            raise CommandError(f"command not found: {name}") from e
        except PermissionError as e:
            raise CommandError(f"permission denied executing {name}") from e

        try:
            out, err = proc.communicate(input=options.input, timeout=options.timeout)
        except subprocess.TimeoutExpired:
            self._kill(proc, isolated)
            raise CommandTimeoutError(
                f"command '{shlex.join(argv)}' timed out after {options.timeout}s"
            )
        except KeyboardInterrupt:
            self._kill(proc, isolated)
            raise

        duration = time.monotonic() - start
        logger.debug(f"Exit code {proc.returncode} after {duration:.2f}s: {name}")
        return CommandResult(
            exit_code=proc.returncode,
            stdout=out or "",
            stderr=err or "",
            duration=duration,
        )

    @staticmethod
    def _kill(proc: subprocess.Popen, isolated: bool) -> None:
        """Kill the child, and its whole process group when it has its own session."""
        if not isolated:
            proc.kill()
            # grandchildren may still hold our pipes open, so do not drain them
            proc.wait()
            return
        try:
            os.killpg(proc.pid, signal.SIGKILL)
        except (ProcessLookupError, PermissionError):
            proc.kill()
        proc.communicate()

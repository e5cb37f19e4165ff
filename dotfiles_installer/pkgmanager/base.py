"""
Package manager abstraction.

Concrete adapters own their command construction; this base class holds
the shared plumbing for running commands and turning failures into
PackageManagerError.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

import semantic_version as sv

from dotfiles_installer.errors import CommandError, PackageManagerError
from dotfiles_installer.privilege import Escalator
from dotfiles_installer.runner import CommandResult, CommandRunner, DisplayMode, RunOptions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackageRequest:
    """A concrete package to install, produced by the resolver."""

    name: str
    type: str = ""
    constraint_text: str = ""
    version_constraint: sv.NpmSpec | None = field(default=None, compare=False)


@dataclass(frozen=True)
class PackageInfo:
    """An installed package."""

    name: str
    version: str = ""


@dataclass(frozen=True)
class PackageManagerInfo:
    name: str
    version: str


class PackageManager(ABC):
    """Uniform interface over apt, brew and dnf."""

    name: str = ""
    escalates: bool = True

    def __init__(
        self,
        runner: CommandRunner | None = None,
        escalator: Escalator | None = None,
        display_mode: DisplayMode = DisplayMode.PLAIN,
    ):
        self.runner = runner or CommandRunner(display_mode)
        self.escalator = escalator or Escalator()
        self.display_mode = display_mode

    @abstractmethod
    def get_info(self) -> PackageManagerInfo:
        """Name and version of the package manager itself."""

    @abstractmethod
    def install_package(self, request: PackageRequest) -> None:
        pass

    @abstractmethod
    def uninstall_package(self, request: PackageRequest) -> None:
        pass

    @abstractmethod
    def is_package_installed(self, request: PackageRequest) -> bool:
        pass

    @abstractmethod
    def list_installed_packages(self) -> list[PackageInfo]:
        pass

    @abstractmethod
    def get_package_version(self, name: str) -> str | None:
        pass

    def _warn_unenforced_constraint(self, request: PackageRequest) -> None:
        if request.constraint_text:
            logger.warning(
                f"{self.name} cannot pin versions; installing the latest {request.name} "
                f"(requested {request.constraint_text})"
            )

    def _run(
        self,
        command: str,
        args: list[str],
        *,
        escalate: bool = False,
        capture: bool = False,
        env: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> CommandResult:
        if escalate and self.escalates:
            command, args = self.escalator.escalate(command, args)
        options = RunOptions(
            display_mode=self.display_mode,
            env=env or {},
            capture=capture,
            timeout=timeout,
        )
        try:
            return self.runner.run(command, args, options)
        except CommandError as e:
            raise PackageManagerError(f"{self.name}: {e}", exit_code=127) from e

    def _run_checked(self, command: str, args: list[str], action: str, **kwargs) -> CommandResult:
        """Run a command and raise PackageManagerError on a non-zero exit."""
        result = self._run(command, args, **kwargs)
        if not result.ok:
            raise PackageManagerError(
                f"failed to {action} (exit code {result.exit_code})",
                exit_code=result.exit_code,
                stderr=result.stderr,
            )
        return result

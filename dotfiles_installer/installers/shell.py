"""
Shell installation and (on explicit request) login-shell change.
"""

import logging
import os

from dotfiles_installer import filesystem
from dotfiles_installer.errors import CommandError, FilesystemError, SubsystemInstallError
from dotfiles_installer.installers.base import SubsystemInstaller
from dotfiles_installer.osmanager import ProgramQuery, UserManager
from dotfiles_installer.pkgmanager import PackageManager, PackageRequest
from dotfiles_installer.privilege import Escalator
from dotfiles_installer.runner import CommandRunner, RunOptions

logger = logging.getLogger(__name__)

ETC_SHELLS = "/etc/shells"


class ShellInstaller(SubsystemInstaller):
    """Makes sure the requested shell binary is available."""

    def __init__(
        self,
        shell_name: str,
        program_query: ProgramQuery | None = None,
        package_manager: PackageManager | None = None,
    ):
        super().__init__()
        self.shell_name = shell_name
        self.name = shell_name
        self.program_query = program_query or ProgramQuery()
        self.package_manager = package_manager
        # Name of the package manager that installed the shell during this run
        self.installed_with: str | None = None

    def _probe(self) -> bool:
        return self.program_query.program_exists(self.shell_name)

    def _install(self) -> None:
        if self.package_manager is None:
            raise SubsystemInstallError(
                f"{self.shell_name} is missing and no package manager is available to install it",
                hint=f"Install {self.shell_name} manually and re-run the installer",
            )
        self.package_manager.install_package(PackageRequest(name=self.shell_name))
        self.installed_with = self.package_manager.name


class ShellChanger:
    """Sets the user's login shell."""

    def __init__(
        self,
        shell_name: str,
        brew_path: str = "",
        program_query: ProgramQuery | None = None,
        user_manager: UserManager | None = None,
        runner: CommandRunner | None = None,
        escalator: Escalator | None = None,
        shells_file: str = ETC_SHELLS,
    ):
        self.shell_name = shell_name
        self.brew_path = brew_path
        self.program_query = program_query or ProgramQuery()
        self.user_manager = user_manager or UserManager()
        self.runner = runner or CommandRunner()
        self.escalator = escalator or Escalator()
        self.shells_file = shells_file

    def get_shell_path(self) -> str:
        """Absolute path of the shell, preferring a brew-installed copy."""
        if self.brew_path:
            path = os.path.join(os.path.dirname(self.brew_path), self.shell_name)
        else:
            path = self.program_query.get_program_path(self.shell_name) or ""
        if not path or not filesystem.is_executable(path):
            raise SubsystemInstallError(f"shell binary not found: {path or self.shell_name}")
        return path

    def is_current_default(self) -> bool:
        username = self.user_manager.get_current_username()
        current = self.user_manager.get_user_shell(username)
        logger.debug(f"Current shell: {current}, target shell: {self.get_shell_path()}")
        return current == self.get_shell_path()

    def set_as_default(self) -> None:
        shell_path = self.get_shell_path()
        try:
            if self.is_current_default():
                logger.debug(f"{shell_path} is already the default shell")
                return
        except KeyError as e:
            logger.warning(f"Failed to check the current default shell: {e}")

        if self.escalator.running_as_root:
            logger.warning("Running as root - the shell change affects the root user")

        self._ensure_listed(shell_path)
        username = self.user_manager.get_current_username()
        try:
            self.user_manager.set_user_shell(username, shell_path)
        except CommandError as e:
            raise SubsystemInstallError(f"failed to set default shell: {e}") from e

    def _ensure_listed(self, shell_path: str) -> None:
        try:
            content = filesystem.read_text(self.shells_file)
        except FilesystemError:
            content = ""
        if any(line.strip() == shell_path for line in content.splitlines()):
            return

        logger.info(f"Adding {shell_path} to {self.shells_file}")
        command, args = self.escalator.escalate("tee", ["-a", self.shells_file])
        result = self.runner.run(command, args, RunOptions(input=shell_path + "\n", capture=True))
        if not result.ok:
            raise SubsystemInstallError(
                f"failed to append {shell_path} to {self.shells_file}",
                hint=f"Add {shell_path} to {self.shells_file} manually",
            )

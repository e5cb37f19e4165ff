"""
Homebrew bootstrap.

Brew is found (or installed) at the canonical prefix for the platform and
its bin directory is put at the front of PATH so later steps can use it.
"""

import logging
import os

from dotfiles_installer import filesystem
from dotfiles_installer.errors import CommandError, SubsystemInstallError
from dotfiles_installer.host import HostInfo
from dotfiles_installer.http import HTTPClient
from dotfiles_installer.installers.base import SubsystemInstaller
from dotfiles_installer.osmanager import prepend_to_path
from dotfiles_installer.runner import CommandRunner, RunOptions

logger = logging.getLogger(__name__)

BREW_INSTALL_SCRIPT_URL = "https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh"

LINUX_BREW_PATH = "/home/linuxbrew/.linuxbrew/bin/brew"
DARWIN_ARM_BREW_PATH = "/opt/homebrew/bin/brew"
DARWIN_INTEL_BREW_PATH = "/usr/local/bin/brew"

BREW_INSTALL_TIMEOUT = 30 * 60


def brew_path_for(host: HostInfo) -> str:
    """Canonical brew binary location for the host's OS and architecture."""
    if host.os == "darwin":
        return DARWIN_ARM_BREW_PATH if host.arch == "arm64" else DARWIN_INTEL_BREW_PATH
    return LINUX_BREW_PATH


class BrewInstaller(SubsystemInstaller):
    name = "brew"

    def __init__(
        self,
        host: HostInfo,
        runner: CommandRunner | None = None,
        http_client: HTTPClient | None = None,
    ):
        super().__init__()
        self.host = host
        self.runner = runner or CommandRunner()
        self.http_client = http_client or HTTPClient()
        self.brew_path = brew_path_for(host)

    @property
    def bin_dir(self) -> str:
        return os.path.dirname(self.brew_path)

    def _validate(self) -> bool:
        try:
            result = self.runner.run(self.brew_path, ["--version"], RunOptions(capture=True))
        except CommandError:
            return False
        return result.ok

    def _probe(self) -> bool:
        if not filesystem.is_executable(self.brew_path):
            logger.debug(f"brew not found at {self.brew_path}")
            return False
        return self._validate()

    def _fix_up(self) -> None:
        prepend_to_path(self.bin_dir)

    def _install(self) -> None:
        logger.info("Downloading Homebrew install script")
        script = self.http_client.get_text(BREW_INSTALL_SCRIPT_URL)

        with filesystem.temporary_file("brew-install-", ".sh") as script_path:
            filesystem.write_text(script_path, script, mode=0o755)
            result = self.runner.run(
                "/bin/bash",
                [str(script_path)],
                RunOptions(env={"NONINTERACTIVE": "1"}, timeout=BREW_INSTALL_TIMEOUT),
            )

        if not result.ok:
            raise SubsystemInstallError(
                f"Homebrew install script failed with exit code {result.exit_code}",
                hint="Run the official installer manually: https://brew.sh",
            )
        if not self._validate():
            raise SubsystemInstallError(f"Homebrew installation could not be validated at {self.brew_path}")
        logger.info(f"Homebrew installed at {self.brew_path}")

"""
GPG installation and key provisioning.
"""

import logging
import os
import re

import semantic_version as sv

from dotfiles_installer.errors import CommandError, SubsystemInstallError
from dotfiles_installer.installers.base import SubsystemInstaller
from dotfiles_installer.osmanager import ProgramQuery
from dotfiles_installer.pkgmanager import PackageManager
from dotfiles_installer.resolver import Resolver
from dotfiles_installer.runner import CommandRunner, DisplayMode, RunOptions

logger = logging.getLogger(__name__)

GPG_PACKAGE_CODE = "gpg"
GPG_MIN_VERSION = ">=2.2.0"

KEY_CREATED_PATTERN = re.compile(r"gpg: key ([0-9A-Fa-f]+) marked as ultimately trusted")


def extract_gpg_version(output: str) -> str | None:
    """Third token of the first line: "gpg (GnuPG) 2.4.3"."""
    lines = (output or "").strip().splitlines()
    if not lines:
        return None
    parts = lines[0].split()
    if len(parts) < 3:
        return None
    return parts[2]


def version_satisfies(version: str, constraint: str) -> bool:
    try:
        return sv.Version.coerce(version) in sv.NpmSpec(constraint)
    except ValueError:
        logger.debug(f"Could not compare version {version!r} against {constraint}")
        return False


class GpgInstaller(SubsystemInstaller):
    """Requires gpg >= 2.2.0 together with gpg-agent."""

    name = "gpg"

    def __init__(
        self,
        program_query: ProgramQuery | None = None,
        package_manager: PackageManager | None = None,
        resolver: Resolver | None = None,
    ):
        super().__init__()
        self.program_query = program_query or ProgramQuery()
        self.package_manager = package_manager
        self.resolver = resolver

    def _probe(self) -> bool:
        if not self.program_query.program_exists("gpg"):
            logger.info("GPG is not available")
            return False

        version = self.program_query.get_program_version("gpg", extractor=extract_gpg_version)
        if not version or not version_satisfies(version, GPG_MIN_VERSION):
            logger.warning(f"GPG version {version or 'unknown'} is not compatible. Required version is {GPG_MIN_VERSION}")
            return False

        if not self.program_query.program_exists("gpg-agent"):
            logger.warning("gpg-agent is not available")
            return False
        return True

    def _install(self) -> None:
        if self.package_manager is None or self.resolver is None:
            raise SubsystemInstallError(
                "gpg is missing and no package manager is available to install it",
                hint="Install GnuPG 2.2 or newer manually",
            )
        request = self.resolver.resolve(GPG_PACKAGE_CODE, GPG_MIN_VERSION)
        self.package_manager.install_package(request)


class GpgClient:
    """Lists and creates secret keys."""

    def __init__(self, runner: CommandRunner | None = None):
        self.runner = runner or CommandRunner()

    def list_available_keys(self) -> list[str]:
        """Long key ids of all secret keys in the user's keyring."""
        try:
            result = self.runner.run(
                "gpg", ["--list-secret-keys", "--with-colons", "--keyid-format", "LONG"], RunOptions(capture=True)
            )
        except CommandError as e:
            raise SubsystemInstallError(f"failed to list GPG keys: {e}") from e
        if not result.ok:
            # gpg exits 2 when no keyring exists yet
            logger.debug(f"gpg --list-secret-keys exited with {result.exit_code}")
            return []

        keys = []
        for line in result.stdout.splitlines():
            fields = line.split(":")
            if fields[0] == "sec" and len(fields) > 4 and fields[4]:
                keys.append(fields[4])
        return keys

    def _gpg_tty(self) -> str | None:
        if os.environ.get("GPG_TTY"):
            return os.environ["GPG_TTY"]
        try:
            return os.ttyname(0)
        except OSError:
            return None

    def create_key_pair(self) -> str:
        """Interactively create a key pair and return its id."""
        env = {}
        tty = self._gpg_tty()
        if tty:
            env["GPG_TTY"] = tty

        result = self.runner.run(
            "gpg",
            ["--gen-key", "--pinentry-mode", "loopback", "--default-new-key-algo", "nistp256"],
            RunOptions(display_mode=DisplayMode.PASSTHROUGH, env=env, capture=True),
        )
        if not result.ok:
            raise SubsystemInstallError(f"gpg key generation failed with exit code {result.exit_code}")

        match = KEY_CREATED_PATTERN.search(result.stderr) or KEY_CREATED_PATTERN.search(result.stdout)
        if not match:
            raise SubsystemInstallError("could not determine the id of the generated GPG key")
        return match.group(1)

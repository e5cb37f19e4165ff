"""Homebrew package manager adapter. Brew refuses to run as root, so it is never escalated."""

import logging

from dotfiles_installer.errors import PackageManagerError
from dotfiles_installer.pkgmanager.base import PackageInfo, PackageManager, PackageManagerInfo, PackageRequest

logger = logging.getLogger(__name__)

CASK_TYPE = "cask"


class BrewPackageManager(PackageManager):
    name = "brew"
    escalates = False

    def __init__(self, *args, brew_path: str = "brew", **kwargs):
        super().__init__(*args, **kwargs)
        self.brew_path = brew_path

    def get_info(self) -> PackageManagerInfo:
        result = self._run_checked(self.brew_path, ["--version"], "query brew version", capture=True)
        first_line = result.stdout.strip().splitlines()[0] if result.stdout.strip() else ""
        if not first_line.startswith("Homebrew "):
            raise PackageManagerError(f"unexpected brew version output: {first_line!r}")
        return PackageManagerInfo(name=self.name, version=first_line.split()[1])

    def _type_args(self, request: PackageRequest) -> list[str]:
        return ["--cask"] if request.type == CASK_TYPE else []

    def install_package(self, request: PackageRequest) -> None:
        self._warn_unenforced_constraint(request)
        logger.info(f"Installing {request.name} with brew")
        self._run_checked(
            self.brew_path,
            ["install"] + self._type_args(request) + [request.name],
            f"install package {request.name}",
        )

    def uninstall_package(self, request: PackageRequest) -> None:
        logger.info(f"Removing {request.name} with brew")
        self._run_checked(
            self.brew_path,
            ["uninstall"] + self._type_args(request) + [request.name],
            f"remove package {request.name}",
        )

    def is_package_installed(self, request: PackageRequest) -> bool:
        result = self._run(
            self.brew_path, ["list", "--versions"] + self._type_args(request) + [request.name], capture=True
        )
        return result.ok and bool(result.stdout.strip())

    def list_installed_packages(self) -> list[PackageInfo]:
        result = self._run_checked(self.brew_path, ["list", "--versions"], "list installed packages", capture=True)
        return [self._parse_versions_line(line) for line in result.stdout.splitlines() if line.strip()]

    def get_package_version(self, name: str) -> str | None:
        result = self._run(self.brew_path, ["list", "--versions", name], capture=True)
        if not result.ok or not result.stdout.strip():
            return None
        return self._parse_versions_line(result.stdout.strip().splitlines()[0]).version or None

    @staticmethod
    def _parse_versions_line(line: str) -> PackageInfo:
        # "git 2.43.0" or "python@3.12 3.12.1 3.12.0" (newest first)
        name, _, versions = line.strip().partition(" ")
        return PackageInfo(name=name, version=versions.split()[0] if versions.split() else "")

"""APT package manager adapter (Debian, Ubuntu)."""

import logging

from dotfiles_installer.errors import PackageManagerError
from dotfiles_installer.pkgmanager.base import PackageInfo, PackageManager, PackageManagerInfo, PackageRequest

logger = logging.getLogger(__name__)

# Passed on the command line so that sudo's env_reset does not strip it
APT_FRONTEND = "DEBIAN_FRONTEND=noninteractive"


class AptPackageManager(PackageManager):
    name = "apt"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._index_updated = False

    def _apt_get(self, args: list[str], action: str) -> None:
        """Run apt-get escalated, with debconf prompts disabled."""
        self._run_checked("env", [APT_FRONTEND, "apt-get"] + args, action, escalate=True)

    def get_info(self) -> PackageManagerInfo:
        result = self._run_checked("apt", ["--version"], "query apt version", capture=True)
        # "apt 2.4.11 (amd64)"
        fields = result.stdout.split()
        if len(fields) < 2:
            raise PackageManagerError(f"unexpected apt version output: {result.stdout.strip()!r}")
        return PackageManagerInfo(name=self.name, version=fields[1])

    def update_index(self) -> None:
        """Run `apt-get update` once per adapter instance."""
        if self._index_updated:
            return
        logger.info("Updating apt package index")
        self._apt_get(["update"], "update apt package index")
        self._index_updated = True

    def install_package(self, request: PackageRequest) -> None:
        self._warn_unenforced_constraint(request)
        self.update_index()
        logger.info(f"Installing {request.name} with apt")
        self._apt_get(["install", "-y", request.name], f"install package {request.name}")

    def uninstall_package(self, request: PackageRequest) -> None:
        logger.info(f"Removing {request.name} with apt")
        self._apt_get(["remove", "-y", request.name], f"remove package {request.name}")

    def is_package_installed(self, request: PackageRequest) -> bool:
        result = self._run("dpkg-query", ["-W", "-f=${Status}", request.name], capture=True)
        return result.ok and result.stdout.strip() == "install ok installed"

    def list_installed_packages(self) -> list[PackageInfo]:
        result = self._run_checked(
            "dpkg-query", ["-W", "-f=${Package} ${Version}\n"], "list installed packages", capture=True
        )
        packages = []
        for line in result.stdout.splitlines():
            parts = line.strip().split(" ", 1)
            if not parts or not parts[0]:
                continue
            packages.append(PackageInfo(name=parts[0], version=parts[1] if len(parts) > 1 else ""))
        return packages

    def get_package_version(self, name: str) -> str | None:
        result = self._run("dpkg-query", ["-W", "-f=${Version}", name], capture=True)
        version = result.stdout.strip()
        if not result.ok or not version:
            return None
        return version

"""DNF package manager adapter (Fedora, CentOS, RHEL)."""

import logging

from dotfiles_installer.pkgmanager.base import PackageInfo, PackageManager, PackageManagerInfo, PackageRequest

logger = logging.getLogger(__name__)

GROUP_TYPE = "group"


class DnfPackageManager(PackageManager):
    name = "dnf"

    def get_info(self) -> PackageManagerInfo:
        result = self._run_checked("dnf", ["--version"], "query dnf version", capture=True)
        lines = result.stdout.strip().splitlines()
        version = lines[0].strip() if lines else ""
        # dnf5 prints "dnf5 version 5.x.y"
        if version.startswith("dnf") and " " in version:
            version = version.rsplit(" ", 1)[-1]
        return PackageManagerInfo(name=self.name, version=version)

    def _install_args(self, request: PackageRequest) -> list[str]:
        if request.type == GROUP_TYPE:
            return ["group", "install", "-y", request.name]
        return ["install", "-y", request.name]

    def install_package(self, request: PackageRequest) -> None:
        self._warn_unenforced_constraint(request)
        kind = "group" if request.type == GROUP_TYPE else "package"
        logger.info(f"Installing {kind} {request.name} with dnf")
        self._run_checked("dnf", self._install_args(request), f"install {kind} {request.name}", escalate=True)

    def uninstall_package(self, request: PackageRequest) -> None:
        if request.type == GROUP_TYPE:
            args = ["group", "remove", "-y", request.name]
        else:
            args = ["remove", "-y", request.name]
        logger.info(f"Removing {request.name} with dnf")
        self._run_checked("dnf", args, f"remove {request.name}", escalate=True)

    def is_package_installed(self, request: PackageRequest) -> bool:
        if request.type == GROUP_TYPE:
            return self._is_group_installed(request.name)
        result = self._run("rpm", ["-q", request.name], capture=True)
        return result.ok

    def _is_group_installed(self, group: str) -> bool:
        result = self._run("dnf", ["group", "list", "--installed"], capture=True)
        if not result.ok:
            return False
        return group.lower() in result.stdout.lower()

    def list_installed_packages(self) -> list[PackageInfo]:
        result = self._run_checked("dnf", ["list", "installed"], "list installed packages", capture=True)
        packages = []
        for line in result.stdout.splitlines():
            fields = line.split()
            if len(fields) < 2 or fields[0] in ("Installed", "Last"):
                continue
            name = fields[0].rsplit(".", 1)[0] if "." in fields[0] else fields[0]
            packages.append(PackageInfo(name=name, version=fields[1]))
        return packages

    def get_package_version(self, name: str) -> str | None:
        result = self._run("rpm", ["-q", "--queryformat", "%{VERSION}", name], capture=True)
        if not result.ok:
            return None
        return result.stdout.strip() or None

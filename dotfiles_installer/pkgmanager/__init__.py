"""Package manager adapters and platform selection."""

from dotfiles_installer.host import HostInfo
from dotfiles_installer.pkgmanager.apt import AptPackageManager
from dotfiles_installer.pkgmanager.base import (
    PackageInfo,
    PackageManager,
    PackageManagerInfo,
    PackageRequest,
)
from dotfiles_installer.pkgmanager.brew import BrewPackageManager
from dotfiles_installer.pkgmanager.dnf import DnfPackageManager
from dotfiles_installer.privilege import Escalator
from dotfiles_installer.runner import CommandRunner, DisplayMode

# (os, distro) -> manager; distro None matches any distro of that OS
MANAGER_TABLE = {
    ("linux", "ubuntu"): "apt",
    ("linux", "debian"): "apt",
    ("linux", "fedora"): "dnf",
    ("linux", "centos"): "dnf",
    ("linux", "rhel"): "dnf",
    ("darwin", None): "brew",
}

ADAPTERS = {
    "apt": AptPackageManager,
    "dnf": DnfPackageManager,
    "brew": BrewPackageManager,
}


def select_package_manager_name(host: HostInfo) -> str | None:
    """The system package manager for a host, or None if unsupported."""
    return MANAGER_TABLE.get((host.os, host.distro)) or MANAGER_TABLE.get((host.os, None))


def create_package_manager(
    name: str,
    runner: CommandRunner | None = None,
    escalator: Escalator | None = None,
    display_mode: DisplayMode = DisplayMode.PLAIN,
    brew_path: str | None = None,
) -> PackageManager:
    """Instantiate the adapter registered under name.

    Raises:
        ValueError: If no adapter exists for name
    """
    adapter = ADAPTERS.get(name)
    if adapter is None:
        raise ValueError(f"unsupported package manager: {name}")
    if adapter is BrewPackageManager and brew_path:
        return BrewPackageManager(runner, escalator, display_mode, brew_path=brew_path)
    return adapter(runner, escalator, display_mode)


__all__ = [
    "ADAPTERS",
    "MANAGER_TABLE",
    "AptPackageManager",
    "BrewPackageManager",
    "DnfPackageManager",
    "PackageInfo",
    "PackageManager",
    "PackageManagerInfo",
    "PackageRequest",
    "create_package_manager",
    "select_package_manager_name",
]

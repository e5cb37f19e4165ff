"""
Prerequisite remediation.

Installs the prerequisites the host probe reported missing, using the
platform's system package manager. The caller re-runs detection and the
compatibility gate afterwards; HostInfo is never modified here.
"""

import logging
from typing import Callable

from dotfiles_installer.errors import InstallerError, PrereqRemediationError, UserCancelled
from dotfiles_installer.host import HostInfo
from dotfiles_installer.packagemap import PackageMap
from dotfiles_installer.pkgmanager import PackageManager, create_package_manager, select_package_manager_name
from dotfiles_installer.resolver import Resolver
from dotfiles_installer.ui.prompts import PrerequisiteSelector

logger = logging.getLogger(__name__)


class PrerequisiteInstaller:
    """Installs missing prerequisites through the system package manager."""

    def __init__(
        self,
        package_map: PackageMap,
        package_manager_factory: Callable[[str], PackageManager] = create_package_manager,
        selector: PrerequisiteSelector | None = None,
    ):
        self.package_map = package_map
        self.package_manager_factory = package_manager_factory
        self.selector = selector or PrerequisiteSelector()

    def remediate(self, host: HostInfo, interactive: bool = True, install_all: bool = False) -> bool:
        """Install missing prerequisites.

        Args:
            host: Detection record whose prerequisites were probed
            interactive: Whether the user may choose a subset
            install_all: Install every missing prerequisite without asking

        Returns:
            True if at least one prerequisite was installed, False if there was
            nothing to do or no supported package manager

        Raises:
            PrereqRemediationError: If any chosen prerequisite fails to install
        """
        missing = host.prerequisites.missing
        if not missing:
            return False

        manager_name = select_package_manager_name(host)
        if manager_name is None:
            logger.warning(f"No supported package manager for {host.os}/{host.distro or '-'}; cannot install prerequisites")
            return False

        if interactive and not install_all:
            descriptions = {name: host.prerequisites.get(name).description for name in missing}
            chosen = set(self.selector.select(missing, descriptions))
            selected = [name for name in missing if name in chosen]
        else:
            selected = list(missing)

        if not selected:
            logger.info("No prerequisites selected for installation")
            return False

        package_manager = self.package_manager_factory(manager_name)
        resolver = Resolver(self.package_map, manager_name, host.distro)

        for name in selected:
            detail = host.prerequisites.get(name)
            try:
                request = resolver.resolve(name)
                package_manager.install_package(request)
            except UserCancelled:
                raise
            except InstallerError as e:
                raise PrereqRemediationError(
                    f"failed to install prerequisite '{name}': {e}",
                    hint=detail.install_hint if detail else None,
                ) from e
            logger.info(f"Installed prerequisite {name}")

        return True

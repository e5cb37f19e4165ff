"""
Package resolution.

Translates a generic package code ("gpg", "development-tools") into the
concrete PackageRequest for the active package manager and distribution.
"""

import logging

import semantic_version as sv

from dotfiles_installer.errors import BadConstraint, NeedsDistroMapping, NoMapping, ResolveError
from dotfiles_installer.packagemap import ByDistroName, LiteralName, PackageMap
from dotfiles_installer.pkgmanager.base import PackageRequest

logger = logging.getLogger(__name__)


def parse_constraint(text: str) -> sv.NpmSpec:
    """Parse a semver range such as ">=2.2.0", "^1.4", ">=1.0, <2.0" or "1.x || >=3".

    Comma-separated clauses are combined with AND.

    Raises:
        ValueError: If the range is not valid
    """
    normalized = " || ".join(" ".join(part.replace(",", " ").split()) for part in text.split("||"))
    return sv.NpmSpec(normalized)


class Resolver:
    """Resolves package codes for one package manager on one distro."""

    def __init__(self, package_map: PackageMap, manager_name: str, distro: str = ""):
        self.package_map = package_map
        self.manager_name = manager_name
        self.distro = distro

    def resolve(self, code: str, constraint: str = "") -> PackageRequest:
        """Resolve a package code.

        Args:
            code: Generic package code
            constraint: Optional semver range; empty means latest

        Returns:
            PackageRequest with a non-empty name

        Raises:
            NoMapping: Unknown code, or no entry for the active manager
            NeedsDistroMapping: Distro-keyed name without the current distro
            BadConstraint: Unparseable constraint
        """
        if not code:
            raise ResolveError("generic package code cannot be empty")

        managers = self.package_map.get(code)
        if managers is None:
            raise NoMapping(code)

        entry = managers.get(self.manager_name)
        if entry is None:
            raise NoMapping(code, self.manager_name)

        if isinstance(entry.name, ByDistroName):
            name = entry.name.for_distro(self.distro)
            if not name:
                raise NeedsDistroMapping(code, self.distro)
        elif isinstance(entry.name, LiteralName) and entry.name.value:
            name = entry.name.value
        else:
            raise NoMapping(code, self.manager_name)

        version_constraint = None
        if constraint:
            try:
                version_constraint = parse_constraint(constraint)
            except ValueError as e:
                raise BadConstraint(constraint, code) from e

        logger.debug(f"Resolved {code} -> {name} ({self.manager_name}/{self.distro or '-'})")
        return PackageRequest(
            name=name,
            type=entry.type,
            constraint_text=constraint,
            version_constraint=version_constraint,
        )

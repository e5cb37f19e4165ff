"""
Package map: generic package codes to package-manager specific names.

    packages:
      gpg:
        apt: {name: gnupg2}
        brew: {name: gnupg}
      development-tools:
        dnf:
          type: group
          name:
            fedora: development-tools
            centos: Development Tools

A name is either a plain string used on every distro, or a mapping from
distro id to name. Distro mappings have no fallback.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from dotfiles_installer.compatibility import read_embedded_config
from dotfiles_installer.errors import FilesystemError

logger = logging.getLogger(__name__)

EMBEDDED_PACKAGE_MAP = "packagemap.yaml"


@dataclass(frozen=True)
class LiteralName:
    """The same package name on every distribution."""

    value: str


@dataclass(frozen=True)
class ByDistroName:
    """Distribution-specific package names."""

    names: dict[str, str] = field(default_factory=dict)

    def for_distro(self, distro: str) -> str | None:
        return self.names.get(distro)


PackageName = LiteralName | ByDistroName


@dataclass(frozen=True)
class ManagerEntry:
    """How one package manager names a package."""

    name: PackageName
    type: str = ""

    def to_dict(self) -> dict[str, Any]:
        if isinstance(self.name, LiteralName):
            name: Any = self.name.value
        else:
            name = dict(self.name.names)
        data: dict[str, Any] = {"name": name}
        if self.type:
            data["type"] = self.type
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "ManagerEntry":
        if not isinstance(data, dict):
            raise ValueError(f"package manager entry must be a mapping, got {type(data).__name__}")
        raw_name = data.get("name", "")
        if isinstance(raw_name, dict):
            name: PackageName = ByDistroName(
                names={str(k).lower(): str(v) for k, v in raw_name.items() if v is not None}
            )
        elif raw_name is None:
            name = LiteralName("")
        else:
            name = LiteralName(str(raw_name))
        return cls(name=name, type=data.get("type") or "")


@dataclass
class PackageMap:
    """All package mappings, keyed by package code then manager name."""

    packages: dict[str, dict[str, ManagerEntry]] = field(default_factory=dict)

    def get(self, code: str) -> dict[str, ManagerEntry] | None:
        return self.packages.get(code)

    def to_dict(self) -> dict[str, Any]:
        return {
            "packages": {
                code: {manager: entry.to_dict() for manager, entry in managers.items()}
                for code, managers in self.packages.items()
            }
        }

    @classmethod
    def from_dict(cls, data: Any) -> "PackageMap":
        if not isinstance(data, dict):
            raise ValueError("package map must be a mapping")
        packages = data.get("packages") or {}
        if not isinstance(packages, dict):
            raise ValueError("'packages' must be a mapping")
        return cls(
            packages={
                str(code): {str(m): ManagerEntry.from_dict(e) for m, e in (managers or {}).items()}
                for code, managers in packages.items()
            }
        )


def load_package_map(path: Path | str | None = None) -> PackageMap:
    """Load the package map from a file, or the embedded default.

    Raises:
        FilesystemError: If the file cannot be read
        ValueError: If the document is malformed
    """
    if path:
        logger.info(f"Using package map file: {path}")
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise FilesystemError(f"error reading package map file '{path}': {e}") from e
    else:
        text = read_embedded_config(EMBEDDED_PACKAGE_MAP)

    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"error parsing package map configuration: {e}") from e
    return PackageMap.from_dict(data)


def dump_package_map(package_map: PackageMap) -> str:
    return yaml.safe_dump(package_map.to_dict(), sort_keys=False)

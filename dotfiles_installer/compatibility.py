"""
Compatibility policy loading and evaluation.

The policy is a YAML document listing supported operating systems and Linux
distributions, together with the prerequisite programs each platform needs.
An embedded default ships with the package and can be replaced with
--compat-config.
"""

import logging
import re
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any

import semantic_version as sv
import yaml

from dotfiles_installer.errors import FilesystemError, IncompatibleError
from dotfiles_installer.host import HostInfo

logger = logging.getLogger(__name__)

EMBEDDED_COMPATIBILITY_CONFIG = "compatibility.yaml"

LEADING_ZEROS = re.compile(r"(?<!\d)0+(?=\d)")


@dataclass
class PrerequisiteConfig:
    """A program that must exist before bootstrapping continues."""

    name: str
    command: str
    description: str = ""
    install_hint: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "command": self.command,
            "description": self.description,
            "install_hint": self.install_hint,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PrerequisiteConfig":
        name = data.get("name", "")
        return cls(
            name=name,
            command=data.get("command") or name,
            description=data.get("description", ""),
            install_hint=data.get("install_hint", ""),
        )


@dataclass
class DistroConfig:
    supported: bool = False
    version_constraint: str = ""
    notes: str = ""
    prerequisites: list[PrerequisiteConfig] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"supported": self.supported}
        if self.version_constraint:
            data["version_constraint"] = self.version_constraint
        if self.notes:
            data["notes"] = self.notes
        if self.prerequisites:
            data["prerequisites"] = [p.to_dict() for p in self.prerequisites]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DistroConfig":
        data = data or {}
        return cls(
            supported=bool(data.get("supported", False)),
            version_constraint=data.get("version_constraint") or "",
            notes=data.get("notes") or "",
            prerequisites=[PrerequisiteConfig.from_dict(p) for p in data.get("prerequisites") or []],
        )


@dataclass
class OSConfig:
    supported: bool = False
    notes: str = ""
    prerequisites: list[PrerequisiteConfig] = field(default_factory=list)
    distributions: dict[str, DistroConfig] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"supported": self.supported}
        if self.notes:
            data["notes"] = self.notes
        if self.prerequisites:
            data["prerequisites"] = [p.to_dict() for p in self.prerequisites]
        if self.distributions:
            data["distributions"] = {k: v.to_dict() for k, v in self.distributions.items()}
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OSConfig":
        data = data or {}
        return cls(
            supported=bool(data.get("supported", False)),
            notes=data.get("notes") or "",
            prerequisites=[PrerequisiteConfig.from_dict(p) for p in data.get("prerequisites") or []],
            distributions={
                str(name).lower(): DistroConfig.from_dict(d)
                for name, d in (data.get("distributions") or {}).items()
            },
        )


@dataclass
class CompatibilityConfig:
    """The whole compatibility policy."""

    operating_systems: dict[str, OSConfig] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"operatingSystems": {k: v.to_dict() for k, v in self.operating_systems.items()}}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CompatibilityConfig":
        if not isinstance(data, dict):
            raise ValueError("compatibility config must be a mapping")
        systems = data.get("operatingSystems") or {}
        if not isinstance(systems, dict):
            raise ValueError("'operatingSystems' must be a mapping")
        return cls(operating_systems={str(k).lower(): OSConfig.from_dict(v) for k, v in systems.items()})

    def prerequisites_for(self, os_name: str, distro: str = "") -> list[PrerequisiteConfig]:
        """OS-level prerequisites followed by distro-level ones.

        A distro entry with the same name replaces the OS-level entry in place.
        """
        os_config = self.operating_systems.get(os_name)
        if os_config is None:
            return []

        merged: dict[str, PrerequisiteConfig] = {p.name: p for p in os_config.prerequisites}
        if os_name == "linux":
            distro_config = os_config.distributions.get(distro)
            if distro_config is not None:
                for prereq in distro_config.prerequisites:
                    merged[prereq.name] = prereq
        return list(merged.values())


def load_compatibility_config(path: Path | str | None = None) -> CompatibilityConfig:
    """Load the policy from a file, or the embedded default when path is None.

    Raises:
        FilesystemError: If the file cannot be read
        ValueError: If the document is not a valid policy
    """
    if path:
        path = Path(path)
        logger.info(f"Using compatibility config file: {path}")
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise FilesystemError(f"error reading compatibility config file: {e}") from e
    else:
        text = read_embedded_config(EMBEDDED_COMPATIBILITY_CONFIG)

    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"error parsing compatibility config: {e}") from e
    return CompatibilityConfig.from_dict(data)


def dump_compatibility_config(config: CompatibilityConfig) -> str:
    return yaml.safe_dump(config.to_dict(), sort_keys=False)


def read_embedded_config(name: str) -> str:
    """Read one of the YAML files bundled in dotfiles_installer/data."""
    try:
        return resources.files("dotfiles_installer").joinpath("data", name).read_text(encoding="utf-8")
    except (OSError, FileNotFoundError) as e:
        raise FilesystemError(f"failed to read embedded config {name}: {e}") from e


class CompatibilityGate:
    """Evaluates a HostInfo record against the compatibility policy."""

    def __init__(self, config: CompatibilityConfig):
        self.config = config

    def check(self, host: HostInfo) -> HostInfo:
        """Check that the host's OS (and distro on linux) is supported.

        Returns:
            The same HostInfo, unchanged

        Raises:
            IncompatibleError: With the policy's notes; the error keeps a
                reference to the HostInfo so callers can inspect prerequisites
        """
        os_config = self.config.operating_systems.get(host.os)
        if os_config is None:
            raise IncompatibleError(f"unsupported operating system: {host.os}", host_info=host)
        if not os_config.supported:
            raise IncompatibleError(f"unsupported operating system: {host.os} - {os_config.notes}", host_info=host)

        if host.os == "linux":
            distro_config = os_config.distributions.get(host.distro)
            if distro_config is None:
                raise IncompatibleError(f"unsupported Linux distribution: {host.distro}", host_info=host)
            if not distro_config.supported:
                raise IncompatibleError(
                    f"unsupported Linux distribution: {host.distro} - {distro_config.notes}",
                    host_info=host,
                )
            self._evaluate_version_constraint(host, distro_config)

        logger.info(f"Host {host.os}/{host.distro or '-'} is supported")
        return host

    def check_prerequisites(self, host: HostInfo) -> HostInfo:
        """Fail when any declared prerequisite is missing."""
        missing = host.prerequisites.missing
        if missing:
            raise IncompatibleError(f"missing prerequisites: {', '.join(missing)}", host_info=host)
        return host

    def _evaluate_version_constraint(self, host: HostInfo, distro_config: DistroConfig) -> None:
        # Distro versions are not detected yet, so the constraint is only validated.
        constraint = distro_config.version_constraint
        if not constraint:
            return
        try:
            parse_distro_constraint(constraint)
        except ValueError:
            logger.warning(f"Ignoring invalid version constraint '{constraint}' for {host.distro}")
            return
        logger.debug(f"Version constraint '{constraint}' for {host.distro} is not enforced")


def parse_distro_constraint(text: str) -> sv.NpmSpec:
    """Parse a distro version range such as ">=20.04" or ">=8, <10".

    Distro releases are zero-padded ("20.04"), which semver rejects, so
    leading zeros are dropped from each numeric component first.

    Raises:
        ValueError: If the range is not valid
    """
    from dotfiles_installer.resolver import parse_constraint

    return parse_constraint(LEADING_ZEROS.sub("", text))


def missing_prerequisite_hints(host: HostInfo) -> list[str]:
    """Human-readable install hints for each missing prerequisite."""
    hints = []
    for name in host.prerequisites.missing:
        detail = host.prerequisites.get(name)
        if detail is None:
            hints.append(f"{name}: (no install hint available)")
        elif detail.install_hint:
            hints.append(f"{detail.description or name}: {detail.install_hint}")
        else:
            hints.append(detail.description or name)
    return hints

"""
Host detection.

Detects the operating system, Linux distribution and architecture, and
probes the prerequisite programs declared for that platform. The result is
an immutable HostInfo record shared by every later step of a run.
"""

import logging
import platform
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from dotfiles_installer.errors import CommandError, DetectionError
from dotfiles_installer.osmanager import ProgramQuery
from dotfiles_installer.runner import CommandRunner, RunOptions

if TYPE_CHECKING:
    from dotfiles_installer.compatibility import CompatibilityConfig

logger = logging.getLogger(__name__)

ARCH_ALIASES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv7l": "arm",
    "i386": "386",
    "i686": "386",
}

# (file, key) pairs checked in order, then marker files whose presence names the distro
DISTRO_RELEASE_FILES = (
    ("etc/os-release", "ID="),
    ("etc/lsb-release", "DISTRIB_ID="),
)
DISTRO_MARKER_FILES = (
    ("etc/debian_version", "debian"),
    ("etc/SuSe-release", "suse"),
    ("etc/redhat-release", "redhat"),
)


@dataclass(frozen=True)
class PrerequisiteDetail:
    """Availability of a single prerequisite program."""

    name: str
    available: bool
    command: str = ""
    description: str = ""
    install_hint: str = ""


@dataclass(frozen=True)
class PrerequisiteStatus:
    """Probe results for all prerequisites, in declared order."""

    details: tuple[PrerequisiteDetail, ...] = ()

    @property
    def missing(self) -> list[str]:
        return [d.name for d in self.details if not d.available]

    @property
    def available(self) -> list[str]:
        return [d.name for d in self.details if d.available]

    def get(self, name: str) -> PrerequisiteDetail | None:
        return next((d for d in self.details if d.name == name), None)


@dataclass(frozen=True)
class HostInfo:
    """The detection record."""

    os: str
    distro: str
    arch: str
    prerequisites: PrerequisiteStatus = field(default_factory=PrerequisiteStatus)


def normalize_arch(machine: str) -> str:
    machine = machine.lower()
    return ARCH_ALIASES.get(machine, machine)


def _read_release_value(path: Path, key: str) -> str | None:
    try:
        content = path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None
    for line in content.splitlines():
        if line.startswith(key):
            value = line[len(key):].strip().strip('"').strip("'")
            if value:
                return value.lower()
    return None


def detect_linux_distro(root: Path | str = "/", runner: CommandRunner | None = None) -> str:
    """Detect the distribution id, lowercased.

    Checks /etc/os-release, /etc/lsb-release, then marker files, and finally
    falls back to `uname -s`.
    """
    root = Path(root)
    for relative, key in DISTRO_RELEASE_FILES:
        path = root / relative
        if path.exists():
            value = _read_release_value(path, key)
            if value:
                return value

    for relative, distro in DISTRO_MARKER_FILES:
        if (root / relative).exists():
            return distro

    runner = runner or CommandRunner()
    try:
        result = runner.run("uname", ["-s"], RunOptions(capture=True))
    except CommandError:
        return "unknown"
    if result.ok and result.stdout.strip():
        return result.stdout.strip().lower()
    return "unknown"


class HostProbe:
    """Builds the HostInfo record for the current machine."""

    def __init__(
        self,
        program_query: ProgramQuery | None = None,
        runner: CommandRunner | None = None,
        root: Path | str = "/",
    ):
        self.runner = runner or CommandRunner()
        self.program_query = program_query or ProgramQuery(self.runner)
        self.root = root

    def detect_os(self) -> str:
        return platform.system().lower()

    def detect_arch(self) -> str:
        return normalize_arch(platform.machine())

    def detect_distro(self, os_name: str) -> str:
        if os_name != "linux":
            return ""
        return detect_linux_distro(self.root, self.runner)

    def detect(self, config: "CompatibilityConfig | None" = None) -> HostInfo:
        """Detect the host and probe the prerequisites the config declares for it.

        Raises:
            DetectionError: If the operating system cannot be identified
        """
        os_name = self.detect_os()
        if not os_name:
            raise DetectionError("unable to detect the operating system")

        distro = self.detect_distro(os_name)
        arch = self.detect_arch()
        logger.info(f"Detected host: os={os_name} distro={distro or '-'} arch={arch}")

        prerequisites = PrerequisiteStatus()
        if config is not None:
            prerequisites = self.probe_prerequisites(config.prerequisites_for(os_name, distro))

        return HostInfo(os=os_name, distro=distro, arch=arch, prerequisites=prerequisites)

    def probe_prerequisites(self, prerequisites) -> PrerequisiteStatus:
        """Probe each prerequisite's command. A failing probe means unavailable."""
        details = []
        for prereq in prerequisites:
            try:
                available = self.program_query.program_exists(prereq.command)
            except (OSError, CommandError) as e:
                logger.debug(f"Probe for {prereq.name} failed: {e}")
                available = False
            logger.debug(f"Prerequisite {prereq.name}: {'available' if available else 'missing'}")
            details.append(
                PrerequisiteDetail(
                    name=prereq.name,
                    available=available,
                    command=prereq.command,
                    description=prereq.description,
                    install_hint=prereq.install_hint,
                )
            )
        return PrerequisiteStatus(details=tuple(details))

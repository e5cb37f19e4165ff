"""
User settings file.

An optional YAML mapping (default ~/.dotfiles-installer.yaml) whose keys mirror
the install flags. Precedence: explicit CLI flag > settings file > default.
"""

import logging
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml

from dotfiles_installer.errors import FilesystemError
from dotfiles_installer.installers.chezmoi import DEFAULT_GITHUB_USERNAME

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = Path.home() / ".dotfiles-installer.yaml"


@dataclass(frozen=True)
class InstallSettings:
    """Install defaults that a settings file may override."""

    shell: str = "zsh"
    work_env: bool = False
    work_name: str = ""
    work_email: str = ""
    install_brew: bool = True
    git_clone_protocol: str = "ssh"
    multi_user_system: bool = False
    install_prerequisites: bool = False
    branch: str = ""
    github_username: str = DEFAULT_GITHUB_USERNAME
    package_map: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InstallSettings":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning(f"Ignoring unknown settings: {', '.join(unknown)}")
        return cls(**{key: value for key, value in data.items() if key in known})

    def merged_with(self, overrides: dict[str, Any]) -> "InstallSettings":
        """Apply explicit overrides; None values mean "not given" and are skipped."""
        known = {f.name for f in fields(self)}
        given = {key: value for key, value in overrides.items() if key in known and value is not None}
        return replace(self, **given)


def load_settings(path: Path | str | None = None) -> InstallSettings:
    """Read the settings file.

    A missing default file yields the built-in defaults; a missing file that
    was named explicitly is an error.

    Raises:
        FilesystemError: If an explicitly named file cannot be read
        ValueError: If the file is not a YAML mapping
    """
    explicit = path is not None
    settings_path = Path(path) if explicit else DEFAULT_SETTINGS_PATH

    if not settings_path.exists():
        if explicit:
            raise FilesystemError(f"settings file not found: {settings_path}")
        return InstallSettings()

    try:
        text = settings_path.read_text(encoding="utf-8")
    except OSError as e:
        raise FilesystemError(f"error reading settings file '{settings_path}': {e}") from e

    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"error parsing settings file '{settings_path}': {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"settings file '{settings_path}' must contain a mapping")

    logger.info(f"Loaded settings from {settings_path}")
    return InstallSettings.from_dict(data)


def dump_settings(settings: InstallSettings) -> str:
    return yaml.safe_dump(settings.to_dict(), sort_keys=False)

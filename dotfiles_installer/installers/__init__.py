"""Subsystem installers: brew, shell, gpg and the chezmoi dotfiles engine."""

from dotfiles_installer.installers.base import SubsystemInstaller, SubsystemState
from dotfiles_installer.installers.brew import BrewInstaller, brew_path_for
from dotfiles_installer.installers.chezmoi import ChezmoiInstaller, DotfilesData, SystemData, WorkEnvData
from dotfiles_installer.installers.gpg import GpgClient, GpgInstaller
from dotfiles_installer.installers.shell import ShellChanger, ShellInstaller

__all__ = [
    "BrewInstaller",
    "ChezmoiInstaller",
    "DotfilesData",
    "GpgClient",
    "GpgInstaller",
    "ShellChanger",
    "ShellInstaller",
    "SubsystemInstaller",
    "SubsystemState",
    "SystemData",
    "WorkEnvData",
    "brew_path_for",
]

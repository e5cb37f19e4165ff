"""Installer CLI handlers.

One module per subcommand.
"""

from dotfiles_installer.cli.handlers.compatibility import CompatibilityHandler, add_compatibility_parser
from dotfiles_installer.cli.handlers.install import InstallHandler, add_install_parser
from dotfiles_installer.cli.handlers.version import VersionHandler, add_version_parser

__all__ = [
    # Check compatibility
    "CompatibilityHandler",
    "add_compatibility_parser",
    # Install
    "InstallHandler",
    "add_install_parser",
    # Version
    "VersionHandler",
    "add_version_parser",
]

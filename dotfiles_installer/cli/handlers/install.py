"""Install command handler.

Bootstraps the machine: package manager, prerequisites, shell, GPG and the
dotfiles themselves.
"""

import argparse
import logging

from dotfiles_installer.cli.utils.output import print_error
from dotfiles_installer.compatibility import load_compatibility_config
from dotfiles_installer.errors import InstallerError
from dotfiles_installer.installers.chezmoi import DEFAULT_GITHUB_USERNAME
from dotfiles_installer.orchestrator import GIT_CLONE_PROTOCOLS, InstallOptions, Orchestrator
from dotfiles_installer.packagemap import load_package_map
from dotfiles_installer.runner import DisplayMode
from dotfiles_installer.settings import InstallSettings, load_settings
from dotfiles_installer.ui import NoopProgress, ProgressReporter, console

logger = logging.getLogger(__name__)

# Install flags that a settings file may also provide
SETTINGS_FLAGS = (
    "shell",
    "work_env",
    "work_name",
    "work_email",
    "install_brew",
    "git_clone_protocol",
    "multi_user_system",
    "install_prerequisites",
    "branch",
    "github_username",
)


def parse_bool(value: str) -> bool:
    """argparse type for --flag=true/false style booleans."""
    normalized = value.strip().lower()
    if normalized in ("1", "true", "yes", "on"):
        return True
    if normalized in ("0", "false", "no", "off"):
        return False
    raise argparse.ArgumentTypeError(f"expected a boolean value, got '{value}'")


class InstallHandler:
    """Handler for install command."""

    def __init__(
        self,
        display_mode: DisplayMode = DisplayMode.PLAIN,
        progress: ProgressReporter | None = None,
        interactive: bool = True,
    ):
        self.display_mode = display_mode
        self.progress = progress or NoopProgress()
        self.interactive = interactive

    def build_options(self, args: argparse.Namespace, settings: InstallSettings) -> InstallOptions:
        overrides = {name: getattr(args, name, None) for name in SETTINGS_FLAGS}
        merged = settings.merged_with(overrides)
        return InstallOptions(
            shell=merged.shell,
            install_brew=merged.install_brew,
            install_prerequisites=merged.install_prerequisites,
            git_clone_protocol=merged.git_clone_protocol,
            work_env=merged.work_env,
            work_name=merged.work_name,
            work_email=merged.work_email,
            multi_user_system=merged.multi_user_system,
            branch=merged.branch,
            github_username=merged.github_username,
            set_default_shell=bool(getattr(args, "set_default_shell", False)),
            email=getattr(args, "email", None) or "",
            first_name=getattr(args, "first_name", None) or "",
            last_name=getattr(args, "last_name", None) or "",
            interactive=self.interactive,
            display_mode=self.display_mode,
        )

    def install(self, args: argparse.Namespace) -> int:
        try:
            settings = load_settings(getattr(args, "config", None))
            options = self.build_options(args, settings)
            compatibility_config = load_compatibility_config(getattr(args, "compat_config", None))
            package_map = load_package_map(settings.package_map)
        except ValueError as e:
            console.error(str(e))
            return 1
        except InstallerError as e:
            print_error(e)
            return 1

        logger.debug(f"Install options: {options}")
        orchestrator = Orchestrator(compatibility_config, package_map, options, progress=self.progress)
        try:
            host = orchestrator.run()
        except InstallerError as e:
            print_error(e)
            return 1

        console.blank()
        console.summary(
            "Dotfiles installed",
            {
                "System": f"{host.os}/{host.distro or '-'} ({host.arch})",
                "Shell": options.shell,
                "Repository": f"github.com/{options.github_username}/dotfiles ({options.git_clone_protocol})",
                "Default shell": "changed" if options.set_default_shell else "unchanged",
            },
        )
        return 0


def add_install_parser(subparsers, parents=()) -> argparse.ArgumentParser:
    """Add install parser to subparsers."""
    install_parser = subparsers.add_parser("install", help="Bootstrap this machine", parents=list(parents))
    install_parser.add_argument("--shell", default=None, help="Shell to install (default: zsh)")
    install_parser.add_argument(
        "--install-brew",
        type=parse_bool,
        nargs="?",
        const=True,
        default=None,
        help="Install Homebrew (default: true)",
    )
    install_parser.add_argument(
        "--install-prerequisites",
        type=parse_bool,
        nargs="?",
        const=True,
        default=None,
        help="Install all missing prerequisites without asking",
    )
    install_parser.add_argument(
        "--git-clone-protocol",
        choices=GIT_CLONE_PROTOCOLS,
        default=None,
        help="Protocol used to clone the dotfiles repository (default: ssh)",
    )
    install_parser.add_argument("--work-env", action="store_true", default=None, help="Set up a work environment")
    install_parser.add_argument("--work-name", default=None, help="Work profile name")
    install_parser.add_argument("--work-email", default=None, help="Work email address")
    install_parser.add_argument(
        "--multi-user-system", action="store_true", default=None, help="Machine is shared by several users"
    )
    install_parser.add_argument("--branch", default=None, help="Dotfiles repository branch")
    install_parser.add_argument(
        "--github-username", default=None, help=f"Owner of the dotfiles repository (default: {DEFAULT_GITHUB_USERNAME})"
    )
    install_parser.add_argument(
        "--set-default-shell", action="store_true", help="Make the installed shell the login shell"
    )
    install_parser.add_argument("--email", default=None, help="Email address (default: git config user.email)")
    install_parser.add_argument("--first-name", default=None, help="First name (default: git config user.name)")
    install_parser.add_argument("--last-name", default=None, help="Last name (default: git config user.name)")
    return install_parser

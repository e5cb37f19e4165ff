"""Command-line entry point for dotfiles-installer."""

import argparse
import logging
import sys

from dotfiles_installer import __version__
from dotfiles_installer.cli.handlers import (
    CompatibilityHandler,
    InstallHandler,
    VersionHandler,
    add_compatibility_parser,
    add_install_parser,
    add_version_parser,
)
from dotfiles_installer.cli.utils.output import print_error
from dotfiles_installer.errors import UserCancelled
from dotfiles_installer.runner import DisplayMode
from dotfiles_installer.ui import NoopProgress, PlainProgress, ProgressReporter, SpinnerProgress

logger = logging.getLogger(__name__)

# Global flags may appear before or after the subcommand
GLOBAL_DEFAULTS = {
    "config": None,
    "compat_config": None,
    "verbose": 0,
    "extra_verbose": False,
    "progress": False,
    "plain": False,
    "non_interactive": False,
}


def _global_options() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("--config", default=argparse.SUPPRESS, help="Settings file (default: ~/.dotfiles-installer.yaml)")
    parser.add_argument("--compat-config", default=argparse.SUPPRESS, help="Compatibility policy file")
    parser.add_argument(
        "-v", "--verbose", action="count", default=argparse.SUPPRESS, help="More output (-vv for debug)"
    )
    parser.add_argument("--extra-verbose", action="store_true", default=argparse.SUPPRESS, help="Debug output")
    parser.add_argument("--progress", action="store_true", default=argparse.SUPPRESS, help="Show spinners")
    parser.add_argument("--plain", action="store_true", default=argparse.SUPPRESS, help="Plain status lines")
    parser.add_argument(
        "--non-interactive", action="store_true", default=argparse.SUPPRESS, help="Never prompt; use defaults"
    )
    return parser


def build_parser() -> argparse.ArgumentParser:
    global_options = _global_options()
    parser = argparse.ArgumentParser(
        prog="dotfiles-installer",
        description="Bootstrap a machine and apply personal dotfiles",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        parents=[global_options],
        epilog="""
Examples:
  dotfiles-installer check-compatibility
  dotfiles-installer install --progress
  dotfiles-installer install --install-brew=false --git-clone-protocol https
  dotfiles-installer --non-interactive install --install-prerequisites
        """,
    )
    parser.add_argument("--version", "-V", action="version", version=f"dotfiles-installer {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    add_install_parser(subparsers, parents=[global_options])
    add_compatibility_parser(subparsers, parents=[global_options])
    add_version_parser(subparsers, parents=[global_options])
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    args = build_parser().parse_args(argv)
    for name, default in GLOBAL_DEFAULTS.items():
        if not hasattr(args, name):
            setattr(args, name, default)
    return args


def verbosity(args: argparse.Namespace) -> int:
    return 2 if args.extra_verbose else min(args.verbose or 0, 2)


def configure_logging(level: int) -> None:
    """WARNING by default, INFO with -v, DEBUG with -vv."""
    log_level = {0: logging.WARNING, 1: logging.INFO}.get(level, logging.DEBUG)
    logging.basicConfig(level=log_level, format="%(levelname)s %(name)s: %(message)s")
    # Connection pool chatter is only useful when debugging
    if log_level > logging.DEBUG:
        logging.getLogger("urllib3").setLevel(logging.WARNING)


def select_display(args: argparse.Namespace) -> tuple[DisplayMode, ProgressReporter]:
    """Verbose runs stream child output; --progress shows spinners unless --plain."""
    if verbosity(args) > 0:
        return DisplayMode.PASSTHROUGH, NoopProgress()
    if args.progress and not args.plain:
        return DisplayMode.PROGRESS, SpinnerProgress()
    return DisplayMode.PLAIN, PlainProgress()


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    configure_logging(verbosity(args))
    display_mode, progress = select_display(args)

    try:
        if args.command == "install":
            handler = InstallHandler(display_mode, progress, interactive=not args.non_interactive)
            return handler.install(args)
        elif args.command == "check-compatibility":
            return CompatibilityHandler().check(args.compat_config)
        elif args.command == "version":
            return VersionHandler().show()
        else:
            parser.print_help()
            return 1
    except KeyboardInterrupt:
        print_error(UserCancelled())
        return 1


if __name__ == "__main__":
    sys.exit(main())

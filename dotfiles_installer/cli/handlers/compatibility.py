"""Check-compatibility command handler.

Detects the host, shows what was found and evaluates it against the
compatibility policy without installing anything.
"""

import argparse
import logging

from rich.table import Table

from dotfiles_installer.cli.utils.output import print_error
from dotfiles_installer.compatibility import CompatibilityGate, load_compatibility_config
from dotfiles_installer.errors import InstallerError
from dotfiles_installer.host import HostInfo, HostProbe
from dotfiles_installer.ui import SYMBOLS, console

logger = logging.getLogger(__name__)


class CompatibilityHandler:
    """Handler for the check-compatibility command."""

    def __init__(self, probe: HostProbe | None = None):
        self.probe = probe or HostProbe()

    def _host_table(self, host: HostInfo) -> Table:
        table = Table(title="Detected system", show_header=False, box=None)
        table.add_column("Field", style="label")
        table.add_column("Value", style="value")
        table.add_row("Operating system", host.os)
        table.add_row("Distribution", host.distro or "-")
        table.add_row("Architecture", host.arch)
        return table

    def _prerequisite_table(self, host: HostInfo) -> Table:
        table = Table(title="Prerequisites")
        table.add_column("Name")
        table.add_column("Status")
        table.add_column("Description", style="detail")
        for detail in host.prerequisites.details:
            if detail.available:
                status = f"[success]{SYMBOLS['success']} available[/]"
            else:
                status = f"[error]{SYMBOLS['error']} missing[/]"
            table.add_row(detail.name, status, detail.description)
        return table

    def check(self, compat_config_path: str | None = None) -> int:
        try:
            config = load_compatibility_config(compat_config_path)
            host = self.probe.detect(config)
        except ValueError as e:
            console.error(str(e))
            return 1
        except InstallerError as e:
            print_error(e)
            return 1

        console.print(self._host_table(host))
        if host.prerequisites.details:
            console.blank()
            console.print(self._prerequisite_table(host))
        console.blank()

        gate = CompatibilityGate(config)
        try:
            gate.check(host)
            gate.check_prerequisites(host)
        except InstallerError as e:
            print_error(e)
            return 1

        console.success("System is compatible")
        return 0


def add_compatibility_parser(subparsers, parents=()) -> argparse.ArgumentParser:
    """Add check-compatibility parser to subparsers."""
    return subparsers.add_parser(
        "check-compatibility",
        help="Check whether this system can be bootstrapped",
        parents=list(parents),
    )

"""Privilege escalation for commands that modify system state."""

import logging
import os
import shutil

logger = logging.getLogger(__name__)

ESCALATION_TOOLS = ("sudo", "doas")


def is_root() -> bool:
    """Check whether the current process runs with uid 0."""
    return os.geteuid() == 0


class Escalator:
    """Prefixes commands with sudo/doas when the process is not privileged."""

    def __init__(self, running_as_root: bool | None = None):
        self.running_as_root = is_root() if running_as_root is None else running_as_root
        self._tool: str | None = None
        self._resolved = False

    @property
    def tool(self) -> str | None:
        """The escalation tool in use, or None when running directly."""
        if not self._resolved:
            self._resolved = True
            if not self.running_as_root:
                self._tool = next((t for t in ESCALATION_TOOLS if shutil.which(t)), None)
                if self._tool is None:
                    logger.warning("Neither sudo nor doas found; running privileged commands directly")
        return self._tool

    def escalate(self, name: str, args: list[str]) -> tuple[str, list[str]]:
        """Return the (name, args) pair to run for a privileged command."""
        if self.running_as_root or self.tool is None:
            return name, list(args)
        return self.tool, [name] + list(args)

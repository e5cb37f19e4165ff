"""
Subsystem installer contract.

Every installable subsystem (brew, shell, gpg, dotfiles engine) follows the
same check-then-install protocol. The base class owns the state machine:

    unknown -> available | missing -> installing -> installed | failed

installed and failed are terminal for the run. install() never invokes the
subclass's installation step when the subsystem is already available; only
the idempotent fix-up hook runs in that case.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum

from dotfiles_installer.errors import InstallerError, SubsystemInstallError

logger = logging.getLogger(__name__)


class SubsystemState(Enum):
    UNKNOWN = "unknown"
    AVAILABLE = "available"
    MISSING = "missing"
    INSTALLING = "installing"
    INSTALLED = "installed"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (SubsystemState.INSTALLED, SubsystemState.FAILED)


class SubsystemInstaller(ABC):
    """Base class for check-then-install subsystems."""

    name: str = "subsystem"

    def __init__(self):
        self._state = SubsystemState.UNKNOWN

    @property
    def state(self) -> SubsystemState:
        return self._state

    def _transition(self, new_state: SubsystemState) -> None:
        if self._state.terminal:
            raise RuntimeError(f"{self.name} is already {self._state.value}")
        logger.debug(f"{self.name}: {self._state.value} -> {new_state.value}")
        self._state = new_state

    @abstractmethod
    def _probe(self) -> bool:
        """Side-effect-free availability check."""

    @abstractmethod
    def _install(self) -> None:
        """Install the subsystem. Only called when the probe reported it missing."""

    def _fix_up(self) -> None:
        """Idempotent environment adjustments, run whether or not anything was installed."""

    def is_available(self) -> bool:
        if self._state is SubsystemState.INSTALLED:
            return True
        if self._state is SubsystemState.FAILED:
            return False
        available = self._probe()
        self._transition(SubsystemState.AVAILABLE if available else SubsystemState.MISSING)
        return available

    def install(self) -> None:
        """Install the subsystem if missing; a no-op apart from fix-ups when present.

        Raises:
            InstallerError: The underlying failure, typed by its origin
            SubsystemInstallError: For failures outside the installer's own error types
        """
        if self._state is SubsystemState.INSTALLED:
            self._fix_up()
            return
        if self._state is SubsystemState.FAILED:
            raise SubsystemInstallError(f"{self.name} installation already failed")

        if self.is_available():
            self._fix_up()
            self._transition(SubsystemState.INSTALLED)
            return

        self._transition(SubsystemState.INSTALLING)
        try:
            self._install()
            self._fix_up()
        except InstallerError:
            self._state = SubsystemState.FAILED
            raise
        except OSError as e:
            self._state = SubsystemState.FAILED
            raise SubsystemInstallError(f"failed to install {self.name}: {e}") from e
        except BaseException:
            self._state = SubsystemState.FAILED
            raise
        self._transition(SubsystemState.INSTALLED)

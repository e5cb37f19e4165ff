"""
Installer error hierarchy.

Every failure the installer can surface derives from InstallerError so the
CLI can print it with its recovery hint and exit with status 1.
"""


class InstallerError(Exception):
    """Base class for all errors surfaced to the user."""

    def __init__(self, message: str, hint: str | None = None):
        super().__init__(message)
        self.message = message
        self.hint = hint

    def __str__(self) -> str:
        return self.message


class DetectionError(InstallerError):
    """The host OS or distribution could not be detected."""


class IncompatibleError(InstallerError):
    """The host is not supported by the compatibility policy.

    host_info holds the detection record so callers can still show the
    missing prerequisites and their install hints.
    """

    def __init__(self, message: str, host_info=None, hint: str | None = None):
        super().__init__(message, hint=hint)
        self.host_info = host_info


class ResolveError(InstallerError):
    """Base class for package-map resolution failures."""


class NoMapping(ResolveError):
    """No mapping exists for a package code, or for the code on a manager."""

    def __init__(self, code: str, manager: str | None = None):
        if manager is None:
            message = f"no package mapping found for package '{code}'"
        else:
            message = f"no package mapping found for package '{code}' on package manager '{manager}'"
        super().__init__(message)
        self.code = code
        self.manager = manager


class NeedsDistroMapping(ResolveError):
    """A distro-keyed name has no entry for the current distribution."""

    def __init__(self, code: str, distro: str):
        super().__init__(
            f"package '{code}' requires distro-specific mapping for '{distro}' "
            "distribution, but no mapping is defined"
        )
        self.code = code
        self.distro = distro


class BadConstraint(ResolveError):
    """A version constraint string could not be parsed."""

    def __init__(self, constraint: str, code: str):
        super().__init__(f"invalid version constraint string '{constraint}' for package '{code}'")
        self.constraint = constraint
        self.code = code


class CommandError(InstallerError):
    """An external command could not be started."""


class CommandTimeoutError(InstallerError):
    """An external command exceeded its timeout and was killed."""


class PackageManagerError(InstallerError):
    """A package manager command exited with a non-zero status."""

    def __init__(self, message: str, exit_code: int = 1, stderr: str = "", hint: str | None = None):
        stderr_tail = (stderr or "").strip()[-2000:]
        if stderr_tail:
            message = f"{message}: {stderr_tail}"
        super().__init__(message, hint=hint)
        self.exit_code = exit_code
        self.stderr = stderr_tail


class NetworkError(InstallerError):
    """An HTTP download failed or returned a non-200 status."""


class FilesystemError(InstallerError):
    """A filesystem operation failed."""


class PrereqRemediationError(InstallerError):
    """Installing a missing prerequisite failed."""


class SubsystemInstallError(InstallerError):
    """A subsystem (brew, shell, gpg, dotfiles engine) failed to install or apply."""


class UserCancelled(InstallerError):
    """The user aborted the run (Ctrl-C or an empty selection)."""

    def __init__(self, message: str = "Operation cancelled by user"):
        super().__init__(message)

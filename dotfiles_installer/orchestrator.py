"""
Install orchestration.

Sequences a full bootstrap run:

    Detected -> [BrewReady on darwin] -> Compatible -> PrereqsOK
      -> [BrewReady on linux] -> ShellReady -> GpgReady -> DotfilesReady -> Done

Each step either completes or raises; nothing after a failed required step
runs. The compatibility gate is re-evaluated exactly once, after a
successful prerequisite remediation.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from dotfiles_installer.compatibility import CompatibilityConfig, CompatibilityGate
from dotfiles_installer.errors import CommandError, IncompatibleError, UserCancelled
from dotfiles_installer.host import HostInfo, HostProbe
from dotfiles_installer.http import HTTPClient
from dotfiles_installer.installers import (
    BrewInstaller,
    ChezmoiInstaller,
    DotfilesData,
    GpgClient,
    GpgInstaller,
    ShellChanger,
    ShellInstaller,
    SystemData,
    WorkEnvData,
)
from dotfiles_installer.installers.chezmoi import DEFAULT_GITHUB_USERNAME
from dotfiles_installer.osmanager import ProgramQuery, UserManager
from dotfiles_installer.packagemap import PackageMap
from dotfiles_installer.pkgmanager import PackageManager, create_package_manager, select_package_manager_name
from dotfiles_installer.prerequisites import PrerequisiteInstaller
from dotfiles_installer.privilege import Escalator
from dotfiles_installer.resolver import Resolver
from dotfiles_installer.runner import CommandRunner, DisplayMode, RunOptions
from dotfiles_installer.ui.progress import NoopProgress, ProgressReporter, operation, paused
from dotfiles_installer.ui.prompts import GpgKeySelector, PrerequisiteSelector

logger = logging.getLogger(__name__)

GIT_CLONE_PROTOCOLS = ("ssh", "https")


class InstallStage(Enum):
    START = "start"
    DETECTED = "detected"
    COMPATIBLE = "compatible"
    PREREQS_OK = "prereqs_ok"
    BREW_READY = "brew_ready"
    SHELL_READY = "shell_ready"
    GPG_READY = "gpg_ready"
    DOTFILES_READY = "dotfiles_ready"
    DONE = "done"


@dataclass(frozen=True)
class InstallOptions:
    """Everything the install command needs, fixed for the whole run."""

    shell: str = "zsh"
    install_brew: bool = True
    install_prerequisites: bool = False
    git_clone_protocol: str = "ssh"
    work_env: bool = False
    work_name: str = ""
    work_email: str = ""
    multi_user_system: bool = False
    branch: str = ""
    github_username: str = DEFAULT_GITHUB_USERNAME
    set_default_shell: bool = False
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    interactive: bool = True
    display_mode: DisplayMode = DisplayMode.PROGRESS

    def __post_init__(self):
        if self.git_clone_protocol not in GIT_CLONE_PROTOCOLS:
            raise ValueError(f"git clone protocol must be one of {', '.join(GIT_CLONE_PROTOCOLS)}")
        if not self.shell:
            raise ValueError("shell must not be empty")


class Orchestrator:
    """Runs the install command from detection to applied dotfiles."""

    def __init__(
        self,
        compatibility_config: CompatibilityConfig,
        package_map: PackageMap,
        options: InstallOptions,
        runner: CommandRunner | None = None,
        escalator: Escalator | None = None,
        probe: HostProbe | None = None,
        http_client: HTTPClient | None = None,
        progress: ProgressReporter | None = None,
        user_manager: UserManager | None = None,
        gpg_client: GpgClient | None = None,
        key_selector: GpgKeySelector | None = None,
        prerequisite_selector: PrerequisiteSelector | None = None,
        package_manager_factory: Callable[..., PackageManager] = create_package_manager,
    ):
        self.compatibility_config = compatibility_config
        self.package_map = package_map
        self.options = options
        self.runner = runner or CommandRunner(options.display_mode)
        self.escalator = escalator or Escalator()
        self.program_query = ProgramQuery(self.runner)
        self.probe = probe or HostProbe(self.program_query, self.runner)
        self.http_client = http_client or HTTPClient()
        self.progress = progress or NoopProgress()
        self.user_manager = user_manager or UserManager(self.runner)
        self.gpg_client = gpg_client or GpgClient(self.runner)
        self.key_selector = key_selector or GpgKeySelector()
        self.package_manager_factory = package_manager_factory
        self.gate = CompatibilityGate(compatibility_config)
        self.prerequisite_installer = PrerequisiteInstaller(
            package_map, self._make_package_manager, prerequisite_selector
        )
        self.stage = InstallStage.START
        self.brew: BrewInstaller | None = None

    def _advance(self, stage: InstallStage) -> None:
        logger.debug(f"Install stage: {self.stage.value} -> {stage.value}")
        self.stage = stage

    def _make_package_manager(self, name: str, brew_path: str | None = None) -> PackageManager:
        return self.package_manager_factory(
            name,
            runner=self.runner,
            escalator=self.escalator,
            display_mode=self.options.display_mode,
            brew_path=brew_path,
        )

    def run(self) -> HostInfo:
        """Execute the whole install sequence.

        Raises:
            InstallerError: The first failure, which terminates the run
        """
        try:
            return self._run()
        except KeyboardInterrupt as e:
            cancel = getattr(self.progress, "cancel", None)
            if cancel is not None:
                cancel()
            raise UserCancelled() from e

    def _run(self) -> HostInfo:
        with operation(self.progress, "Detecting system", "System detected"):
            host = self.probe.detect(self.compatibility_config)
        self._advance(InstallStage.DETECTED)

        if host.os == "darwin" and self.options.install_brew:
            self._bootstrap_brew(host)

        host = self.ensure_compatible(host)

        if host.os != "darwin" and self.options.install_brew:
            self._bootstrap_brew(host)

        package_manager, resolver = self._subsystem_package_manager(host)

        shell_installer = ShellInstaller(self.options.shell, self.program_query, package_manager)
        with operation(self.progress, f"Installing {self.options.shell}", f"{self.options.shell} is ready"):
            shell_installer.install()
        if self.options.set_default_shell:
            self._set_default_shell(from_brew=shell_installer.installed_with == "brew")
        self._advance(InstallStage.SHELL_READY)

        with operation(self.progress, "Installing GPG", "GPG is ready"):
            GpgInstaller(self.program_query, package_manager, resolver).install()
        signing_key = self._provision_gpg_key()
        self._advance(InstallStage.GPG_READY)

        chezmoi = ChezmoiInstaller(
            runner=self.runner,
            program_query=self.program_query,
            user_manager=self.user_manager,
            http_client=self.http_client,
            package_manager=package_manager,
            resolver=resolver,
            github_username=self.options.github_username,
            use_ssh=self.options.git_clone_protocol == "ssh",
            branch=self.options.branch,
        )
        with operation(self.progress, "Installing chezmoi", "chezmoi is ready"):
            chezmoi.install()
        with operation(self.progress, "Writing chezmoi configuration", "chezmoi configured"):
            chezmoi.initialize(self.build_dotfiles_data(signing_key))
        with operation(self.progress, "Applying dotfiles", "Dotfiles applied"):
            chezmoi.apply()
        self._advance(InstallStage.DOTFILES_READY)

        self._advance(InstallStage.DONE)
        return host

    def ensure_compatible(self, host: HostInfo) -> HostInfo:
        """Gate the host, remediating missing prerequisites once if needed."""
        with operation(self.progress, "Checking compatibility", "System is compatible"):
            self.gate.check(host)
        self._advance(InstallStage.COMPATIBLE)

        try:
            self.gate.check_prerequisites(host)
        except IncompatibleError as first_failure:
            remediated = self._remediate(host)
            if not remediated:
                raise first_failure

            with operation(self.progress, "Re-checking compatibility", "Prerequisites satisfied"):
                host = self.probe.detect(self.compatibility_config)
                self.gate.check(host)
                self.gate.check_prerequisites(host)

        self._advance(InstallStage.PREREQS_OK)
        return host

    def _remediate(self, host: HostInfo) -> bool:
        install_all = self.options.install_prerequisites or not self.options.interactive
        if install_all:
            with operation(self.progress, "Installing missing prerequisites", "Prerequisites installed"):
                return self.prerequisite_installer.remediate(host, self.options.interactive, install_all=True)
        with paused(self.progress):
            return self.prerequisite_installer.remediate(host, self.options.interactive)

    def _bootstrap_brew(self, host: HostInfo) -> None:
        self.brew = BrewInstaller(host, self.runner, self.http_client)
        with operation(self.progress, "Installing Homebrew", "Homebrew is ready"):
            self.brew.install()
        self._advance(InstallStage.BREW_READY)

    def _subsystem_package_manager(self, host: HostInfo) -> tuple[PackageManager | None, Resolver | None]:
        """Brew when it was bootstrapped, otherwise the system package manager."""
        if self.brew is not None:
            name = "brew"
            manager = self._make_package_manager(name, brew_path=self.brew.brew_path)
        else:
            name = select_package_manager_name(host)
            if name is None:
                logger.warning(f"No package manager available for {host.os}/{host.distro or '-'}")
                return None, None
            manager = self._make_package_manager(name)
        return manager, Resolver(self.package_map, name, host.distro)

    def _set_default_shell(self, from_brew: bool) -> None:
        """Make the shell the login shell. A shell already on the system is looked up on PATH."""
        brew_path = self.brew.brew_path if from_brew and self.brew is not None else ""
        changer = ShellChanger(
            self.options.shell,
            brew_path=brew_path,
            program_query=self.program_query,
            user_manager=self.user_manager,
            runner=self.runner,
            escalator=self.escalator,
        )
        with paused(self.progress):
            changer.set_as_default()

    def _provision_gpg_key(self) -> str | None:
        """Pick or create a signing key. Only done interactively."""
        if not self.options.interactive:
            logger.info("Skipping GPG key setup in non-interactive mode")
            return None
        keys = self.gpg_client.list_available_keys()
        with paused(self.progress):
            if not keys:
                return self.gpg_client.create_key_pair()
            return self.key_selector.select(keys)

    def _git_config(self, key: str) -> str:
        try:
            result = self.runner.run("git", ["config", "--global", key], RunOptions(capture=True))
        except CommandError:
            return ""
        return result.stdout.strip() if result.ok else ""

    def build_dotfiles_data(self, signing_key: str | None) -> DotfilesData:
        opts = self.options
        email = opts.email or self._git_config("user.email")
        first_name, last_name = opts.first_name, opts.last_name
        if not first_name and not last_name:
            first_name, _, last_name = self._git_config("user.name").partition(" ")

        work_env = WorkEnvData(opts.work_name, opts.work_email) if opts.work_env else None
        system = SystemData(
            shell=opts.shell,
            user=self.user_manager.get_current_username(),
            multi_user_system=opts.multi_user_system,
            brew_multi_user=opts.multi_user_system and opts.install_brew,
        )
        return DotfilesData(
            email=email,
            first_name=first_name,
            last_name=last_name,
            gpg_signing_key=signing_key,
            work_env=work_env,
            system=system,
        )

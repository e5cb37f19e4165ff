"""
chezmoi dotfiles engine: install, initialize, apply.

Initialize writes the user's data (identity, GPG key, work profile, system
details) into chezmoi's TOML config so the dotfiles templates can use it.
Apply clones the dotfiles repository and applies it in one step.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

import tomlkit

from dotfiles_installer import filesystem
from dotfiles_installer.errors import CommandError, PackageManagerError, SubsystemInstallError
from dotfiles_installer.http import HTTPClient
from dotfiles_installer.installers.base import SubsystemInstaller
from dotfiles_installer.osmanager import ProgramQuery, UserManager, prepend_to_path
from dotfiles_installer.pkgmanager import PackageManager
from dotfiles_installer.resolver import Resolver
from dotfiles_installer.runner import CommandRunner, RunOptions

logger = logging.getLogger(__name__)

CHEZMOI_PACKAGE_CODE = "chezmoi"
CHEZMOI_MIN_VERSION = ">=2.60.0"
CHEZMOI_INSTALL_SCRIPT_URL = "https://get.chezmoi.io"
DEFAULT_GITHUB_USERNAME = "MrPointer"


@dataclass(frozen=True)
class WorkEnvData:
    work_name: str = ""
    work_email: str = ""


@dataclass(frozen=True)
class SystemData:
    shell: str = "zsh"
    user: str = ""
    multi_user_system: bool = False
    brew_multi_user: bool = False


@dataclass(frozen=True)
class DotfilesData:
    """User data handed to the engine. None means the section is absent."""

    email: str
    first_name: str
    last_name: str
    gpg_signing_key: str | None = None
    work_env: WorkEnvData | None = None
    system: SystemData | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


def build_config_document(data: DotfilesData) -> tomlkit.TOMLDocument:
    """The chezmoi config as a TOML document; absent optional sections are omitted."""
    personal = tomlkit.table()
    personal["email"] = data.email
    personal["full_name"] = data.full_name
    if data.work_env is not None:
        personal["work_env"] = True
        personal["work_name"] = data.work_env.work_name
        personal["work_email"] = data.work_env.work_email
    else:
        personal["work_env"] = False

    data_table = tomlkit.table()
    data_table["personal"] = personal

    if data.gpg_signing_key:
        gpg = tomlkit.table()
        gpg["signing_key"] = data.gpg_signing_key
        data_table["gpg"] = gpg

    if data.system is not None:
        system = tomlkit.table()
        system["shell"] = data.system.shell
        system["multi_user_system"] = data.system.multi_user_system
        system["brew_multi_user"] = data.system.brew_multi_user
        data_table["system"] = system

    doc = tomlkit.document()
    doc["data"] = data_table
    return doc


class ChezmoiInstaller(SubsystemInstaller):
    name = "chezmoi"

    def __init__(
        self,
        runner: CommandRunner | None = None,
        program_query: ProgramQuery | None = None,
        user_manager: UserManager | None = None,
        http_client: HTTPClient | None = None,
        package_manager: PackageManager | None = None,
        resolver: Resolver | None = None,
        github_username: str = DEFAULT_GITHUB_USERNAME,
        use_ssh: bool = True,
        branch: str = "",
    ):
        super().__init__()
        self.runner = runner or CommandRunner()
        self.program_query = program_query or ProgramQuery(self.runner)
        self.user_manager = user_manager or UserManager(self.runner)
        self.http_client = http_client or HTTPClient()
        self.package_manager = package_manager
        self.resolver = resolver
        self.github_username = github_username
        self.use_ssh = use_ssh
        self.branch = branch

    @property
    def config_dir(self) -> Path:
        return self.user_manager.get_config_dir() / "chezmoi"

    @property
    def config_file(self) -> Path:
        return self.config_dir / "chezmoi.toml"

    @property
    def clone_dir(self) -> Path:
        return self.user_manager.get_home_dir() / ".local" / "share" / "chezmoi"

    @property
    def local_bin_dir(self) -> Path:
        return self.user_manager.get_home_dir() / ".local" / "bin"

    def _binary(self) -> str:
        local = self.local_bin_dir / "chezmoi"
        if filesystem.is_executable(local):
            return str(local)
        return self.program_query.get_program_path("chezmoi") or "chezmoi"

    def _probe(self) -> bool:
        return self.program_query.program_exists("chezmoi") or filesystem.is_executable(self.local_bin_dir / "chezmoi")

    def _fix_up(self) -> None:
        if filesystem.is_executable(self.local_bin_dir / "chezmoi"):
            prepend_to_path(str(self.local_bin_dir))

    def _install(self) -> None:
        if self.package_manager is not None and self.resolver is not None:
            request = self.resolver.resolve(CHEZMOI_PACKAGE_CODE, CHEZMOI_MIN_VERSION)
            try:
                self.package_manager.install_package(request)
                return
            except PackageManagerError as e:
                logger.warning(f"Installing chezmoi with {self.package_manager.name} failed, using install script: {e}")

        self._install_from_script()

    def _install_from_script(self) -> None:
        script = self.http_client.get_text(CHEZMOI_INSTALL_SCRIPT_URL)
        filesystem.ensure_directory(self.local_bin_dir)
        result = self.runner.run("sh", ["-c", script, "--", "-b", str(self.local_bin_dir)])
        if not result.ok:
            raise SubsystemInstallError(
                f"chezmoi install script failed with exit code {result.exit_code}",
                hint="See https://www.chezmoi.io/install/ for manual installation",
            )

    def initialize(self, data: DotfilesData) -> Path:
        """Write the chezmoi config file, creating its directory if needed."""
        filesystem.ensure_directory(self.config_dir)
        content = tomlkit.dumps(build_config_document(data))
        filesystem.write_text(self.config_file, content)
        logger.info(f"Wrote chezmoi config to {self.config_file}")
        return self.config_file

    def apply_args(self) -> list[str]:
        args = ["init", "--apply", "--source", str(self.clone_dir)]
        if self.use_ssh:
            args.append("--ssh")
        if self.branch:
            args.extend(["--branch", self.branch])
        args.extend(["--config", str(self.config_file), self.github_username])
        return args

    def apply(self) -> None:
        """Clone the dotfiles repository from scratch and apply it."""
        filesystem.remove_path(self.clone_dir)
        try:
            result = self.runner.run(self._binary(), self.apply_args(), RunOptions())
        except CommandError as e:
            raise SubsystemInstallError(f"failed to run chezmoi: {e}") from e
        if not result.ok:
            raise SubsystemInstallError(f"chezmoi init failed with exit code {result.exit_code}")

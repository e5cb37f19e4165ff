"""Tests for the apt, dnf and brew adapters."""

import pytest

from conftest import make_host
from dotfiles_installer.errors import CommandError, PackageManagerError
from dotfiles_installer.pkgmanager import (
    AptPackageManager,
    BrewPackageManager,
    DnfPackageManager,
    PackageInfo,
    PackageRequest,
    create_package_manager,
    select_package_manager_name,
)
from dotfiles_installer.runner import DisplayMode


class TestSelection:
    @pytest.mark.parametrize(
        "os_name,distro,expected",
        [
            ("linux", "ubuntu", "apt"),
            ("linux", "debian", "apt"),
            ("linux", "fedora", "dnf"),
            ("linux", "centos", "dnf"),
            ("darwin", "", "brew"),
            ("linux", "arch", None),
            ("windows", "", None),
        ],
    )
    def test_select_package_manager_name(self, os_name, distro, expected):
        assert select_package_manager_name(make_host(os_name, distro)) == expected

    def test_create_package_manager(self, fake_runner, root_escalator):
        manager = create_package_manager("dnf", fake_runner, root_escalator)
        assert isinstance(manager, DnfPackageManager)
        brew = create_package_manager("brew", fake_runner, root_escalator, brew_path="/opt/homebrew/bin/brew")
        assert isinstance(brew, BrewPackageManager)
        assert brew.brew_path == "/opt/homebrew/bin/brew"

    def test_create_unknown_package_manager(self):
        with pytest.raises(ValueError, match="unsupported package manager: pacman"):
            create_package_manager("pacman")


class TestApt:
    """Tests for AptPackageManager."""

    def test_install_updates_index_once(self, fake_runner, sudo_escalator):
        apt = AptPackageManager(fake_runner, sudo_escalator)
        apt.install_package(PackageRequest(name="git"))
        apt.install_package(PackageRequest(name="curl"))
        # the frontend is set inside the escalated command, past sudo's env_reset
        assert fake_runner.calls == [
            ["sudo", "env", "DEBIAN_FRONTEND=noninteractive", "apt-get", "update"],
            ["sudo", "env", "DEBIAN_FRONTEND=noninteractive", "apt-get", "install", "-y", "git"],
            ["sudo", "env", "DEBIAN_FRONTEND=noninteractive", "apt-get", "install", "-y", "curl"],
        ]

    def test_install_failure_carries_stderr(self, fake_runner, root_escalator):
        fake_runner.on(
            "env",
            "DEBIAN_FRONTEND=noninteractive",
            "apt-get",
            "install",
            exit_code=100,
            stderr="E: Unable to locate package nope",
        )
        apt = AptPackageManager(fake_runner, root_escalator)
        with pytest.raises(PackageManagerError) as exc_info:
            apt.install_package(PackageRequest(name="nope"))
        assert exc_info.value.exit_code == 100
        assert "Unable to locate package nope" in str(exc_info.value)

    def test_missing_binary(self, fake_runner, root_escalator):
        fake_runner.on("env", raises=CommandError("command not found: env"))
        with pytest.raises(PackageManagerError) as exc_info:
            AptPackageManager(fake_runner, root_escalator).install_package(PackageRequest(name="git"))
        assert exc_info.value.exit_code == 127

    def test_missing_apt_get(self, fake_runner, root_escalator):
        fake_runner.on("env", exit_code=127, stderr="env: 'apt-get': No such file or directory")
        with pytest.raises(PackageManagerError, match="No such file or directory") as exc_info:
            AptPackageManager(fake_runner, root_escalator).install_package(PackageRequest(name="git"))
        assert exc_info.value.exit_code == 127

    def test_uninstall(self, fake_runner, root_escalator):
        AptPackageManager(fake_runner, root_escalator).uninstall_package(PackageRequest(name="git"))
        assert fake_runner.calls == [["env", "DEBIAN_FRONTEND=noninteractive", "apt-get", "remove", "-y", "git"]]

    def test_get_info(self, fake_runner, root_escalator):
        fake_runner.on("apt", "--version", stdout="apt 2.4.11 (amd64)\n")
        info = AptPackageManager(fake_runner, root_escalator).get_info()
        assert (info.name, info.version) == ("apt", "2.4.11")

    def test_is_package_installed(self, fake_runner, root_escalator):
        fake_runner.on("dpkg-query", "-W", "-f=${Status}", "git", stdout="install ok installed")
        fake_runner.on("dpkg-query", "-W", "-f=${Status}", "zsh", exit_code=1)
        apt = AptPackageManager(fake_runner, root_escalator)
        assert apt.is_package_installed(PackageRequest(name="git"))
        assert not apt.is_package_installed(PackageRequest(name="zsh"))

    def test_list_and_version(self, fake_runner, root_escalator):
        fake_runner.on("dpkg-query", "-W", "-f=${Package} ${Version}\n", stdout="git 1:2.34.1\ncurl 7.81.0\n")
        fake_runner.on("dpkg-query", "-W", "-f=${Version}", "git", stdout="1:2.34.1")
        apt = AptPackageManager(fake_runner, root_escalator)
        assert apt.list_installed_packages() == [PackageInfo("git", "1:2.34.1"), PackageInfo("curl", "7.81.0")]
        assert apt.get_package_version("git") == "1:2.34.1"
        assert apt.get_package_version("missing") is None


class TestDnf:
    """Tests for DnfPackageManager."""

    def test_group_install(self, fake_runner, sudo_escalator):
        dnf = DnfPackageManager(fake_runner, sudo_escalator)
        dnf.install_package(PackageRequest(name="Development Tools", type="group"))
        assert fake_runner.calls == [["sudo", "dnf", "group", "install", "-y", "Development Tools"]]

    def test_package_install_and_remove(self, fake_runner, root_escalator):
        dnf = DnfPackageManager(fake_runner, root_escalator)
        dnf.install_package(PackageRequest(name="git"))
        dnf.uninstall_package(PackageRequest(name="Development Tools", type="group"))
        assert fake_runner.calls == [
            ["dnf", "install", "-y", "git"],
            ["dnf", "group", "remove", "-y", "Development Tools"],
        ]

    def test_group_installed(self, fake_runner, root_escalator):
        fake_runner.on("dnf", "group", "list", "--installed", stdout="Installed Groups:\n   Development Tools\n")
        dnf = DnfPackageManager(fake_runner, root_escalator)
        assert dnf.is_package_installed(PackageRequest(name="Development Tools", type="group"))
        assert not dnf.is_package_installed(PackageRequest(name="C Development Tools and Libraries", type="group"))

    def test_package_installed_uses_rpm(self, fake_runner, root_escalator):
        fake_runner.on("rpm", "-q", "zsh", exit_code=1)
        dnf = DnfPackageManager(fake_runner, root_escalator)
        assert not dnf.is_package_installed(PackageRequest(name="zsh"))
        assert fake_runner.calls == [["rpm", "-q", "zsh"]]

    def test_list_installed(self, fake_runner, root_escalator):
        fake_runner.on(
            "dnf",
            "list",
            "installed",
            stdout="Installed Packages\ngit.x86_64   2.43.0-1.fc39   @updates\nzsh.x86_64 5.9-7.fc39 @fedora\n",
        )
        packages = DnfPackageManager(fake_runner, root_escalator).list_installed_packages()
        assert packages == [PackageInfo("git", "2.43.0-1.fc39"), PackageInfo("zsh", "5.9-7.fc39")]

    def test_get_info_dnf5(self, fake_runner, root_escalator):
        fake_runner.on("dnf", "--version", stdout="dnf5 version 5.1.15\n")
        assert DnfPackageManager(fake_runner, root_escalator).get_info().version == "5.1.15"


class TestBrew:
    """Tests for BrewPackageManager."""

    def test_never_escalates(self, fake_runner, sudo_escalator):
        brew = BrewPackageManager(fake_runner, sudo_escalator, DisplayMode.PLAIN, brew_path="/opt/homebrew/bin/brew")
        brew.install_package(PackageRequest(name="gnupg"))
        assert fake_runner.calls == [["/opt/homebrew/bin/brew", "install", "gnupg"]]

    def test_cask(self, fake_runner, root_escalator):
        brew = BrewPackageManager(fake_runner, root_escalator)
        brew.install_package(PackageRequest(name="iterm2", type="cask"))
        brew.uninstall_package(PackageRequest(name="iterm2", type="cask"))
        assert fake_runner.calls == [
            ["brew", "install", "--cask", "iterm2"],
            ["brew", "uninstall", "--cask", "iterm2"],
        ]

    def test_get_info(self, fake_runner, root_escalator):
        fake_runner.on("brew", "--version", stdout="Homebrew 4.2.5\n")
        assert BrewPackageManager(fake_runner, root_escalator).get_info().version == "4.2.5"

    def test_get_info_unexpected_output(self, fake_runner, root_escalator):
        fake_runner.on("brew", "--version", stdout="something else\n")
        with pytest.raises(PackageManagerError):
            BrewPackageManager(fake_runner, root_escalator).get_info()

    def test_versions(self, fake_runner, root_escalator):
        fake_runner.on("brew", "list", "--versions", stdout="git 2.43.0\npython@3.12 3.12.1 3.12.0\n")
        fake_runner.on("brew", "list", "--versions", "git", stdout="git 2.43.0\n")
        brew = BrewPackageManager(fake_runner, root_escalator)
        assert brew.list_installed_packages() == [PackageInfo("git", "2.43.0"), PackageInfo("python@3.12", "3.12.1")]
        assert brew.get_package_version("git") == "2.43.0"
        assert brew.is_package_installed(PackageRequest(name="git"))

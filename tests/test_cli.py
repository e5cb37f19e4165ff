"""Tests for argument parsing and the command handlers."""

import argparse
from unittest.mock import MagicMock, patch

import pytest

from conftest import make_host
from dotfiles_installer.cli import main, parse_args, select_display, verbosity
from dotfiles_installer.cli.handlers import CompatibilityHandler, InstallHandler
from dotfiles_installer.cli.handlers.install import parse_bool
from dotfiles_installer.errors import NetworkError
from dotfiles_installer.runner import DisplayMode
from dotfiles_installer.settings import InstallSettings
from dotfiles_installer.ui import NoopProgress, PlainProgress, SpinnerProgress


class TestParseArgs:
    def test_global_flags_before_subcommand(self):
        args = parse_args(["--non-interactive", "-v", "install"])
        assert args.command == "install"
        assert args.non_interactive is True
        assert args.verbose == 1

    def test_global_flags_after_subcommand(self):
        args = parse_args(["install", "--plain", "--config", "/tmp/settings.yaml"])
        assert args.plain is True
        assert args.config == "/tmp/settings.yaml"
        assert args.progress is False

    def test_global_defaults(self):
        args = parse_args(["version"])
        assert (args.verbose, args.extra_verbose, args.config, args.compat_config) == (0, False, None, None)

    def test_bool_flag_forms(self):
        assert parse_args(["install", "--install-brew=false"]).install_brew is False
        assert parse_args(["install", "--install-brew"]).install_brew is True
        assert parse_args(["install"]).install_brew is None

    def test_protocol_choices(self):
        assert parse_args(["install", "--git-clone-protocol", "https"]).git_clone_protocol == "https"
        with pytest.raises(SystemExit):
            parse_args(["install", "--git-clone-protocol", "ftp"])

    @pytest.mark.parametrize("value,expected", [("true", True), ("Yes", True), ("0", False), ("off", False)])
    def test_parse_bool(self, value, expected):
        assert parse_bool(value) is expected

    def test_parse_bool_rejects_garbage(self):
        with pytest.raises(argparse.ArgumentTypeError, match="expected a boolean value"):
            parse_bool("maybe")


class TestDisplaySelection:
    def test_default_is_plain(self):
        mode, progress = select_display(parse_args(["install"]))
        assert mode is DisplayMode.PLAIN
        assert isinstance(progress, PlainProgress)

    def test_progress_flag(self):
        mode, progress = select_display(parse_args(["install", "--progress"]))
        assert mode is DisplayMode.PROGRESS
        assert isinstance(progress, SpinnerProgress)

    def test_plain_wins_over_progress(self):
        mode, _ = select_display(parse_args(["install", "--progress", "--plain"]))
        assert mode is DisplayMode.PLAIN

    def test_verbose_streams_output(self):
        args = parse_args(["install", "--extra-verbose", "--progress"])
        assert verbosity(args) == 2
        mode, progress = select_display(args)
        assert mode is DisplayMode.PASSTHROUGH
        assert type(progress) is NoopProgress


class TestBuildOptions:
    """Explicit flag > settings file > default."""

    def test_flags_override_settings(self):
        settings = InstallSettings(shell="bash", install_brew=False, branch="main")
        args = parse_args(["install", "--shell", "fish", "--install-brew=true"])
        options = InstallHandler(interactive=False).build_options(args, settings)
        assert options.shell == "fish"
        assert options.install_brew is True
        assert options.branch == "main"
        assert options.interactive is False

    def test_settings_override_defaults(self):
        settings = InstallSettings(git_clone_protocol="https", work_env=True, work_email="me@corp.example")
        options = InstallHandler().build_options(parse_args(["install"]), settings)
        assert options.git_clone_protocol == "https"
        assert options.work_env is True
        assert options.work_email == "me@corp.example"
        assert options.shell == "zsh"

    def test_identity_flags(self):
        args = parse_args(["install", "--email", "a@example.com", "--first-name", "Ada", "--set-default-shell"])
        options = InstallHandler().build_options(args, InstallSettings())
        assert (options.email, options.first_name, options.last_name) == ("a@example.com", "Ada", "")
        assert options.set_default_shell is True


class TestInstallCommand:
    def test_network_failure_exits_1(self, capsys, tmp_path):
        error = NetworkError("failed to download https://get.chezmoi.io: HTTP status 404")
        with patch("dotfiles_installer.cli.handlers.install.Orchestrator") as orchestrator_cls:
            orchestrator_cls.return_value.run.side_effect = error
            code = main(["install", "--config", str(tmp_path / "missing.yaml")])
        # an explicitly named settings file must exist
        assert code == 1

        settings = tmp_path / "settings.yaml"
        settings.write_text("shell: zsh\n")
        with patch("dotfiles_installer.cli.handlers.install.Orchestrator") as orchestrator_cls:
            orchestrator_cls.return_value.run.side_effect = error
            code = main(["install", "--config", str(settings)])
        assert code == 1
        assert "404" in capsys.readouterr().err

    def test_success(self, capsys, tmp_path):
        settings = tmp_path / "settings.yaml"
        settings.write_text("install_brew: false\n")
        with patch("dotfiles_installer.cli.handlers.install.Orchestrator") as orchestrator_cls:
            orchestrator_cls.return_value.run.return_value = make_host("linux", "ubuntu", "arm64")
            code = main(["install", "--non-interactive", "--config", str(settings)])
        assert code == 0
        options = orchestrator_cls.call_args.args[2]
        assert options.install_brew is False
        assert options.interactive is False

        out = capsys.readouterr().out
        assert "Dotfiles installed" in out
        assert "linux/ubuntu (arm64)" in out
        assert "github.com/MrPointer/dotfiles (ssh)" in out

    def test_invalid_settings_file(self, capsys, tmp_path):
        settings = tmp_path / "settings.yaml"
        settings.write_text("- not\n- a mapping\n")
        assert main(["install", "--config", str(settings)]) == 1
        assert "must contain a mapping" in capsys.readouterr().err

    def test_keyboard_interrupt(self, capsys, tmp_path):
        settings = tmp_path / "settings.yaml"
        settings.write_text("{}\n")
        with patch.object(InstallHandler, "install", side_effect=KeyboardInterrupt):
            assert main(["install", "--config", str(settings)]) == 1
        assert "cancelled" in capsys.readouterr().err.lower()


class TestCompatibilityCommand:
    def test_compatible(self, capsys):
        probe = MagicMock()
        probe.detect.return_value = make_host("linux", "ubuntu", available=["git", "curl"])
        assert CompatibilityHandler(probe).check() == 0
        out = capsys.readouterr().out
        assert "ubuntu" in out
        assert "System is compatible" in out

    def test_missing_prerequisites(self, capsys):
        probe = MagicMock()
        probe.detect.return_value = make_host(
            "linux", "ubuntu", available=["git"], missing=["curl"], hints={"curl": "sudo apt-get install curl"}
        )
        assert CompatibilityHandler(probe).check() == 1
        err = capsys.readouterr().err
        assert "missing prerequisites: curl" in err
        assert "sudo apt-get install curl" in err

    def test_unsupported_os(self, capsys):
        probe = MagicMock()
        probe.detect.return_value = make_host("windows", "")
        assert CompatibilityHandler(probe).check() == 1
        assert "unsupported operating system: windows" in capsys.readouterr().err

    def test_main_dispatch(self):
        with patch("dotfiles_installer.cli.CompatibilityHandler") as handler_cls:
            handler_cls.return_value.check.return_value = 0
            assert main(["check-compatibility", "--compat-config", "policy.yaml"]) == 0
        handler_cls.return_value.check.assert_called_once_with("policy.yaml")


class TestMisc:
    def test_version_command(self, capsys):
        assert main(["version"]) == 0
        assert "dotfiles-installer" in capsys.readouterr().out

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage: dotfiles-installer" in capsys.readouterr().out

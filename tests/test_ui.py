"""Tests for the installer UI module."""

import io
from unittest.mock import patch

import pytest
from rich.console import Console

from dotfiles_installer.errors import UserCancelled
from dotfiles_installer.ui.console import InstallerConsole, console
from dotfiles_installer.ui.progress import NoopProgress, PlainProgress, SpinnerProgress, operation, paused
from dotfiles_installer.ui.prompts import GpgKeySelector, PrerequisiteSelector, multi_select
from dotfiles_installer.ui.theme import INSTALLER_THEME, SYMBOLS


def recording_console():
    return Console(file=io.StringIO(), theme=INSTALLER_THEME, width=100, force_terminal=False)


class TestTheme:
    @pytest.mark.parametrize(
        "style", ["success", "error", "warning", "step", "detail", "label", "value", "choice", "spinner", "border"]
    )
    def test_markup_styles_defined(self, style):
        assert style in INSTALLER_THEME.styles

    def test_symbols_defined(self):
        assert set(SYMBOLS) == {"success", "error", "warning", "bullet", "prompt"}


class TestConsole:
    def test_singleton(self):
        assert InstallerConsole() is InstallerConsole()
        assert InstallerConsole() is console

    def test_errors_go_to_stderr(self, capsys):
        console.error("boom", details="try again")
        captured = capsys.readouterr()
        assert "boom" in captured.err
        assert "try again" in captured.err
        assert "boom" not in captured.out

    def test_success_and_warning_go_to_stdout(self, capsys):
        console.success("gpg is ready")
        console.warning("running as root")
        out = capsys.readouterr().out
        assert f"{SYMBOLS['success']} gpg is ready" in out
        assert f"{SYMBOLS['warning']}  running as root" in out

    def test_summary_lists_fields_in_order(self, capsys):
        console.summary("Dotfiles installed", {"Shell": "zsh", "System": "darwin/- (arm64)"})
        out = capsys.readouterr().out
        assert "Dotfiles installed" in out
        assert out.index("Shell") < out.index("zsh") < out.index("System") < out.index("darwin/- (arm64)")


class TestNoopProgress:
    def test_stack(self):
        progress = NoopProgress()
        progress.start("outer")
        progress.start("inner")
        progress.finish()
        assert progress.is_active()
        progress.fail()
        assert not progress.is_active()
        # finishing with nothing active is harmless
        progress.finish()

    def test_pause_resume(self):
        progress = NoopProgress()
        progress.pause()
        assert progress.is_paused()
        progress.resume()
        assert not progress.is_paused()


class TestPlainProgress:
    def test_prints_status_lines(self):
        rich_console = recording_console()
        progress = PlainProgress(rich_console)
        progress.start("Installing gpg")
        progress.start("Resolving package")
        progress.finish()
        progress.fail("gpg failed")

        lines = rich_console.file.getvalue().splitlines()
        assert lines[0] == "Installing gpg..."
        assert lines[1] == "  Resolving package..."
        assert lines[2].startswith(f"  {SYMBOLS['success']} Resolving package (")
        assert lines[3].startswith(f"{SYMBOLS['error']} gpg failed (")


class TestSpinnerProgress:
    def test_completed_operations_leave_a_line(self):
        rich_console = recording_console()
        progress = SpinnerProgress(rich_console)
        progress.start("Installing chezmoi")
        assert progress.is_active()
        progress.update("Downloading chezmoi")
        progress.finish("chezmoi is ready")
        assert not progress.is_active()
        assert f"{SYMBOLS['success']} chezmoi is ready" in rich_console.file.getvalue()

    def test_cancel_clears_stack(self):
        progress = SpinnerProgress(recording_console())
        progress.start("one")
        progress.start("two")
        progress.cancel()
        assert not progress.is_active()

    def test_pause_while_idle(self):
        progress = SpinnerProgress(recording_console())
        progress.pause()
        progress.start("quiet")
        assert progress.is_paused()
        progress.resume()
        progress.finish()
        assert not progress.is_paused()


class TestHelpers:
    def test_operation_finishes(self):
        progress = NoopProgress()
        with operation(progress, "work"):
            assert progress.is_active()
        assert not progress.is_active()

    def test_operation_fails_and_reraises(self):
        rich_console = recording_console()
        progress = PlainProgress(rich_console)
        with pytest.raises(RuntimeError):
            with operation(progress, "work", "done"):
                raise RuntimeError("nope")
        assert not progress.is_active()
        assert SYMBOLS["error"] in rich_console.file.getvalue()

    def test_paused_restores_state(self):
        progress = NoopProgress()
        with paused(progress):
            assert progress.is_paused()
        assert not progress.is_paused()

        progress.pause()
        with paused(progress):
            pass
        assert progress.is_paused()


class TestSelectors:
    def test_single_key_needs_no_prompt(self):
        with patch("dotfiles_installer.ui.prompts.select") as select:
            assert GpgKeySelector().select(["ABCD"]) == "ABCD"
        select.assert_not_called()

    def test_key_choice(self):
        with patch("dotfiles_installer.ui.prompts.select", return_value=1) as select:
            assert GpgKeySelector().select(["AAAA", "BBBB"]) == "BBBB"
        assert select.call_args.args[1] == ["Key ID: AAAA", "Key ID: BBBB"]

    def test_no_keys(self):
        with pytest.raises(ValueError):
            GpgKeySelector().select([])

    def test_single_prerequisite_is_confirmed(self):
        with patch("dotfiles_installer.ui.prompts.confirm", return_value=False) as confirm:
            assert PrerequisiteSelector().select(["curl"], {"curl": "HTTP client"}) == []
        assert "curl - HTTP client" in confirm.call_args.args[0]

    def test_multiple_prerequisites(self):
        with patch("dotfiles_installer.ui.prompts.multi_select", return_value=[1]):
            assert PrerequisiteSelector().select(["git", "curl"]) == ["curl"]

    def test_multi_select_parses_answers(self):
        answers = iter(["9", "2, 1"])
        with patch("dotfiles_installer.ui.prompts._ask", side_effect=lambda *a, **k: next(answers)):
            assert multi_select("pick", ["a", "b", "c"]) == [0, 1]

    def test_prompt_interrupt_is_cancellation(self):
        with patch("dotfiles_installer.ui.prompts.Prompt.ask", side_effect=KeyboardInterrupt):
            with pytest.raises(UserCancelled):
                multi_select("pick", ["a", "b"])

"""Shared fixtures: a recording command runner and host records."""

from unittest.mock import patch

import pytest

from dotfiles_installer.host import HostInfo, PrerequisiteDetail, PrerequisiteStatus
from dotfiles_installer.privilege import Escalator
from dotfiles_installer.runner import CommandResult, DisplayMode


class FakeRunner:
    """Records every argv and answers from canned responses.

    Responses are matched by argv prefix; the longest matching prefix wins.
    Unmatched commands succeed with empty output.
    """

    def __init__(self):
        self.display_mode = DisplayMode.PLAIN
        self.calls = []
        self.options = []
        self._responses = []

    def on(self, *prefix, exit_code=0, stdout="", stderr="", raises=None):
        self._responses.append((list(prefix), CommandResult(exit_code, stdout, stderr), raises))
        return self

    def run(self, name, args=None, options=None):
        argv = [name] + list(args or [])
        self.calls.append(argv)
        self.options.append(options)
        best = None
        for prefix, result, raises in self._responses:
            if argv[: len(prefix)] == prefix and (best is None or len(prefix) > len(best[0])):
                best = (prefix, result, raises)
        if best is None:
            return CommandResult(0)
        if best[2] is not None:
            raise best[2]
        return best[1]

    def called(self, *prefix) -> bool:
        return any(call[: len(prefix)] == list(prefix) for call in self.calls)


def make_host(os_name="linux", distro="ubuntu", arch="amd64", available=(), missing=(), hints=None):
    """Build a HostInfo with the given prerequisite availability, in declared order."""
    hints = hints or {}
    details = [PrerequisiteDetail(name=n, available=True, command=n) for n in available]
    details += [
        PrerequisiteDetail(
            name=n, available=False, command=n, description=f"{n} tool", install_hint=hints.get(n, "")
        )
        for n in missing
    ]
    return HostInfo(os=os_name, distro=distro, arch=arch, prerequisites=PrerequisiteStatus(tuple(details)))


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture
def sudo_escalator():
    """A non-root escalator that found sudo on PATH."""
    with patch(
        "dotfiles_installer.privilege.shutil.which",
        side_effect=lambda tool: "/usr/bin/sudo" if tool == "sudo" else None,
    ):
        escalator = Escalator(running_as_root=False)
        assert escalator.tool == "sudo"
    return escalator


@pytest.fixture
def root_escalator():
    return Escalator(running_as_root=True)

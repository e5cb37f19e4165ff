"""Installer prompts - GPG key and prerequisite selection."""

from typing import Callable, List, Optional

from rich.prompt import Confirm, Prompt

from dotfiles_installer.errors import UserCancelled

from .console import console
from .theme import SYMBOLS


def _ask(func: Callable, *args, **kwargs):
    try:
        return func(*args, console=console.rich, **kwargs)
    except (KeyboardInterrupt, EOFError) as e:
        raise UserCancelled() from e


def confirm(message: str, default: bool = True) -> bool:
    return _ask(Confirm.ask, f"[value]{message}[/]", default=default)


def select(message: str, options: List[str], default: int = 0) -> int:
    """Ask the user to pick one option; returns its index."""
    console.print(f"\n [label]{message}[/]\n")
    for i, option in enumerate(options):
        prefix = f" [choice]{SYMBOLS['prompt']}[/]" if i == default else "  "
        style = "choice" if i == default else "label"
        console.print(f"{prefix} [{style}]{i + 1}. {option}[/]")
    choices = [str(i + 1) for i in range(len(options))]
    answer = _ask(Prompt.ask, "  Enter number to select", choices=choices, default=str(default + 1))
    return int(answer) - 1


def multi_select(message: str, options: List[str]) -> List[int]:
    """Ask for any subset of options; an empty answer selects all of them."""
    console.print(f"\n [label]{message}[/]\n")
    for i, option in enumerate(options):
        console.print(f"   [value]{i + 1}. {option}[/]")

    while True:
        answer = _ask(Prompt.ask, "  Numbers separated by commas, 'all' or 'none'", default="all")
        answer = answer.strip().lower()
        if answer in ("", "all"):
            return list(range(len(options)))
        if answer == "none":
            return []
        try:
            picked = sorted({int(part) - 1 for part in answer.replace(" ", ",").split(",") if part})
        except ValueError:
            picked = []
        if picked and all(0 <= i < len(options) for i in picked):
            return picked
        console.warning(f"Please enter numbers between 1 and {len(options)}")


class GpgKeySelector:
    """Chooses the GPG key used for signing."""

    def select(self, keys: List[str]) -> str:
        if not keys:
            raise ValueError("no GPG keys to select from")
        if len(keys) == 1:
            return keys[0]
        index = select("Select the GPG key to use:", [f"Key ID: {key}" for key in keys])
        return keys[index]


class PrerequisiteSelector:
    """Lets the user choose which missing prerequisites to install."""

    def select(self, names: List[str], descriptions: Optional[dict] = None) -> List[str]:
        if not names:
            return []
        descriptions = descriptions or {}
        labels = [f"{name} - {descriptions[name]}" if descriptions.get(name) else name for name in names]
        if len(names) == 1:
            return list(names) if confirm(f"Install the missing prerequisite? {labels[0]}") else []
        return [names[i] for i in multi_select("Select prerequisites to install:", labels)]

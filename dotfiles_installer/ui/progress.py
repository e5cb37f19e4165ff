"""Installer progress - nested spinners with timing, and a no-op fallback."""

import time
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from rich.console import Console as RichConsole
from rich.progress import Progress, SpinnerColumn, TaskID, TextColumn, TimeElapsedColumn

from .console import console
from .theme import SYMBOLS


class ProgressReporter(ABC):
    """Reports long-running operations. Operations nest like a stack."""

    @abstractmethod
    def start(self, message: str) -> None:
        pass

    @abstractmethod
    def update(self, message: str) -> None:
        pass

    @abstractmethod
    def finish(self, message: Optional[str] = None) -> None:
        pass

    @abstractmethod
    def fail(self, message: Optional[str] = None) -> None:
        pass

    @abstractmethod
    def pause(self) -> None:
        """Stop rendering so a prompt or passthrough command can own the terminal."""

    @abstractmethod
    def resume(self) -> None:
        pass

    @abstractmethod
    def is_active(self) -> bool:
        pass

    @abstractmethod
    def is_paused(self) -> bool:
        pass


@dataclass
class _Operation:
    message: str
    started_at: float
    task_id: Optional[TaskID] = None

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.started_at


class NoopProgress(ProgressReporter):
    """Tracks operations without rendering anything."""

    def __init__(self):
        self._stack: list[_Operation] = []
        self._paused = False

    def start(self, message: str) -> None:
        self._stack.append(_Operation(message, time.monotonic()))

    def update(self, message: str) -> None:
        if self._stack:
            self._stack[-1].message = message

    def finish(self, message: Optional[str] = None) -> None:
        if self._stack:
            self._stack.pop()

    def fail(self, message: Optional[str] = None) -> None:
        if self._stack:
            self._stack.pop()

    def pause(self) -> None:
        self._paused = True

    def resume(self) -> None:
        self._paused = False

    def is_active(self) -> bool:
        return bool(self._stack)

    def is_paused(self) -> bool:
        return self._paused


class PlainProgress(NoopProgress):
    """Plain status lines, no spinner. Suitable for logs and dumb terminals."""

    def __init__(self, rich_console: Optional[RichConsole] = None):
        super().__init__()
        self._console = rich_console or console.rich

    def start(self, message: str) -> None:
        self._console.print(f"{'  ' * len(self._stack)}[step]{message}...[/]")
        super().start(message)

    def _complete(self, symbol: str, style: str, message: Optional[str]) -> None:
        if not self._stack:
            return
        op = self._stack.pop()
        self._console.print(
            f"{'  ' * len(self._stack)}[{style}]{symbol} {message or op.message}[/] "
            f"[detail]({op.elapsed:.1f}s)[/]"
        )

    def finish(self, message: Optional[str] = None) -> None:
        self._complete(SYMBOLS["success"], "success", message)

    def fail(self, message: Optional[str] = None) -> None:
        self._complete(SYMBOLS["error"], "error", message)


class SpinnerProgress(ProgressReporter):
    """Hierarchical spinners; each finished operation leaves a timed status line."""

    def __init__(self, rich_console: Optional[RichConsole] = None):
        self._console = rich_console or console.rich
        self._progress: Optional[Progress] = None
        self._stack: list[_Operation] = []
        self._paused = False

    def _ensure_progress(self) -> Progress:
        if self._progress is None:
            self._progress = Progress(
                SpinnerColumn(style="spinner"),
                TextColumn("[step]{task.description}[/]"),
                TimeElapsedColumn(),
                console=self._console,
                transient=True,
            )
            if not self._paused:
                self._progress.start()
        return self._progress

    def _indent(self, depth: int) -> str:
        return "  " * depth

    def start(self, message: str) -> None:
        progress = self._ensure_progress()
        task_id = progress.add_task(f"{self._indent(len(self._stack))}{message}", total=None)
        self._stack.append(_Operation(message, time.monotonic(), task_id))

    def update(self, message: str) -> None:
        if not self._stack or self._progress is None:
            return
        op = self._stack[-1]
        op.message = message
        self._progress.update(op.task_id, description=f"{self._indent(len(self._stack) - 1)}{message}")

    def _complete(self, symbol: str, style: str, message: Optional[str]) -> None:
        if not self._stack:
            return
        depth = len(self._stack) - 1
        op = self._stack.pop()
        if self._progress is not None and op.task_id is not None:
            self._progress.remove_task(op.task_id)
        self._console.print(
            f"{self._indent(depth)}[{style}]{symbol} {message or op.message}[/] "
            f"[detail]({op.elapsed:.1f}s)[/]"
        )
        if not self._stack:
            self._stop()

    def finish(self, message: Optional[str] = None) -> None:
        self._complete(SYMBOLS["success"], "success", message)

    def fail(self, message: Optional[str] = None) -> None:
        self._complete(SYMBOLS["error"], "error", message)

    def _stop(self) -> None:
        if self._progress is not None:
            if not self._paused:
                self._progress.stop()
            self._progress = None

    def pause(self) -> None:
        if self._paused:
            return
        self._paused = True
        if self._progress is not None:
            self._progress.stop()

    def resume(self) -> None:
        if not self._paused:
            return
        self._paused = False
        if self._progress is not None:
            self._progress.start()

    def cancel(self) -> None:
        """Drop every active operation and restore the cursor."""
        self._stack.clear()
        self._stop()
        self._console.show_cursor(True)

    def is_active(self) -> bool:
        return bool(self._stack)

    def is_paused(self) -> bool:
        return self._paused


@contextmanager
def operation(reporter: ProgressReporter, message: str, done: Optional[str] = None) -> Iterator[ProgressReporter]:
    """Run a block as a reported operation: finish on success, fail on error."""
    reporter.start(message)
    try:
        yield reporter
    except BaseException:
        reporter.fail()
        raise
    reporter.finish(done)


@contextmanager
def paused(reporter: ProgressReporter) -> Iterator[None]:
    """Pause rendering for the duration of the block."""
    was_paused = reporter.is_paused()
    reporter.pause()
    try:
        yield
    finally:
        if not was_paused:
            reporter.resume()

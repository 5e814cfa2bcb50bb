"""Capabilities handed to the command dispatcher."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from rich.console import Console

from speeddial.config import Settings, default_settings
from speeddial.executor import Executor, ShellExecutor


@dataclass
class Output:
    """Where user-visible text goes."""

    out: Console = field(default_factory=Console)
    err: Console = field(default_factory=lambda: Console(stderr=True))

    def echo(self, text: str = "") -> None:
        # Console.out: no markup, no wrapping
        self.out.out(text, highlight=False)

    def error(self, text: str) -> None:
        self.err.out(text, highlight=False)


@dataclass
class Context:
    """Settings plus the injectable collaborators used by ``cmd_*``."""

    settings: Settings = field(default_factory=default_settings)
    output: Output = field(default_factory=Output)
    executor: Executor | None = None
    terminal_width: Callable[[], int] | None = None

    def __post_init__(self):
        if self.executor is None:
            self.executor = ShellExecutor(self.settings.shell)
        if self.terminal_width is None:
            from speeddial.table import detect_width

            fallback = self.settings.fallback_width
            self.terminal_width = lambda: detect_width(fallback)

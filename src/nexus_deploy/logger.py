"""Coloured status output for deployment runs."""

from typing import Any, Dict, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

LEVELS = ["debug", "info", "warning", "error"]


class StatusLogger:
    """Tagged console logging with a configurable threshold.

    Every line carries one of the ``[INFO]``, ``[SUCCESS]``, ``[WARNING]``
    or ``[ERROR]`` tags. Successes and errors are always shown; ``debug``
    is used for command echoes and captured command output.
    """

    TAGS = {
        "debug": ("DEBUG", "dim"),
        "info": ("INFO", "blue"),
        "success": ("SUCCESS", "green"),
        "warning": ("WARNING", "yellow"),
        "error": ("ERROR", "red"),
    }

    def __init__(self, console: Optional[Console] = None, level: str = "info"):
        self.console = console or Console()
        self.level = level if level in LEVELS else "info"

    @classmethod
    def from_config(cls, config: Dict[str, Any], console: Optional[Console] = None) -> "StatusLogger":
        return cls(console=console, level=config.get("logging", {}).get("level", "info"))

    def _enabled(self, level: str) -> bool:
        return LEVELS.index(level) >= LEVELS.index(self.level)

    def _emit(self, kind: str, message: str) -> None:
        tag, style = self.TAGS[kind]
        self.console.print(f"[{style}]\\[{tag}][/{style}] {escape(message)}", soft_wrap=True)

    def debug(self, message: str) -> None:
        if self._enabled("debug"):
            self._emit("debug", message)

    def info(self, message: str) -> None:
        if self._enabled("info"):
            self._emit("info", message)

    def success(self, message: str) -> None:
        self._emit("success", message)

    def warning(self, message: str) -> None:
        if self._enabled("warning"):
            self._emit("warning", message)

    def error(self, message: str) -> None:
        self._emit("error", message)

    def section(self, title: str) -> None:
        self.console.print()
        self.console.print(f"[bold cyan]{escape(title)}[/bold cyan]")

    def banner(self, title: str) -> None:
        self.console.print(Panel.fit(f"[bold]{escape(title)}[/bold]", border_style="magenta"))

    def line(self, text: str = "") -> None:
        """Print untagged text, e.g. a command the user can copy"""
        self.console.print(escape(text), highlight=False, soft_wrap=True)

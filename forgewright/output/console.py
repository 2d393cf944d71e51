"""Console output for forgewright.

Services report progress through ``ConsoleProtocol`` instead of printing
directly. ``RichConsole`` renders to the terminal; ``MockConsole`` records
every line so tests can assert on what a user would have seen.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "OutputRecord",
    "RichConsole",
    "Style",
]


class Style(Enum):
    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    INFO = auto()
    DIM = auto()  # progress chatter: retries, state transitions
    BOLD = auto()
    HEADER = auto()

    def __str__(self) -> str:
        return self.name.lower()


class ConsoleProtocol(Protocol):
    """Sink for styled, line-oriented output."""

    def print(self, message: str, style: Style = Style.DEFAULT) -> None: ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def header(self, message: str) -> None: ...

    def newline(self) -> None: ...


_RICH_STYLES: dict[Style, str] = {
    Style.DEFAULT: "",
    Style.SUCCESS: "green",
    Style.ERROR: "red bold",
    Style.WARNING: "yellow",
    Style.INFO: "cyan",
    Style.DIM: "dim",
    Style.BOLD: "bold",
    Style.HEADER: "magenta bold",
}


class RichConsole:
    """Terminal console backed by rich.

    Messages are printed without markup interpretation so commit subjects
    containing square brackets are shown verbatim.
    """

    def __init__(self, *, stderr: bool = False, no_color: bool = False) -> None:
        from rich.console import Console

        self._console = Console(stderr=stderr, no_color=no_color, highlight=False)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        rich_style = _RICH_STYLES.get(style, "")
        self._console.print(message, style=rich_style or None, markup=False)

    def _prefixed(self, label: str, label_style: str, message: str) -> None:
        from rich.text import Text

        text = Text(label, style=label_style)
        text.append(" ")
        text.append(message)
        self._console.print(text)

    def success(self, message: str) -> None:
        self._prefixed("✓", "green", message)

    def error(self, message: str) -> None:
        self._prefixed("error:", "red bold", message)

    def warning(self, message: str) -> None:
        self._prefixed("warning:", "yellow", message)

    def info(self, message: str) -> None:
        self._prefixed("info:", "cyan", message)

    def header(self, message: str) -> None:
        self._console.print()
        self._console.print(message, style=_RICH_STYLES[Style.HEADER], markup=False)

    def newline(self) -> None:
        self._console.print()


@dataclass(frozen=True, slots=True)
class OutputRecord:
    message: str
    style: Style


def _no_records() -> list[OutputRecord]:
    return []


@dataclass
class MockConsole:
    """Records output instead of printing it."""

    outputs: list[OutputRecord] = field(default_factory=_no_records)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.outputs.append(OutputRecord(message, style))

    def success(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"✓ {message}", Style.SUCCESS))

    def error(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"error: {message}", Style.ERROR))

    def warning(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"warning: {message}", Style.WARNING))

    def info(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"info: {message}", Style.INFO))

    def header(self, message: str) -> None:
        self.outputs.append(OutputRecord(message, Style.HEADER))

    def newline(self) -> None:
        self.outputs.append(OutputRecord("", Style.DEFAULT))

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    def with_style(self, style: Style) -> list[str]:
        return [o.message for o in self.outputs if o.style == style]

    def has_error(self) -> bool:
        return any(o.style == Style.ERROR for o in self.outputs)

    def has_warning(self) -> bool:
        return any(o.style == Style.WARNING for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        return [o for o in self.outputs if substring in o.message]

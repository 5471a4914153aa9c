# fitlog/ui/console.py
"""
Ports d'E/S injectés dans les services : `Display` (écriture seule) et
`Confirmer` (question oui/non/annuler). Implémentations console via rich.
"""
from __future__ import annotations
from enum import Enum
from typing import Iterable, List, Optional, Protocol, Sequence, Tuple

from rich.console import Console, RenderableType
from rich.markup import escape
from rich.table import Table

from ..config import CANCEL_TOKEN, NAME_COLUMN_MAX
from ..core.models import Session, WeightRecord, YearMonth
from ..theme import console as default_console
from ..utils.dates import day_month, fmt_date, fmt_duration, fmt_hm, long_format


class Answer(str, Enum):
    YES = "yes"
    NO = "no"
    CANCEL = "cancel"


class Confirmer(Protocol):
    def ask(self, prompt: str) -> Answer: ...


class Display(Protocol):
    def info(self, message: str) -> None: ...
    def success(self, message: str) -> None: ...
    def warn(self, message: str) -> None: ...
    def error(self, message: str, usage: Optional[str] = None) -> None: ...
    def show(self, renderable: RenderableType) -> None: ...


# ──────────────────────────────────────────────────────────────────────────────
# Implémentations console
# ──────────────────────────────────────────────────────────────────────────────
class ConsoleDisplay:
    def __init__(self, console: Optional[Console] = None):
        self.console = console or default_console

    def info(self, message: str) -> None:
        self.console.print(escape(message))

    def success(self, message: str) -> None:
        self.console.print(f"[ok]{escape(message)}[/]")

    def warn(self, message: str) -> None:
        self.console.print(f"[warn]{escape(message)}[/]")

    def error(self, message: str, usage: Optional[str] = None) -> None:
        self.console.print(f"[err]{escape(message)}[/]")
        if usage and usage not in message:
            self.console.print(f"[muted]Usage: {escape(usage)}[/]")

    def show(self, renderable: RenderableType) -> None:
        self.console.print(renderable)


class ConsoleConfirmer:
    """Repose la question tant que la réponse n'est pas y / n / /cancel."""

    YES = {"y", "yes"}
    NO = {"n", "no"}

    def __init__(self, console: Optional[Console] = None, cancel_token: str = CANCEL_TOKEN):
        self.console = console or default_console
        self.cancel_token = cancel_token

    def ask(self, prompt: str) -> Answer:
        while True:
            try:
                raw = self.console.input(f"[accent]?[/] {escape(prompt)} [muted](y/n, {self.cancel_token})[/] ")
            except EOFError:
                return Answer.CANCEL
            reply = raw.strip().lower()
            if reply in self.YES:
                return Answer.YES
            if reply in self.NO:
                return Answer.NO
            if reply == self.cancel_token:
                return Answer.CANCEL
            self.console.print(f"[muted]Please answer y, n or {self.cancel_token}.[/]")


class FixedConfirmer:
    """Réponse constante (mode non interactif : `fitlog run --yes`)."""

    def __init__(self, answer: Answer = Answer.NO):
        self.answer = answer

    def ask(self, prompt: str) -> Answer:
        return self.answer


# ──────────────────────────────────────────────────────────────────────────────
# Rendus
# ──────────────────────────────────────────────────────────────────────────────
def _clip(text: str, width: int = NAME_COLUMN_MAX) -> str:
    return text if len(text) <= width else text[: width - 1] + "…"


def _tags(session: Session) -> str:
    return ", ".join(session.tags) or "-"


def log_table(month: YearMonth, rows: Sequence[Tuple[int, Session]], page: int, pages: int) -> Table:
    table = Table(
        title=f"Workouts {month} (page {page}/{pages})",
        show_header=True,
        header_style="accent",
    )
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("Date")
    table.add_column("Time")
    table.add_column("Duration", justify="right")
    table.add_column("Tags", style="tag")
    for index, s in rows:
        when = f"{fmt_hm(s.start)}-{fmt_hm(s.end)}"
        duration = fmt_duration(s.duration_minutes) if s.end else "[warn]active[/]"
        table.add_row(str(index), escape(_clip(s.name)), day_month(s.start), when, duration, escape(_tags(s)))
    return table


def session_detail(session: Session) -> Table:
    grid = Table.grid(padding=(0, 2))
    grid.add_column(style="muted")
    grid.add_column()
    grid.add_row("Workout", f"[title]{escape(session.name)}[/]")
    grid.add_row("Start", long_format(session.start))
    grid.add_row("End", long_format(session.end))
    grid.add_row("Duration", fmt_duration(session.duration_minutes) if session.end else "in progress")
    grid.add_row("Tags", f"[tag]{escape(_tags(session))}[/]")
    if session.conflicting_tags:
        grid.add_row("Overrides", escape(", ".join(session.conflicting_tags)))
    if not session.exercises:
        grid.add_row("Exercises", "[muted]none[/]")
    for i, ex in enumerate(session.exercises, start=1):
        grid.add_row("Exercises" if i == 1 else "", f"{i}. {escape(str(ex))}")
    return grid


def weights_table(records: Iterable[WeightRecord]) -> Table:
    table = Table(title="Weight history", show_header=True, header_style="accent")
    table.add_column("Date")
    table.add_column("Weight (kg)", justify="right")
    for r in records:
        table.add_row(fmt_date(r.date), f"{r.weight:.1f}")
    return table


def help_table(commands: List[Tuple[str, str, str]]) -> Table:
    table = Table(title="Commands", show_header=True, header_style="accent")
    table.add_column("Command")
    table.add_column("Alias", style="muted")
    table.add_column("Usage")
    for name, alias, usage in commands:
        table.add_row(name, alias, escape(usage))
    return table

# fitlog/features/view_log.py
from __future__ import annotations
import math
from typing import List, NamedTuple, Optional, Tuple

from ..config import PAGE_SIZE
from ..core.grammar import parse_open, parse_view_log
from ..core.models import Session, YearMonth
from ..core.results import Err, Ok, Result
from ..services.sessions import SessionManager, display_order, reported
from ..ui.console import log_table, session_detail


class LogPage(NamedTuple):
    month: YearMonth
    page: int
    pages: int
    total: int
    rows: List[Tuple[int, Session]]     # (ID affiché, séance)


def paginate(month: YearMonth, sessions: List[Session], page: int, size: int = PAGE_SIZE) -> LogPage:
    """Découpe la liste triée ; une page hors bornes est ramenée dans [1, pages]."""
    ordered = display_order(sessions)
    pages = max(1, math.ceil(len(ordered) / size))
    page = min(max(1, page), pages)
    first = (page - 1) * size
    rows = [(first + i + 1, s) for i, s in enumerate(ordered[first:first + size])]
    return LogPage(month, page, pages, len(ordered), rows)


class ViewLog:
    """/view_log et /open : lecture seule, n'affecte jamais le mois de travail."""

    def __init__(self, manager: SessionManager, page_size: int = PAGE_SIZE):
        self.manager = manager
        self.page_size = page_size

    def render(self, text: Optional[str]) -> Result:
        return reported(self.manager.display, self._render, text)

    def _render(self, text: Optional[str]) -> Result:
        parsed = parse_view_log(text, self.manager.context())
        if isinstance(parsed, Err):
            return parsed
        month, wanted = parsed.value.month, parsed.value.page
        page = paginate(month, self.manager.store.load(month), wanted, self.page_size)
        display = self.manager.display
        if page.total == 0:
            display.info(f"No workouts logged in {month}.")
            return Ok(page)
        if page.page != wanted:
            display.warn(f"Only {page.pages} page(s) in {month}. Showing page {page.page}.")
        display.show(log_table(month, page.rows, page.page, page.pages))
        return Ok(page)

    def open(self, text: Optional[str]) -> Result:
        return reported(self.manager.display, self._open, text)

    def _open(self, text: Optional[str]) -> Result:
        parsed = parse_open(text, self.manager.context())
        if isinstance(parsed, Err):
            return parsed
        picked = self.manager.pick(parsed.value.month, parsed.value.index)
        if isinstance(picked, Err):
            return picked
        _, session = picked.value
        self.manager.display.show(session_detail(session))
        return Ok(session)

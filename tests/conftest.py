from datetime import date, datetime
from pathlib import Path
from typing import List, Optional, Tuple

import pytest

from fitlog.core.grammar import ParseContext
from fitlog.core.models import Session, YearMonth
from fitlog.core.tagger import KeywordTagger
from fitlog.services.sessions import SessionManager
from fitlog.storage.months import MonthStore
from fitlog.ui.console import Answer

NOW = datetime(2025, 10, 23, 22, 0)


class FakeClock:
    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class ScriptedConfirmer:
    """Rejoue des réponses dans l'ordre, puis `default`."""

    def __init__(self, answers: Optional[List[Answer]] = None, default: Answer = Answer.YES):
        self.answers = list(answers or [])
        self.default = default
        self.prompts: List[str] = []

    def ask(self, prompt: str) -> Answer:
        self.prompts.append(prompt)
        return self.answers.pop(0) if self.answers else self.default


class RecordingDisplay:
    def __init__(self):
        self.messages: List[Tuple[str, str]] = []
        self.shown: list = []

    def info(self, message: str) -> None:
        self.messages.append(("info", message))

    def success(self, message: str) -> None:
        self.messages.append(("success", message))

    def warn(self, message: str) -> None:
        self.messages.append(("warn", message))

    def error(self, message: str, usage: Optional[str] = None) -> None:
        self.messages.append(("error", message))

    def show(self, renderable) -> None:
        self.shown.append(renderable)

    def of(self, level: str) -> List[str]:
        return [m for lvl, m in self.messages if lvl == level]


def session(name: str, start: datetime, end: Optional[datetime] = None, **kw) -> Session:
    return Session(name=name, start=start, end=end, **kw)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def data_dir(tmp_path) -> Path:
    root = tmp_path / "data"
    root.mkdir()
    (root / "creation_month.txt").write_text("2025-01\n", encoding="utf-8")
    return root


@pytest.fixture
def store(data_dir, clock) -> MonthStore:
    s = MonthStore(data_dir, clock)
    s.index()
    return s


@pytest.fixture
def display() -> RecordingDisplay:
    return RecordingDisplay()


@pytest.fixture
def confirm() -> ScriptedConfirmer:
    return ScriptedConfirmer()


@pytest.fixture
def manager(store, display, confirm, clock) -> SessionManager:
    return SessionManager(store, KeywordTagger(), display, confirm, clock)


@pytest.fixture
def ctx() -> ParseContext:
    return ParseContext(today=date(2025, 10, 23), first_month=YearMonth(2025, 1))


OCT = YearMonth(2025, 10)
SEPT = YearMonth(2025, 9)

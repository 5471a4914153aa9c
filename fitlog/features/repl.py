# fitlog/features/repl.py
"""
Boucle interactive : une ligne = une commande (`/add_set r/12` ou alias `as r/12`).
Une ligne qui commence par n/, d/ ou t/ est un /create_workout implicite.
"""
from __future__ import annotations
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, NamedTuple, Optional

from rich.console import Console
from rich.markup import escape

from ..config import DATA_DIR
from ..core import grammar as g
from ..core.results import Ok, Result, invalid
from ..core.tagger import KeywordTagger
from ..services.profile import ProfileService
from ..services.sessions import SessionManager
from ..storage.months import MonthStore
from ..storage.profile import ProfileStore
from ..theme import console as default_console
from ..ui.console import ConsoleConfirmer, ConsoleDisplay, Confirmer, Display, help_table
from ..utils.dates import now_local
from .view_log import ViewLog

log = logging.getLogger("fitlog.repl")

IMPLICIT_CREATE = re.compile(r"^[ndt]/")


class Command(NamedTuple):
    name: str
    alias: str
    usage: str
    handler: Callable[[str], Result]


class Shell:
    def __init__(
        self,
        manager: SessionManager,
        view_log: ViewLog,
        profile: ProfileService,
        display: Display,
        console: Optional[Console] = None,
    ):
        self.manager = manager
        self.view_log = view_log
        self.profile = profile
        self.display = display
        self.console = console or default_console
        self.running = True
        self.commands = self._commands()
        self._lookup: Dict[str, Command] = {}
        for c in self.commands:
            self._lookup[c.name.lstrip("/")] = c
            if c.alias:
                self._lookup[c.alias] = c

    def _commands(self) -> List[Command]:
        m, v, p = self.manager, self.view_log, self.profile
        return [
            Command("/create_workout", "cw", g.CREATE_FLEX.usage, m.create),
            Command("/add_exercise", "ae", g.ADD_EXERCISE.usage, m.add_exercise),
            Command("/add_set", "as", g.ADD_SET.usage, m.add_set),
            Command("/end_workout", "ew", g.END.usage, m.end),
            Command("/del_workout", "d", g.DELETE.usage, m.delete),
            Command("/open", "o", g.OPEN.usage, v.open),
            Command("/view_log", "vl", g.VIEW_LOG.usage, v.render),
            Command("/override_workout_tag", "owt", g.OVERRIDE_TAG.usage, m.override_tag),
            Command("/add_modality_tag", "", g.ADD_MODALITY_TAG.usage, m.add_modality_keyword),
            Command("/add_muscle_tag", "", g.ADD_MUSCLE_TAG.usage, m.add_muscle_keyword),
            Command("/add_weight", "aw", g.ADD_WEIGHT.usage, p.add_weight),
            Command("/view_weight", "vw", "/view_weight", lambda _: p.view_weights()),
            Command("/set_goal", "sg", g.SET_GOAL.usage, p.set_goal),
            Command("/view_goal", "vg", "/view_goal", lambda _: p.view_goal()),
            Command("/my_name", "n", g.MY_NAME.usage, p.set_name),
            Command("/help", "h", "/help", lambda _: self.help()),
            Command("/exit", "e", "/exit", lambda _: self.exit()),
        ]

    def help(self) -> Result:
        self.display.show(help_table([(c.name, c.alias, c.usage) for c in self.commands]))
        return Ok(None)

    def exit(self) -> Result:
        self.running = False
        return Ok(None)

    def execute(self, line: str) -> Result:
        text = line.strip()
        if not text:
            return Ok(None)
        if IMPLICIT_CREATE.match(text):
            return self.manager.create(text)
        word, _, rest = text.partition(" ")
        command = self._lookup.get(word.lstrip("/").lower())
        if command is None:
            err = invalid(f"Unknown command '{word}'. Type /help to see all commands.")
            self.display.error(err.message)
            return err
        log.debug("%s %r", command.name, rest)
        return command.handler(rest)

    def loop(self) -> None:
        name = self.profile.username()
        self.display.info(f"Hi {name}! Type /help for commands, /exit to quit.")
        while self.running:
            try:
                line = self.console.input(f"[you]{escape(name)}[/] [muted]>[/] ")
            except (EOFError, KeyboardInterrupt):
                break
            self.execute(line)
            name = self.profile.username()
        self.display.info("Bye, see you at the next workout!")


def build_shell(
    data_dir: str | Path = DATA_DIR,
    display: Optional[Display] = None,
    confirm: Optional[Confirmer] = None,
    clock: Callable[[], datetime] = now_local,
    console: Optional[Console] = None,
) -> Shell:
    """Assemble store, services et REPL. Les erreurs de stockage au démarrage remontent (StorageError)."""
    display = display or ConsoleDisplay(console)
    confirm = confirm or ConsoleConfirmer(console)
    store = MonthStore(data_dir, clock)
    store.index()
    store.first_month()
    manager = SessionManager(store, KeywordTagger(), display, confirm, clock)
    manager.resume()
    profile = ProfileService(ProfileStore(data_dir), display, confirm, manager.context, clock)
    return Shell(manager, ViewLog(manager), profile, display, console)

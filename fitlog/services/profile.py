# fitlog/services/profile.py
from __future__ import annotations
import logging
from datetime import date, datetime
from typing import Callable, List, Optional

from ..config import DEFAULT_USERNAME
from ..core.grammar import ParseContext, parse_add_weight, parse_my_name, parse_set_goal
from ..core.models import Goal, WeightRecord
from ..core.results import Err, Ok, Result, cancelled, invalid
from ..storage.profile import ProfileStore
from ..ui.console import Answer, Confirmer, Display, weights_table
from ..utils.dates import fmt_date, now_local
from .sessions import reported

log = logging.getLogger("fitlog.profile")


def progress_message(goal: Goal, latest: Optional[WeightRecord]) -> str:
    if latest is None:
        return "Log a weight with /add_weight to track progress."
    gap = latest.weight - goal.weight
    if abs(gap) < 0.05:
        return "You reached your goal weight!"
    direction = "lose" if gap > 0 else "gain"
    return f"{abs(gap):.1f} kg to {direction} to reach your goal."


class ProfileService:
    """Nom affiché, historique de poids, objectif."""

    def __init__(
        self,
        store: ProfileStore,
        display: Display,
        confirm: Confirmer,
        context: Callable[[], ParseContext],
        clock: Callable[[], datetime] = now_local,
    ):
        self.store = store
        self.display = display
        self.confirm = confirm
        self.context = context
        self.clock = clock

    # ── nom ───────────────────────────────────────────────────────────────────
    def username(self) -> str:
        return self.store.load_username() or DEFAULT_USERNAME

    def set_name(self, text: Optional[str]) -> Result:
        return reported(self.display, self._set_name, text)

    def _set_name(self, text: Optional[str]) -> Result:
        parsed = parse_my_name(text, self.context())
        if isinstance(parsed, Err):
            return parsed
        name = parsed.value.name
        self.store.save_username(name)
        self.display.success(f"Nice to meet you, {name}!")
        return Ok(name)

    # ── poids ─────────────────────────────────────────────────────────────────
    def _day(self, given: Optional[date]) -> Result:
        today = self.clock().date()
        if given is None:
            if self.confirm.ask(f"No date given. Use today's date ({fmt_date(today)})?") is not Answer.YES:
                return cancelled()
            return Ok(today)
        if given > today:
            return invalid(f"{fmt_date(given)} is in the future. Weights can only be logged up to today.")
        return Ok(given)

    def add_weight(self, text: Optional[str]) -> Result:
        return reported(self.display, self._add_weight, text)

    def _add_weight(self, text: Optional[str]) -> Result:
        parsed = parse_add_weight(text, self.context())
        if isinstance(parsed, Err):
            return parsed
        day = self._day(parsed.value.date)
        if isinstance(day, Err):
            return day
        record = WeightRecord(date=day.value, weight=parsed.value.weight)

        records = self.store.load_weights()
        replaced = [r for r in records if r.date == record.date]
        kept: List[WeightRecord] = [r for r in records if r.date != record.date]
        updated = sorted([*kept, record], key=lambda r: r.date)
        self.store.save_weights(updated)

        if replaced:
            self.display.warn(f"Replaced the weight logged on {fmt_date(record.date)}.")
        self.display.success(f"Logged {record.weight:.1f} kg on {fmt_date(record.date)}.")
        goal = self.store.load_goal()
        if goal is not None:
            self.display.info(progress_message(goal, updated[-1]))
        return Ok(record)

    def view_weights(self) -> Result:
        return reported(self.display, self._view_weights)

    def _view_weights(self) -> Result:
        records = self.store.load_weights()
        if not records:
            self.display.info("No weight recorded yet. Use /add_weight w/KG.")
        else:
            self.display.show(weights_table(records))
        return Ok(records)

    # ── objectif ──────────────────────────────────────────────────────────────
    def set_goal(self, text: Optional[str]) -> Result:
        return reported(self.display, self._set_goal, text)

    def _set_goal(self, text: Optional[str]) -> Result:
        parsed = parse_set_goal(text, self.context())
        if isinstance(parsed, Err):
            return parsed
        today = self.clock().date()
        set_on = parsed.value.date or today
        if set_on > today:
            return invalid(f"{fmt_date(set_on)} is in the future. A goal is set on or before today.")
        goal = Goal(weight=parsed.value.weight, set_on=set_on)
        self.store.save_goal(goal)
        log.info("Goal set to %.1f kg", goal.weight)
        self.display.success(f"Goal set: {goal.weight:.1f} kg (on {fmt_date(set_on)}).")
        return Ok(goal)

    def view_goal(self) -> Result:
        return reported(self.display, self._view_goal)

    def _view_goal(self) -> Result:
        goal = self.store.load_goal()
        if goal is None:
            self.display.info("No goal set yet. Use /set_goal w/KG.")
            return Ok(None)
        records = self.store.load_weights()
        self.display.info(f"Goal: {goal.weight:.1f} kg (set on {fmt_date(goal.set_on)}).")
        self.display.info(progress_message(goal, records[-1] if records else None))
        return Ok(goal)

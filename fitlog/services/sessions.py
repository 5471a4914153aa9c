# fitlog/services/sessions.py
"""
Orchestration commande -> parse -> vérif. d'état -> nouvelle liste -> save -> commit.

Machine à états : NONE (aucune séance ouverte) <-> ACTIVE (une séance sans fin).
Aucune mutation en place : chaque opération construit une nouvelle liste,
la persiste, puis seulement la rend résidente (copy-then-commit).
"""
from __future__ import annotations
import logging
from datetime import date, datetime, time
from enum import Enum
from typing import Callable, List, Optional, Sequence

from ..core.conflicts import check_end, describe, start_conflict
from ..core.grammar import (
    ParseContext,
    parse_add_exercise,
    parse_add_modality_tag,
    parse_add_muscle_tag,
    parse_add_set,
    parse_create,
    parse_delete,
    parse_end,
    parse_override_tag,
)
from ..core.models import Exercise, Session, YearMonth
from ..core.results import Err, ErrorKind, Ok, Result, cancelled, invalid, not_found
from ..core.tagger import KeywordTagger, Modality, MuscleGroup, Tagger, tag_name
from ..storage.files import StorageError
from ..storage.months import MonthStore
from ..ui.console import Answer, Confirmer, Display
from ..utils.dates import combine, fmt_date, fmt_duration, fmt_time, long_format, now_local

log = logging.getLogger("fitlog.sessions")


class State(str, Enum):
    NONE = "none"
    ACTIVE = "active"


def display_order(sessions: Sequence[Session]) -> List[Session]:
    """Tri d'affichage : fin puis début croissants, séances ouvertes en dernier."""
    return sorted(
        sessions,
        key=lambda s: (s.end is None, s.end or datetime.max, s.start or datetime.max),
    )


def _evolve(session: Session, **changes) -> Session:
    # model_copy(update=...) ne revalide pas
    return Session.model_validate({**session.model_dump(), **changes})


def reported(display: Display, op: Callable[..., Result], *args) -> Result:
    """Exécute `op`, convertit StorageError en Err et affiche l'éventuelle erreur."""
    try:
        result = op(*args)
    except StorageError as e:
        log.error("Storage failure: %s", e)
        result = Err(ErrorKind.STORAGE_FAILURE, f"Storage error: {e}")
    if isinstance(result, Err):
        if result.kind is ErrorKind.CANCELLED:
            display.warn(result.message)
        else:
            display.error(result.message, result.usage)
    return result


class SessionManager:
    def __init__(
        self,
        store: MonthStore,
        tagger: Tagger,
        display: Display,
        confirm: Confirmer,
        clock: Callable[[], datetime] = now_local,
    ):
        self.store = store
        self.tagger = tagger
        self.display = display
        self.confirm = confirm
        self.clock = clock
        self.active: Optional[Session] = None

    # ── état ─────────────────────────────────────────────────────────────────
    @property
    def state(self) -> State:
        return State.ACTIVE if self.active is not None else State.NONE

    def context(self) -> ParseContext:
        return ParseContext(today=self.clock().date(), first_month=self.store.first_month())

    def sessions(self) -> List[Session]:
        return self.store.load(self.store.loaded_month)

    def resume(self) -> Optional[Session]:
        """Au démarrage : reprend la séance non terminée du mois courant, s'il y en a une."""
        month = YearMonth.of(self.clock())
        try:
            sessions = self.store.switch_to(month)
        except StorageError as e:
            log.error("Could not load %s: %s", month, e)
            self.display.error(f"Could not load workouts of {month}: {e}")
            return None
        unended = [s for s in sessions if s.is_active]
        if not unended:
            return None
        if len(unended) > 1:
            log.warning("%d unended workouts in %s, resuming the latest", len(unended), month)
        self.active = max(unended, key=lambda s: s.start)
        self.display.info(f"Resuming '{self.active.name}' started {long_format(self.active.start)}.")
        return self.active

    # ── API publique (affiche les erreurs) ───────────────────────────────────
    def create(self, text: Optional[str]) -> Result:
        return reported(self.display, self._create, text)

    def add_exercise(self, text: Optional[str]) -> Result:
        return reported(self.display, self._add_exercise, text)

    def add_set(self, text: Optional[str]) -> Result:
        return reported(self.display, self._add_set, text)

    def end(self, text: Optional[str]) -> Result:
        return reported(self.display, self._end, text)

    def delete(self, text: Optional[str]) -> Result:
        return reported(self.display, self._delete, text)

    def override_tag(self, text: Optional[str]) -> Result:
        return reported(self.display, self._override_tag, text)

    def add_modality_keyword(self, text: Optional[str]) -> Result:
        return reported(self.display, self._add_keyword, text, True)

    def add_muscle_keyword(self, text: Optional[str]) -> Result:
        return reported(self.display, self._add_keyword, text, False)

    # ── helpers ──────────────────────────────────────────────────────────────
    def _yes(self, prompt: str) -> bool:
        return self.confirm.ask(prompt) is Answer.YES

    def _fill_missing(self, d: Optional[date], t: Optional[time]) -> Result:
        """Date/heure manquantes -> maintenant, après confirmation pour chacune."""
        now = self.clock()
        if d is None:
            if not self._yes(f"No date given. Use current date ({fmt_date(now)})?"):
                return cancelled()
            d = now.date()
        if t is None:
            if not self._yes(f"No time given. Use current time ({fmt_time(now)})?"):
                return cancelled()
            t = now.time()
        return Ok(combine(d, t))

    def _require_active(self) -> Optional[Err]:
        if self.active is None:
            return Err(ErrorKind.ILLEGAL_STATE, "No active workout. Start one with /create_workout.")
        return None

    def pick(self, month: YearMonth, index: int) -> Result:
        """Ok((liste du mois, séance)) pour l'ID affiché `index` (1-based, tri d'affichage)."""
        sessions = self.store.load(month)
        ordered = display_order(sessions)
        if not ordered:
            return not_found(f"No workouts logged in {month}.")
        if not 1 <= index <= len(ordered):
            return not_found(f"No workout with ID {index} in {month}. Valid IDs: 1..{len(ordered)}.")
        return Ok((sessions, ordered[index - 1]))

    def _commit_active(self, updated: Session) -> Result:
        """Remplace la séance active dans son mois, sauvegarde, puis bascule la référence."""
        active = self.active
        month = active.month
        sessions = self.store.load(month)
        if not any(s is active for s in sessions):
            self.active = None
            return Err(ErrorKind.ILLEGAL_STATE, "The active workout is no longer in the log.")
        self.store.save(month, [updated if s is active else s for s in sessions])
        self.active = updated
        return Ok(updated)

    # ── opérations ───────────────────────────────────────────────────────────
    def _create(self, text: Optional[str]) -> Result:
        if self.active is not None:
            # une séance ouverte chevauche tout démarrage ultérieur
            return Err(
                ErrorKind.CONFLICT,
                f"{describe(self.active)} is still running. End it with /end_workout first.",
                conflict_with=self.active,
            )
        ctx = self.context()
        parsed = parse_create(text, ctx)
        if isinstance(parsed, Err):
            return parsed
        args = parsed.value

        filled = self._fill_missing(args.date, args.time)
        if isinstance(filled, Err):
            return filled
        start: datetime = filled.value
        if start > self.clock() and not self._yes(
            f"{fmt_date(start)} {fmt_time(start)} is in the future. Create it anyway?"
        ):
            return cancelled()

        month = YearMonth.of(start)
        if month < ctx.first_month:
            return invalid(f"{month} is before {ctx.first_month}, the month you started logging.")

        sessions = self.store.load(month)
        clash = start_conflict(sessions, start)
        if isinstance(clash, Err):
            return clash

        draft = Session(name=args.name, start=start)
        session = _evolve(draft, auto_tags=self.tagger.suggest(draft))
        self.store.save(month, [*sessions, session])
        if month != self.store.loaded_month:
            self.store.switch_to(month)
        self.active = session
        log.info("Created %r at %s", session.name, start)
        self.display.success(f"Started '{session.name}' on {long_format(start)}.")
        return Ok(session)

    def _add_exercise(self, text: Optional[str]) -> Result:
        blocked = self._require_active()
        if blocked:
            return blocked
        parsed = parse_add_exercise(text, self.context())
        if isinstance(parsed, Err):
            return parsed
        args = parsed.value
        exercise = Exercise(name=args.name, sets=[args.reps])
        result = self._commit_active(_evolve(self.active, exercises=[*self.active.exercises, exercise]))
        if isinstance(result, Ok):
            self.display.success(f"Added {exercise}.")
        return result

    def _add_set(self, text: Optional[str]) -> Result:
        blocked = self._require_active()
        if blocked:
            return blocked
        parsed = parse_add_set(text, self.context())
        if isinstance(parsed, Err):
            return parsed
        current = self.active.current_exercise
        if current is None:
            return Err(ErrorKind.ILLEGAL_STATE, "No exercise yet. Add one with /add_exercise.")
        updated = current.with_set(parsed.value.reps)
        result = self._commit_active(_evolve(self.active, exercises=[*self.active.exercises[:-1], updated]))
        if isinstance(result, Ok):
            self.display.success(f"Set {len(updated.sets)} of {updated.name}: {parsed.value.reps} reps.")
        return result

    def _end(self, text: Optional[str]) -> Result:
        blocked = self._require_active()
        if blocked:
            return blocked
        parsed = parse_end(text, self.context())
        if isinstance(parsed, Err):
            return parsed
        filled = self._fill_missing(parsed.value.date, parsed.value.time)
        if isinstance(filled, Err):
            return filled

        active = self.active
        checked = check_end(self.store.load(active.month), active, filled.value)
        if isinstance(checked, Err):
            return checked
        end: datetime = checked.value
        if end > self.clock() and not self._yes(
            f"{fmt_date(end)} {fmt_time(end)} is in the future. End it anyway?"
        ):
            return cancelled()

        result = self._commit_active(_evolve(active, end=end))
        if isinstance(result, Err):
            return result
        ended: Session = result.value
        self.active = None
        log.info("Ended %r (%d min)", ended.name, ended.duration_minutes)
        self.display.success(f"Ended '{ended.name}' after {fmt_duration(ended.duration_minutes)}.")
        return result

    def _delete(self, text: Optional[str]) -> Result:
        parsed = parse_delete(text, self.context())
        if isinstance(parsed, Err):
            return parsed
        args = parsed.value
        picked = self.pick(args.month, args.index)
        if isinstance(picked, Err):
            return picked
        sessions, target = picked.value

        if not self._yes(f"Delete {describe(target)} on {fmt_date(target.start)}?"):
            return cancelled("Deletion cancelled.")
        self.store.save(args.month, [s for s in sessions if s is not target])
        if target is self.active:
            self.active = None
        log.info("Deleted %r from %s", target.name, args.month)
        self.display.success(f"Deleted '{target.name}'.")
        return Ok(target)

    def _override_tag(self, text: Optional[str]) -> Result:
        parsed = parse_override_tag(text, self.context())
        if isinstance(parsed, Err):
            return parsed
        args = parsed.value
        picked = self.pick(args.month, args.index)
        if isinstance(picked, Err):
            return picked
        sessions, target = picked.value

        if not self._yes(f"Set '{args.tag}' as the tag of '{target.name}'?"):
            return cancelled()
        auto = list(target.auto_tags)
        if auto:
            answer = self.confirm.ask(f"Also clear its suggested tags ({', '.join(auto)})?")
            if answer is Answer.CANCEL:
                return cancelled()
            if answer is Answer.YES:
                auto = []

        updated = _evolve(target, manual_tags=[args.tag], auto_tags=auto)
        self.store.save(args.month, [updated if s is target else s for s in sessions])
        if target is self.active:
            self.active = updated
        self.display.success(f"Tags of '{updated.name}': {', '.join(updated.tags)}.")
        return Ok(updated)

    def _add_keyword(self, text: Optional[str], modality: bool) -> Result:
        if not isinstance(self.tagger, KeywordTagger):
            return Err(ErrorKind.ILLEGAL_STATE, "The current tagger does not take keywords.")
        parse = parse_add_modality_tag if modality else parse_add_muscle_tag
        parsed = parse(text, self.context())
        if isinstance(parsed, Err):
            return parsed
        category, keyword = parsed.value
        if modality:
            target = Modality(category)
            added = self.tagger.add_modality_keyword(target, keyword)
        else:
            target = MuscleGroup(category)
            added = self.tagger.add_muscle_keyword(target, keyword)
        if added:
            self.display.success(f"'{keyword}' now tags workouts as {tag_name(target)}.")
        else:
            self.display.info(f"'{keyword}' already maps to {tag_name(target)}.")
        return Ok((category, keyword))

"""
Détection des chevauchements entre séances d'un même mois chargé.

Comparaison jour calendaire uniquement : une séance qui passe minuit n'est
jamais confrontée à celles du lendemain (limite connue, conservée telle quelle).
"""
from __future__ import annotations
from datetime import datetime
from typing import Iterable, List, Optional

from ..utils.dates import fmt_hm, truncate_minute
from .models import Session
from .results import Err, ErrorKind, Ok, Result, invalid


def describe(s: Session) -> str:
    """'Leg Day (19:00 - 20:15)' / 'Leg Day (19:00 - open)'"""
    return f"{s.name} ({fmt_hm(s.start)} - {fmt_hm(s.end)})"


def same_day(sessions: Iterable[Session], instant: datetime) -> List[Session]:
    return [s for s in sessions if s.start is not None and s.start.date() == instant.date()]


def find_start_conflict(sessions: Iterable[Session], start: datetime) -> Optional[Session]:
    """Première séance du même jour qui contient `start` (ouverte = sans fin)."""
    start = truncate_minute(start)
    for s in same_day(sessions, start):
        if s.end is None:
            if start >= s.start:
                return s
        elif s.start <= start < s.end:
            return s
    return None


def start_conflict(sessions: Iterable[Session], start: datetime) -> Result:
    clash = find_start_conflict(sessions, start)
    if clash is None:
        return Ok(start)
    return Err(
        ErrorKind.CONFLICT,
        f"This start time overlaps with {describe(clash)}. Pick another time.",
        conflict_with=clash,
    )


def check_end(sessions: Iterable[Session], active: Session, end: datetime) -> Result:
    """
    Valide la fin proposée pour `active` :
      - strictement après le début (à la minute) ;
      - n'avale aucune autre séance du même jour démarrant dans [start, end).
    """
    end = truncate_minute(end)
    if active.start is None or end <= active.start:
        return invalid("end must be after start. Pick a later end time.")
    for s in same_day(sessions, active.start):
        if s is active:
            continue
        if active.start <= s.start < end:
            return Err(
                ErrorKind.CONFLICT,
                f"Ending at {fmt_hm(end)} would overlap {describe(s)}.",
                conflict_with=s,
            )
    return Ok(end)

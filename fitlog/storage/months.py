# fitlog/storage/months.py
"""
Stockage des séances partitionné par mois calendaire.

    data/
      creation_month.txt            # "2025-10" : mois du premier lancement
      workouts/
        workouts_2025-10.jsonl      # une Session JSON par ligne, ordre d'insertion

Le mois de travail (`loaded_month`) et les mois écrits depuis le dernier
`switch_to` restent en mémoire et y font foi. Les autres mois sont relus à
chaque consultation. `save` réécrit tout le fichier puis met le cache à jour ;
`switch_to` oublie les autres mois.
"""
from __future__ import annotations
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Set

from pydantic import ValidationError

from ..config import CREATION_FILE, DATA_DIR, MONTH_FILE_PREFIX, MONTH_FILE_SUFFIX, WORKOUTS_SUBDIR
from ..core.models import Session, YearMonth
from ..utils.dates import now_local
from .files import StorageError, read_bytes, read_text, write_text

log = logging.getLogger("fitlog.storage")

MONTH_FILE_RE = re.compile(
    rf"^{re.escape(MONTH_FILE_PREFIX)}(\d{{4}}-\d{{2}}){re.escape(MONTH_FILE_SUFFIX)}$"
)

__all__ = ["MonthStore", "StorageError"]


class MonthStore:
    def __init__(self, data_dir: str | Path = DATA_DIR, clock: Callable[[], datetime] = now_local):
        self.root = Path(data_dir)
        self.workouts_dir = self.root / WORKOUTS_SUBDIR
        self._clock = clock
        self._cache: Dict[YearMonth, List[Session]] = {}
        self._on_disk: Set[YearMonth] = set()
        self._skipped: Dict[YearMonth, int] = {}
        self._first: Optional[YearMonth] = None
        self.loaded_month: YearMonth = YearMonth.of(clock())

    def path_for(self, month: YearMonth) -> Path:
        return self.workouts_dir / f"{MONTH_FILE_PREFIX}{month}{MONTH_FILE_SUFFIX}"

    # ── index ────────────────────────────────────────────────────────────────
    def index(self) -> List[YearMonth]:
        """Scanne le dossier une fois au démarrage. Indicatif seulement."""
        self._on_disk.clear()
        if not self.workouts_dir.is_dir():
            return []
        try:
            entries = sorted(self.workouts_dir.iterdir())
        except OSError as e:
            raise StorageError(f"Could not list {self.workouts_dir}: {e}") from e
        for f in entries:
            m = MONTH_FILE_RE.match(f.name)
            if not m or not f.is_file():
                log.warning("Ignoring unexpected entry in %s: %s", self.workouts_dir, f.name)
                continue
            try:
                self._on_disk.add(YearMonth.parse(m.group(1)))
            except ValueError:
                log.warning("Ignoring month file with invalid month: %s", f.name)
        log.debug("Indexed %d month file(s)", len(self._on_disk))
        return self.months_on_disk()

    def months_on_disk(self) -> List[YearMonth]:
        return sorted(self._on_disk)

    # ── lecture / écriture ───────────────────────────────────────────────────
    def load(self, month: YearMonth) -> List[Session]:
        """Liste du mois (copie superficielle). Vide si aucun fichier."""
        if month in self._cache:
            return list(self._cache[month])
        sessions = self._read(month)
        if month == self.loaded_month:
            self._cache[month] = sessions
        return list(sessions)

    def _read(self, month: YearMonth) -> List[Session]:
        path = self.path_for(month)
        raw = read_bytes(path)
        self._skipped[month] = 0
        if raw is None:
            log.debug("No file for %s, starting empty", month)
            return []

        sessions: List[Session] = []
        for lineno, chunk in enumerate(raw.splitlines(), start=1):
            if not chunk.strip():
                continue
            try:
                line = chunk.decode("utf-8")
            except UnicodeDecodeError as e:
                self._skipped[month] += 1
                log.warning("Skipping corrupted record %s:%d (not UTF-8: %s)", path.name, lineno, e.reason)
                continue
            try:
                s = Session.model_validate_json(line)
            except ValidationError as e:
                self._skipped[month] += 1
                log.warning("Skipping corrupted record %s:%d (%d error(s))", path.name, lineno, e.error_count())
                continue
            if s.month != month:
                self._skipped[month] += 1
                log.warning("Skipping record %s:%d stored under the wrong month (%s)", path.name, lineno, s.month)
                continue
            sessions.append(s)
        log.debug("Loaded %d session(s) for %s", len(sessions), month)
        return sessions

    def save(self, month: YearMonth, sessions: Sequence[Session]) -> None:
        """Réécrit tout le fichier du mois. Le cache n'est mis à jour qu'après succès."""
        payload = "".join(s.model_dump_json() + "\n" for s in sessions)
        write_text(self.path_for(month), payload)
        self._cache[month] = list(sessions)
        self._on_disk.add(month)
        log.debug("Saved %d session(s) for %s", len(sessions), month)

    def skipped(self, month: YearMonth) -> int:
        return self._skipped.get(month, 0)

    # ── mois de travail ──────────────────────────────────────────────────────
    def switch_to(self, month: YearMonth) -> List[Session]:
        if month != self.loaded_month:
            log.debug("Loaded month %s -> %s", self.loaded_month, month)
        self.loaded_month = month
        for other in [m for m in self._cache if m != month]:
            del self._cache[other]
        return self.load(month)

    # ── mois de création ─────────────────────────────────────────────────────
    def first_month(self) -> YearMonth:
        """
        Mois du premier lancement (borne basse des dates saisies).
        Créé au premier appel : le plus ancien mois présent sur disque, sinon
        le mois courant. Valeur illisible -> mois courant, avec un warning.
        """
        if self._first is not None:
            return self._first
        path = self.root / CREATION_FILE
        current = YearMonth.of(self._clock())
        raw = read_text(path)
        if raw is None:
            self._first = min([current, *self._on_disk])
            write_text(path, f"{self._first}\n")
            log.info("First run: logging starts in %s", self._first)
        else:
            try:
                self._first = YearMonth.parse(raw)
            except ValueError:
                log.warning("Corrupted %s (%r), falling back to %s", path.name, raw.strip(), current)
                self._first = current
        return self._first

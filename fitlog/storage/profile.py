# fitlog/storage/profile.py
from __future__ import annotations
import logging
from datetime import date
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from ..config import DATA_DIR, GOAL_FILE, USERNAME_FILE, WEIGHT_FILE
from ..core.models import Goal, WeightRecord
from .files import read_text, write_text

log = logging.getLogger("fitlog.storage")


class ProfileStore:
    """
    Petits fichiers texte du profil :
      username.txt  -> "Alex"
      weight.txt    -> "2025-10-23,72.5" (une ligne par pesée)
      goal.txt      -> "68.0,2025-10-01"
    """

    def __init__(self, data_dir: str | Path = DATA_DIR):
        self.root = Path(data_dir)

    # ── nom ───────────────────────────────────────────────────────────────────
    def load_username(self) -> Optional[str]:
        raw = read_text(self.root / USERNAME_FILE)
        name = (raw or "").strip()
        return name or None

    def save_username(self, name: str) -> None:
        write_text(self.root / USERNAME_FILE, f"{name}\n")

    # ── poids ─────────────────────────────────────────────────────────────────
    def load_weights(self) -> List[WeightRecord]:
        raw = read_text(self.root / WEIGHT_FILE)
        records: List[WeightRecord] = []
        for lineno, line in enumerate((raw or "").splitlines(), start=1):
            if not line.strip():
                continue
            try:
                day, weight = line.split(",", 1)
                records.append(WeightRecord(date=date.fromisoformat(day.strip()), weight=float(weight)))
            except (ValueError, ValidationError):
                log.warning("Skipping corrupted weight entry %s:%d (%r)", WEIGHT_FILE, lineno, line)
        return records

    def save_weights(self, records: List[WeightRecord]) -> None:
        payload = "".join(f"{r.date.isoformat()},{r.weight}\n" for r in records)
        write_text(self.root / WEIGHT_FILE, payload)

    # ── objectif ──────────────────────────────────────────────────────────────
    def load_goal(self) -> Optional[Goal]:
        raw = (read_text(self.root / GOAL_FILE) or "").strip()
        if not raw:
            return None
        try:
            weight, day = raw.split(",", 1)
            return Goal(weight=float(weight), set_on=date.fromisoformat(day.strip()))
        except (ValueError, ValidationError):
            log.warning("Ignoring corrupted %s (%r)", GOAL_FILE, raw)
            return None

    def save_goal(self, goal: Goal) -> None:
        write_text(self.root / GOAL_FILE, f"{goal.weight},{goal.set_on.isoformat()}\n")

from __future__ import annotations
import datetime as _dt
import re
from datetime import date, datetime
from typing import List, NamedTuple, Optional

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator

from ..config import MAX_NAME_LEN, MAX_REPS, MAX_WEIGHT_KG
from ..utils.dates import minutes_between, truncate_minute

NAME_ALLOWED = re.compile(r"^[A-Za-z0-9 _-]+$")


def _check_name(value: str) -> str:
    v = value.strip()
    if not v or len(v) > MAX_NAME_LEN or not NAME_ALLOWED.match(v):
        raise ValueError(f"invalid name {value!r}")
    return v


def _dedup(tags: List[str]) -> List[str]:
    # ensemble ordonné : garde la première occurrence
    return list(dict.fromkeys(t.strip() for t in tags if t and t.strip()))


class YearMonth(NamedTuple):
    """Clé d'un bucket mensuel, ex: YearMonth(2025, 10) -> "2025-10"."""
    year: int
    month: int

    @classmethod
    def of(cls, d: date | datetime) -> "YearMonth":
        return cls(d.year, d.month)

    @classmethod
    def parse(cls, text: str) -> "YearMonth":
        m = re.fullmatch(r"(\d{4})-(\d{2})", text.strip())
        if not m or not 1 <= int(m.group(2)) <= 12:
            raise ValueError(f"not a YYYY-MM month: {text!r}")
        return cls(int(m.group(1)), int(m.group(2)))

    def previous(self) -> "YearMonth":
        return YearMonth(self.year - 1, 12) if self.month == 1 else YearMonth(self.year, self.month - 1)

    def next(self) -> "YearMonth":
        return YearMonth(self.year + 1, 1) if self.month == 12 else YearMonth(self.year, self.month + 1)

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


class Exercise(BaseModel):
    name: str
    sets: List[int] = Field(min_length=1)   # reps par série, ordre d'insertion

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        return _check_name(v)

    @field_validator("sets")
    @classmethod
    def _sets(cls, v: List[int]) -> List[int]:
        for reps in v:
            if not 1 <= reps <= MAX_REPS:
                raise ValueError(f"reps must be 1..{MAX_REPS}, got {reps}")
        return v

    def with_set(self, reps: int) -> "Exercise":
        return Exercise(name=self.name, sets=[*self.sets, reps])

    def __str__(self) -> str:
        return f"{self.name} ({', '.join(str(r) for r in self.sets)} reps)"


class Session(BaseModel):
    """
    Une séance ("workout"). Pas d'identifiant stable : l'ID affiché est la
    position dans la liste triée du mois, recalculée à chaque requête.
    """
    name: str
    start: Optional[datetime] = None
    end: Optional[datetime] = None          # None -> séance encore ouverte
    exercises: List[Exercise] = Field(default_factory=list)
    manual_tags: List[str] = Field(default_factory=list)
    auto_tags: List[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        return _check_name(v)

    @field_validator("start", "end")
    @classmethod
    def _minute(cls, v: Optional[datetime]) -> Optional[datetime]:
        return truncate_minute(v) if v is not None else None

    @field_validator("manual_tags", "auto_tags")
    @classmethod
    def _tags(cls, v: List[str]) -> List[str]:
        return _dedup(v)

    @model_validator(mode="after")
    def _end_after_start(self) -> "Session":
        if self.end is not None and (self.start is None or self.end <= self.start):
            raise ValueError("end must be after start")
        return self

    # Dérivés
    @computed_field  # type: ignore[prop-decorator]
    @property
    def duration_minutes(self) -> int:
        if self.start is None or self.end is None:
            return 0
        return minutes_between(self.start, self.end)

    @property
    def is_active(self) -> bool:
        return self.end is None

    @property
    def month(self) -> Optional[YearMonth]:
        return YearMonth.of(self.start) if self.start else None

    @property
    def current_exercise(self) -> Optional[Exercise]:
        return self.exercises[-1] if self.exercises else None

    @property
    def tags(self) -> List[str]:
        """Tags effectifs : manuels d'abord, puis auto non masqués. Jamais mis en cache."""
        return self.manual_tags + [t for t in self.auto_tags if t not in self.manual_tags]

    @property
    def conflicting_tags(self) -> List[str]:
        return [t for t in self.manual_tags if t in self.auto_tags]


class WeightRecord(BaseModel):
    date: _dt.date
    weight: float = Field(gt=0, le=MAX_WEIGHT_KG)

    def __str__(self) -> str:
        return f"Date: {self.date.strftime('%d/%m/%y')} | Weight: {self.weight:.1f} kg"


class Goal(BaseModel):
    weight: float = Field(gt=0, le=MAX_WEIGHT_KG)
    set_on: date

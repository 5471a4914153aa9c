from __future__ import annotations
import logging
from enum import Enum
from typing import Dict, List, Protocol, Set, Type, TypeVar

from .models import Session

log = logging.getLogger("fitlog.tagger")


class Modality(str, Enum):
    CARDIO = "CARDIO"
    STRENGTH = "STRENGTH"


class MuscleGroup(str, Enum):
    LEGS = "LEGS"
    POSTERIOR_CHAIN = "POSTERIOR_CHAIN"
    CHEST = "CHEST"
    BACK = "BACK"
    SHOULDERS = "SHOULDERS"
    ARMS = "ARMS"
    CORE = "CORE"


E = TypeVar("E", Modality, MuscleGroup)

# Mots-clés par défaut, cherchés comme sous-chaînes du nom (minuscules)
DEFAULT_MODALITY_KEYWORDS: Dict[Modality, Set[str]] = {
    Modality.CARDIO: {"run", "jog", "swim", "cycle", "treadmill", "rower"},
    Modality.STRENGTH: {"lift", "deadlift", "squat", "bench", "press", "hypertrophy"},
}

DEFAULT_MUSCLE_KEYWORDS: Dict[MuscleGroup, Set[str]] = {
    MuscleGroup.LEGS: {"leg", "squat", "hamstring", "quad", "calf", "leg day"},
    MuscleGroup.POSTERIOR_CHAIN: {"deadlift"},
    MuscleGroup.CHEST: {"bench", "push-up", "chest"},
    MuscleGroup.BACK: {"row", "pull-up", "lat", "back", "lift", "swim"},
    MuscleGroup.SHOULDERS: {"ohp", "overhead press", "shoulder"},
    MuscleGroup.ARMS: {"bicep", "tricep", "curl"},
    MuscleGroup.CORE: {"abs", "core", "plank"},
}


def tag_name(category: Enum) -> str:
    """POSTERIOR_CHAIN -> 'posterior-chain'"""
    return category.value.lower().replace("_", "-")


def category_names(enum: Type[Enum]) -> List[str]:
    return [c.value for c in enum]


class Tagger(Protocol):
    def suggest(self, session: Session) -> List[str]: ...


class KeywordTagger:
    """
    Tagger par mots-clés : modalité (cardio/strength) puis groupes musculaires,
    dans l'ordre de déclaration des enums. Les mots-clés ajoutés via
    /add_modality_tag et /add_muscle_tag ne vivent que le temps du process.
    """

    def __init__(self) -> None:
        self.modality_keywords = {k: set(v) for k, v in DEFAULT_MODALITY_KEYWORDS.items()}
        self.muscle_keywords = {k: set(v) for k, v in DEFAULT_MUSCLE_KEYWORDS.items()}

    def suggest(self, session: Session) -> List[str]:
        name = session.name.lower()
        tags: List[str] = []
        for table in (self.modality_keywords, self.muscle_keywords):
            for category, keywords in table.items():
                if any(k in name for k in keywords):
                    tags.append(tag_name(category))
        log.debug("suggest(%r) -> %s", session.name, tags)
        return tags

    @staticmethod
    def _add(table: Dict[E, Set[str]], category: E, keyword: str) -> bool:
        kw = keyword.strip().lower()
        if kw in table[category]:
            return False
        table[category].add(kw)
        return True

    def add_modality_keyword(self, modality: Modality, keyword: str) -> bool:
        return self._add(self.modality_keywords, modality, keyword)

    def add_muscle_keyword(self, muscle: MuscleGroup, keyword: str) -> bool:
        return self._add(self.muscle_keywords, muscle, keyword)

# fitlog/config.py
from __future__ import annotations
import os
from dotenv import load_dotenv

# Charge automatiquement .env (à la racine du projet)
load_dotenv(override=False)


def _bool(envval: str | None, default: bool = False) -> bool:
    if envval is None:
        return default
    return envval.strip().lower() in {"1", "true", "yes", "on", "y"}


def _int(envval: str | None, default: int) -> int:
    if envval is None or not envval.strip():
        return default
    try:
        return int(envval)
    except ValueError:
        return default


# ----- Timezone -----
# Vide = fuseau local de la machine
FITLOG_TZ = os.getenv("FITLOG_TZ") or None


# ----- Storage -----
DATA_DIR = os.getenv("FITLOG_DATA_DIR", "data")
WORKOUTS_SUBDIR = "workouts"
MONTH_FILE_PREFIX = "workouts_"
MONTH_FILE_SUFFIX = ".jsonl"
USERNAME_FILE = "username.txt"
WEIGHT_FILE = "weight.txt"
GOAL_FILE = "goal.txt"
CREATION_FILE = "creation_month.txt"


# ----- Limites de saisie -----
MAX_NAME_LEN = 32
MAX_USERNAME_LEN = 30
MAX_REPS = 1000
MAX_WEIGHT_KG = 500.0
MAX_YEAR = _int(os.getenv("FITLOG_MAX_YEAR"), 2100)


# ----- Affichage -----
PAGE_SIZE = max(1, _int(os.getenv("FITLOG_PAGE_SIZE"), 10))
NAME_COLUMN_MAX = 22
DEFAULT_USERNAME = os.getenv("FITLOG_USERNAME", "Champ")


# ----- Flags -----
DEBUG = _bool(os.getenv("FITLOG_DEBUG"), default=False)
CANCEL_TOKEN = "/cancel"

from __future__ import annotations
import os
from typing import Dict, Tuple

import pendulum as p

ENV_GROUPS = {
    "Core": {
        "FITLOG_DATA_DIR": "data",
        "FITLOG_TZ": "",            # vide = fuseau de la machine
        "FITLOG_USERNAME": "Champ",
    },
    "Affichage / limites": {
        "FITLOG_PAGE_SIZE": "10",
        "FITLOG_MAX_YEAR": "2100",
    },
    "Options": {
        "FITLOG_DEBUG": "0",
    },
}

INT_KEYS = {"FITLOG_PAGE_SIZE", "FITLOG_MAX_YEAR"}


def generate_env_example() -> str:
    lines = [
        "# fitlog : .env.example",
        "# Duplique ce fichier en .env ; toutes les clés sont optionnelles.",
        "",
    ]
    for group, keys in ENV_GROUPS.items():
        lines.append(f"### {group}")
        lines.extend(f'{k}="{v}"' for k, v in keys.items())
        lines.append("")
    return "\n".join(lines)


def write_env_example(path: str = ".env.example", overwrite: bool = False) -> str:
    if os.path.exists(path) and not overwrite:
        return path
    with open(path, "w", encoding="utf-8") as f:
        f.write(generate_env_example())
    return path


def check_env() -> Tuple[Dict[str, str], Dict[str, str]]:
    """
    Retourne (valeur_effective_par_clef, erreurs_par_clef).
    Aucune clé n'est requise : on ne signale que les valeurs invalides.
    """
    values: Dict[str, str] = {}
    errors: Dict[str, str] = {}
    for keys in ENV_GROUPS.values():
        for k, default in keys.items():
            values[k] = os.getenv(k, default)

    for k in INT_KEYS:
        raw = values[k].strip()
        if raw and not raw.isdigit():
            errors[k] = f"entier attendu, reçu {raw!r} (valeur par défaut utilisée)"

    tz = values["FITLOG_TZ"].strip()
    if tz:
        try:
            p.timezone(tz)
        except Exception as e:  # InvalidTimezone ou ZoneInfoNotFoundError selon la version
            errors["FITLOG_TZ"] = f"fuseau inconnu ({e})"

    data_dir = values["FITLOG_DATA_DIR"]
    if os.path.exists(data_dir) and not os.path.isdir(data_dir):
        errors["FITLOG_DATA_DIR"] = "existe mais n'est pas un dossier"

    return values, errors

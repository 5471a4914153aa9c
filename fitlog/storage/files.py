# fitlog/storage/files.py
from __future__ import annotations
from pathlib import Path
from typing import Optional


class StorageError(RuntimeError):
    """Échec d'E/S réel (lecture ou écriture) sous la racine de données."""


def read_bytes(path: Path) -> Optional[bytes]:
    """Contenu brut du fichier, None s'il n'existe pas. Toute autre erreur -> StorageError."""
    try:
        return path.read_bytes()
    except FileNotFoundError:
        return None
    except OSError as e:
        raise StorageError(f"Could not read {path}: {e}") from e


def read_text(path: Path) -> Optional[str]:
    """
    Petits fichiers texte du profil. Les octets non UTF-8 deviennent U+FFFD :
    seule la ligne concernée échoue ensuite à la validation.
    """
    raw = read_bytes(path)
    if raw is None:
        return None
    return raw.decode("utf-8", errors="replace")


def write_text(path: Path, content: str) -> None:
    """Écrasement complet, dossiers parents créés au besoin. Non atomique."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise StorageError(f"Could not write {path}: {e}") from e

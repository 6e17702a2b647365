"""
Fonctions utilitaires partagees dans le projet Watch List.

- clean_title : nettoyage des titres renvoyes par TMDB
- parse_date : conversion des dates TMDB ("YYYY-MM-DD" ou "")
- filter_localized_genres : retrait des genres non traduits
- page_count : nombre de pages d'une liste paginee
"""

import math
import re
import unicodedata
from datetime import date
from typing import Iterable, Optional

_LATIN_ONLY = re.compile(r"^[A-Za-z\s&\-']+$")


def strip_invisible_chars(text: str) -> str:
    """
    Retire les caractères Unicode invisibles d'une chaîne.

    Supprime les caractères de contrôle et les marques directionnelles
    qui peuvent provenir des APIs (LRM, RLM, BOM, etc.).
    """
    return "".join(ch for ch in text if unicodedata.category(ch) not in ("Cf", "Cc"))


def clean_title(title: Optional[str]) -> Optional[str]:
    """Nettoie un titre : retire les caractères invisibles et les espaces superflus."""
    if not title:
        return title
    return strip_invisible_chars(title).strip()


def parse_date(value: Optional[str]) -> Optional[date]:
    """Date ISO (YYYY-MM-DD) ou None si vide ou invalide."""
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def filter_localized_genres(genres: Iterable[str], language: str) -> list[str]:
    """
    Garde les genres traduits dans la langue des metadonnees.

    Pour une langue autre que l'anglais, TMDB renvoie le nom anglais des
    genres qu'il ne sait pas traduire : ceux composes uniquement de lettres
    latines sont ecartes. En anglais, tous les genres sont conserves.
    """
    names = [g.strip() for g in genres if g and g.strip()]
    if language.lower().startswith("en"):
        return names
    return [name for name in names if not _LATIN_ONLY.match(name)]


def page_count(total: int, limit: int) -> int:
    """Nombre de pages pour total elements, limit par page."""
    if limit <= 0:
        return 0
    return math.ceil(total / limit)

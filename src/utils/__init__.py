"""
Utilitaires et constantes pour Watch List.

Ce module contient les constantes et fonctions utilitaires partagees.
"""

from src.utils.constants import (
    ALLOWED_IMAGE_TYPES,
    CAST_IMPORT_LIMIT,
    SEARCH_PAGE_SIZE,
)
from src.utils.helpers import clean_title, filter_localized_genres, page_count, parse_date

__all__ = [
    "ALLOWED_IMAGE_TYPES",
    "CAST_IMPORT_LIMIT",
    "SEARCH_PAGE_SIZE",
    "clean_title",
    "filter_localized_genres",
    "page_count",
    "parse_date",
]

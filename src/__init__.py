"""
WatchList - Catalogue personnel de films et de séries à regarder.

Ce package fournit le site public de consultation, l'administration du
catalogue (import TMDB, images sur stockage objet, journal des opérations)
et les scripts de maintenance (sauvegardes, planificateur, analyses).

Architecture : Hexagonale (Ports et Adaptateurs)
- core/ : Couche domaine (exceptions, ports, objets valeur)
- services/ : Couche application (cas d'utilisation, orchestration)
- adapters/ : Couche infrastructure (CLI, clients API, stockage)
- infrastructure/ : Persistance SQLModel
- web/ : API JSON FastAPI
"""

"""
Couche adaptateurs (infrastructure).

Les adaptateurs implémentent les ports définis dans core/ports/ et fournissent
des implémentations concrètes pour les systèmes externes.

Sous-packages :
- cli/ : Interface ligne de commande (Typer)
- api/ : Clients API externes (TMDB, Douban)
- storage/ : Stockage objet (Aliyun OSS)

Chaque adaptateur dépend de core/ mais core/ ne dépend jamais des adaptateurs.
"""

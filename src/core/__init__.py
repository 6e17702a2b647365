"""
Couche domaine (core).

Contient les exceptions métier, les ports (interfaces abstraites) et les objets valeur.
Cette couche n'a AUCUNE dépendance vers l'infrastructure (adapters, frameworks, BDD).

Sous-packages :
- ports/ : Interfaces abstraites définissant les contrats pour les adaptateurs
- value_objects/ : Objets valeur (WatchStatus, UserRole, EntityType, ContentType)
"""

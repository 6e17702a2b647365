"""
Couche infrastructure de WatchList.

- persistence/ : Modeles SQLModel, engine et repositories

L'URL de la base est lue depuis la configuration : SQLite par defaut,
toute URL SQLAlchemy (MySQL, PostgreSQL) est acceptee.
"""

"""
Application services layer (use cases).

Services orchestrate the catalog use cases: TMDB import and refresh,
image copies to object storage, administration, public catalog reads,
authentication, backups and maintenance.

Each service receives an open SQLModel session and builds the
repositories it needs; external systems are reached through the ports
declared in core/ (IMetadataClient, IObjectStorage).
"""

"""
Internal DB subpackage for albumstore.

Split into focused units:
- `models`: entity + DTO dataclasses
- `schema`: table creation and migrations
- `executor`: the storage executor protocol and its SQLite implementation
- `fragments`, `queries_albums`, `queries_relations`: SQL builders

External code should usually go through `albumstore.core.album_mapper.AlbumMapper`.
"""

from __future__ import annotations

# Models / DTOs
from .models import Album, AlbumArtistRelation, AlbumWithoutCover, CoverCandidate

# Schema / migrations
from .schema import SCHEMA_VERSION, ensure_schema, migrate

__all__ = [
    # models
    "Album",
    "AlbumArtistRelation",
    "AlbumWithoutCover",
    "CoverCandidate",
    # schema
    "SCHEMA_VERSION",
    "ensure_schema",
    "migrate",
]

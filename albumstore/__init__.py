"""
albumstore - album persistence for a multi-user music library.

Provides the album data-access layer (query builder, album/artist relation
store, cover resolver) behind a single `AlbumMapper` facade.
"""

__version__ = "0.1.0"
__author__ = "albumstore Contributors"
__license__ = "GPL-2.0"

from albumstore.core.album_mapper import AlbumMapper
from albumstore.core.db.executor import SqliteExecutor

__all__ = ["AlbumMapper", "SqliteExecutor", "__version__"]

"""
rbkdb.loaders — writers for the local store.

  SqliteLoader — per-table transactional bulk inserts in dependency order
"""

from rbkdb.loaders.sqlite_loader import BULK_INSERTS, BulkInsert, LoadResult, SqliteLoader, load_all

__all__ = ["BULK_INSERTS", "BulkInsert", "LoadResult", "SqliteLoader", "load_all"]

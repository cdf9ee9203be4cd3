"""
rbkdb.sources — remote data source adapters.

  RebrickableClient — downloads the catalog tables from the Rebrickable CDN
"""

from rbkdb.sources.rebrickable import RebrickableClient

__all__ = ["RebrickableClient"]

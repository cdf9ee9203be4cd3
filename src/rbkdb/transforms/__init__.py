"""
rbkdb.transforms — turning downloaded files into typed records.

  decode — gzip + CSV → validated Record models, one result per row
"""

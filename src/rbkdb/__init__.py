"""
rbkdb — dump the Rebrickable catalog into a local SQLite database.

Architecture:
  catalog.py   — the 12 downloadable tables and their load order
  models/      — pydantic record models, one per table, closed schema
  sources/     — Rebrickable CDN downloader (httpx, bounded concurrency)
  transforms/  — gzip + CSV decoding into validated records
  loaders/     — per-table transactional SQLite bulk inserts
  pipelines/   — the dump orchestrator (fetch -> decode -> load)
  utils/       — structlog configuration

Quick start:
    import asyncio
    from pathlib import Path
    from rbkdb.pipelines.dump import run

    result = asyncio.run(run(Path("rebrickable.db"), force=True))

CLI:
    rbkdb dump rebrickable.db
    rbkdb completion bash
"""

__version__ = "0.1.0"

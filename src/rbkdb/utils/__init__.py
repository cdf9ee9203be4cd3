"""rbkdb.utils — process-level helpers (structlog configuration)."""

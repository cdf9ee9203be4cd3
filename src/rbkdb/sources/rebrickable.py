"""
sources/rebrickable.py — Rebrickable CDN downloader.

Rebrickable publishes its full catalog as gzip-compressed CSV files:

  GET https://cdn.rebrickable.com/media/downloads/{table}.csv.gz?{timestamp}

The query string is only a cache buster. Rather than scraping the
downloads page for the publish timestamp, callers pass the current time.

fetch_all() downloads every catalog table concurrently, admitting at most
max_concurrency transfers at a time. The first failed download fails the
whole operation: the remaining downloads are cancelled and the error is
raised as a FetchError. Files already written are left in place.
There is no retry.

Usage:
    client = RebrickableClient()
    paths = await client.fetch_all(Path("/tmp/rbk"), timestamp=int(time.time()))
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from pathlib import Path

import httpx
import structlog

from rbkdb.catalog import TABLES, TableSpec
from rbkdb.config import settings
from rbkdb.errors import FetchError

log = structlog.get_logger(__name__)

DOWNLOADS_PATH = "/media/downloads"


class RebrickableClient:
    """Downloads Rebrickable catalog tables to local files."""

    name = "Rebrickable"

    def __init__(
        self,
        base_url: str | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        max_concurrency: int | None = None,
        chunk_size: int | None = None,
    ) -> None:
        self._base_url = (base_url or settings.rebrickable_base_url).rstrip("/")
        self._http_client = http_client
        self._max_concurrency = max_concurrency or settings.download_concurrency
        self._chunk_size = chunk_size or settings.chunk_size
        self._timeout = settings.http_timeout
        self._log = log.bind(source_name=self.name)

    @property
    def max_concurrency(self) -> int:
        return self._max_concurrency

    # ------------------------------------------------------------------
    # URL helpers
    # ------------------------------------------------------------------

    def table_url(self, table: TableSpec, timestamp: int) -> str:
        """Return the cache-busted download URL for *table*."""
        return f"{self._base_url}{DOWNLOADS_PATH}/{table.filename}?{timestamp}"

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        """Yield the injected client, or a fresh one closed on exit."""
        if self._http_client is not None:
            yield self._http_client
            return
        async with httpx.AsyncClient(
            timeout=self._timeout, follow_redirects=True
        ) as client:
            yield client

    async def download_table(
        self,
        client: httpx.AsyncClient,
        table: TableSpec,
        dest: Path,
        timestamp: int,
    ) -> Path:
        """
        Stream one table to *dest*.

        Raises:
            FetchError: on a transport error, a non-2xx status, or a local
                write failure.
        """
        url = self.table_url(table, timestamp)
        table_log = self._log.bind(table=table.name)
        table_log.info("download_start", url=url)

        size = 0
        try:
            async with client.stream("GET", url) as response:
                response.raise_for_status()
                with open(dest, "wb") as f:
                    async for chunk in response.aiter_bytes(self._chunk_size):
                        f.write(chunk)
                        size += len(chunk)
                    f.flush()
        except httpx.HTTPStatusError as exc:
            table_log.error("download_failed", status=exc.response.status_code)
            raise FetchError(
                table.name, f"HTTP {exc.response.status_code} from {url}"
            ) from exc
        except httpx.HTTPError as exc:
            table_log.error("download_failed", error=str(exc))
            raise FetchError(table.name, f"{type(exc).__name__}: {exc}") from exc
        except OSError as exc:
            table_log.error("download_failed", error=str(exc), dest=str(dest))
            raise FetchError(table.name, f"cannot write {dest}: {exc}") from exc

        table_log.info("download_complete", bytes=size, dest=str(dest))
        return dest

    # ------------------------------------------------------------------
    # Orchestration
    # ------------------------------------------------------------------

    async def fetch_all(
        self,
        output_dir: Path,
        timestamp: int,
        tables: Sequence[TableSpec] = TABLES,
    ) -> list[Path]:
        """
        Download every table in *tables* into *output_dir*.

        Each file is named after the table's remote file name. At most
        max_concurrency downloads are in flight at once; completion order
        is arbitrary.

        Args:
            output_dir: Existing or creatable directory for the files.
            timestamp:  Seconds since the epoch, used as the cache buster.
            tables:     Tables to fetch (default: the whole catalog).

        Returns:
            Local paths, in the order of *tables*.

        Raises:
            FetchError: for the first download that fails. Outstanding
                downloads are cancelled before it is raised.
        """
        output_dir.mkdir(parents=True, exist_ok=True)
        if not tables:
            return []
        semaphore = asyncio.Semaphore(self._max_concurrency)
        self._log.info(
            "fetch_all_start",
            tables=len(tables),
            max_concurrency=self._max_concurrency,
            output_dir=str(output_dir),
        )

        async with self._session() as client:

            async def download(table: TableSpec) -> Path:
                async with semaphore:
                    return await self.download_table(
                        client, table, output_dir / table.filename, timestamp
                    )

            tasks = [
                asyncio.create_task(download(table), name=f"download:{table.name}")
                for table in tables
            ]
            try:
                done, pending = await asyncio.wait(
                    tasks, return_when=asyncio.FIRST_EXCEPTION
                )
            except BaseException:
                await _cancel_all(tasks)
                raise

            failed = next(
                (t for t in tasks if t in done and t.exception() is not None), None
            )
            if failed is not None:
                await _cancel_all(pending)
                self._log.error(
                    "fetch_all_failed",
                    failed_task=failed.get_name(),
                    cancelled=len(pending),
                )
                raise failed.exception()  # type: ignore[misc]

        self._log.info("fetch_all_complete", tables=len(tables))
        return [t.result() for t in tasks]


async def _cancel_all(tasks: Sequence[asyncio.Task] | set[asyncio.Task]) -> None:
    """Cancel *tasks* and wait until each has finished unwinding."""
    for task in tasks:
        task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)

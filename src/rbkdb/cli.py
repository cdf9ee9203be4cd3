"""
cli.py — Click CLI entrypoint.

Usage:
    rbkdb dump                       # writes ./rebrickable.db
    rbkdb dump --force data/rbk.db   # overwrite an existing database
    rbkdb --log-level DEBUG dump
    rbkdb completion zsh
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import click
from click.shell_completion import get_completion_class

from rbkdb import __version__
from rbkdb.config import settings
from rbkdb.errors import RbkDbError
from rbkdb.utils.logging import configure_logging, get_logger

log = get_logger(__name__)

COMPLETION_SHELLS = ["bash", "zsh", "fish"]


@click.group()
@click.version_option(__version__, prog_name="rbkdb")
@click.option(
    "--log-level",
    default=settings.log_level,
    show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="Log level (env: RBK_DB_LOG_LEVEL).",
)
@click.option(
    "--log-format",
    default=settings.log_format,
    show_default=True,
    type=click.Choice(["console", "json"]),
    help="Log output format (env: RBK_DB_LOG_FORMAT).",
)
def main(log_level: str, log_format: str) -> None:
    """Dump the Rebrickable catalog tables to an SQLite database."""
    configure_logging(log_level=log_level, log_format=log_format)


@main.command()
@click.argument(
    "database",
    type=click.Path(dir_okay=False, path_type=Path),
    default=settings.database,
    envvar="RBK_DB_DATABASE",
)
@click.option("-f", "--force", is_flag=True, help="Overwrite DATABASE if it already exists.")
def dump(database: Path, force: bool) -> None:
    """Download every table and load it into DATABASE."""
    from rbkdb.pipelines.dump import run

    try:
        result = asyncio.run(run(database, force=force))
    except RbkDbError as exc:
        log.error("dump_failed", error=str(exc))
        raise click.ClickException(str(exc)) from exc

    click.echo(
        f"Loaded {result.records_loaded:,} records from {len(result.tables)} tables "
        f"into {result.database}"
    )


@main.command()
@click.argument("shell", type=click.Choice(COMPLETION_SHELLS))
@click.pass_context
def completion(ctx: click.Context, shell: str) -> None:
    """Print the completion script for SHELL."""
    comp_cls = get_completion_class(shell)
    if comp_cls is None:  # pragma: no cover - Choice restricts the shells
        raise click.BadParameter(f"unsupported shell: {shell}")
    root = ctx.find_root()
    comp = comp_cls(root.command, {}, "rbkdb", "_RBKDB_COMPLETE")
    click.echo(comp.source())


if __name__ == "__main__":
    main()

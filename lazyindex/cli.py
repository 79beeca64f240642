"""lazyindex CLI — the main entry point for the index catalog."""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from lazyindex import __version__
from lazyindex.config import REGISTRY_DIR_ENV
from lazyindex.errors import CatalogError

# Data goes to stdout through click.echo; rich is used only for messages.
err_console = Console(stderr=True, soft_wrap=True, highlight=False)

logger = logging.getLogger(__name__)


def _fail(error: Exception):
    err_console.print(f"[red]Error:[/] {escape(str(error))}")
    sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(dir_okay=False),
    help="YAML config file (default: $LAZYINDEX_CONFIG or ~/.lazyindex/config.yaml)",
)
@click.option("--debug", is_flag=True, help="Log debug output to stderr")
@click.pass_context
def main(ctx: click.Context, config_path: str | None, debug: bool):
    """lazyindex — catalog of lazy-load image indices.

    Every index is built once per image reference and platform and is
    addressed by its digest. Use 'lazyindex index list' to enumerate them
    and 'lazyindex index info' to inspect one.
    """
    from lazyindex.config import debug_from_env, load_config

    try:
        config = load_config(config_path)
    except CatalogError as e:
        _fail(e)

    level = logging.DEBUG if debug or debug_from_env() else config.log_level_value
    logging.basicConfig(
        level=level,
        format="[%(levelname)s %(name)s] %(message)s",
        stream=sys.stderr,
        force=True,
    )
    ctx.obj = config


# ── Index ────────────────────────────────────────────────────────────


@main.group()
@click.option(
    "--registry-dir",
    "-r",
    default=None,
    envvar=REGISTRY_DIR_ENV,
    type=click.Path(file_okay=False),
    help="Registry directory (default: ~/.lazyindex/registry)",
)
@click.pass_context
def index(ctx: click.Context, registry_dir: str | None):
    """Inspect the registry of built indices."""
    if registry_dir:
        ctx.obj.registry_dir = Path(registry_dir)
    logger.debug("Using registry at %s", ctx.obj.registry_dir)


@index.command()
@click.argument("digest")
@click.option(
    "--format",
    "fmt",
    default="json",
    type=click.Choice(["json", "yaml"]),
    help="Document format",
)
@click.pass_obj
def info(config, digest: str, fmt: str):
    """Show the full record of the index DIGEST."""
    from lazyindex.registry.info import InfoRetriever, render_document
    from lazyindex.registry.local_registry import LocalRegistry

    try:
        record = InfoRetriever(LocalRegistry(config.registry_dir)).info(digest)
        document = render_document(record, fmt)
    except CatalogError as e:
        _fail(e)

    click.echo(document, nl=not document.endswith("\n"))


def _parse_filter_option(ctx, param, values):
    pairs = []
    for value in values:
        key, sep, arg = value.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got {value!r}")
        pairs.append((key, arg))
    return pairs


@index.command(name="list")
@click.option("--ref", default=None, help="Only indices for this image reference")
@click.option("--platform", default=None, help="Only indices for this platform (os/arch[/variant])")
@click.option(
    "--filter",
    "-f",
    "filters",
    multiple=True,
    callback=_parse_filter_option,
    help="Additional KEY=VALUE filter (keys: ref, platform)",
)
@click.option("--quiet", "-q", is_flag=True, help="Only print index digests")
@click.pass_obj
def list_indices(config, ref: str | None, platform: str | None, filters: list, quiet: bool):
    """List built indices, optionally filtered by reference and platform.

    Filters combine with AND. With -q only digests are printed, one per line.
    """
    from lazyindex.output import OutputMode, render
    from lazyindex.registry.local_registry import LocalRegistry
    from lazyindex.registry.query import build_filter

    criteria = [("ref", ref), ("platform", platform)] + list(filters)
    try:
        index_filter = build_filter(criteria)
        reg = LocalRegistry(config.registry_dir)
        records = reg.list_indices(index_filter)
        text = render(records, OutputMode.QUIET if quiet else OutputMode.FULL)
    except CatalogError as e:
        _fail(e)

    logger.debug("Matched %d index(es) for %s", len(records), index_filter.describe())
    click.echo(text, nl=False)


index.add_command(list_indices, name="ls")


if __name__ == "__main__":
    main()

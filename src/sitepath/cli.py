"""CLI interface for sitepath.

Command-line tool for resolving request paths against a content tree.
"""

import logging
import sys
from pathlib import Path

import click

from sitepath.config import Config
from sitepath.core.context import RequestContext, SiteContext, SiteRegistry
from sitepath.core.loader import load_tree
from sitepath.core.matching import MatchingMode
from sitepath.core.tree import ContentTree

CONFIG_OPTION_HELP = "Path to configuration file (default: auto-discover sitepath.toml)"


@click.group()
def cli() -> None:
    """sitepath - resolve request paths to content items."""


@cli.command()
@click.argument("path")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help=CONFIG_OPTION_HELP,
)
@click.option(
    "--tree",
    "-t",
    "tree_file",
    type=click.Path(exists=True, path_type=Path, dir_okay=False),
    default=None,
    help="Content tree JSON file (overrides config)",
)
@click.option(
    "--site",
    "-s",
    "site_name",
    default=None,
    help="Site to resolve in (default: first site matching the path)",
)
@click.option(
    "--host",
    default="",
    help="Host name used to match a site",
)
@click.option(
    "--user",
    "-u",
    default=None,
    help="Principal to resolve as (default: anonymous)",
)
@click.option(
    "--matching",
    type=click.Choice([mode.value for mode in MatchingMode]),
    default=None,
    help="Name matching mode (overrides config)",
)
@click.option(
    "--start-path/--no-start-path",
    default=True,
    help="Allow falling back to the site start path (default: enabled)",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output (log every lookup)",
)
def resolve(
    path: str,
    config_path: Path | None,
    tree_file: Path | None,
    site_name: str | None,
    host: str,
    user: str | None,
    matching: str | None,
    start_path: bool,
    verbose: bool,
) -> None:
    """Resolve PATH and print the resulting item."""
    from sitepath.server import build_request_context, create_resolver

    _configure_logging(verbose=verbose)

    try:
        config = Config.load(config_path).with_overrides(
            tree_file=tree_file,
            matching=MatchingMode(matching) if matching is not None else None,
        )
        tree = _load_tree(config)
        site = _select_site(config, site_name, host, path)

        request = build_request_context(path, site, user=user)
        request.use_site_start_path = start_path
        resolution = create_resolver(config).process(request, site, tree)
    except Exception as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)

    _print_request(request, site)
    if resolution.item is None:
        if request.permission_denied:
            click.echo(click.style("Permission denied", fg="yellow"))
        else:
            click.echo(click.style("No item resolved", fg="yellow"))
        sys.exit(1)

    click.echo(click.style(f"Resolved: {resolution.item.path}", fg="green", bold=True))
    click.echo(f"ID: {resolution.item.id}")
    click.echo(f"Display name: {resolution.item.display_name}")
    click.echo(f"Matched path: {resolution.path}")
    click.echo(f"Stage: {resolution.stage}")


@cli.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help=CONFIG_OPTION_HELP,
)
@click.option(
    "--tree",
    "-t",
    "tree_file",
    type=click.Path(exists=True, path_type=Path, dir_okay=False),
    default=None,
    help="Content tree JSON file (overrides config)",
)
@click.option(
    "--host",
    default=None,
    help="Host to bind to (overrides config)",
)
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    help="Port to bind to (overrides config)",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output (log every resolution)",
)
def serve(
    config_path: Path | None,
    tree_file: Path | None,
    host: str | None,
    port: int | None,
    verbose: bool,
) -> None:
    """Start the item resolution server."""
    from sitepath.server import run_server

    _configure_logging(verbose=verbose)

    try:
        config = Config.load(config_path).with_overrides(
            host=host,
            port=port,
            tree_file=tree_file,
        )
        tree = _load_tree(config)
    except Exception as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)

    click.echo(f"Starting server on {config.server.host}:{config.server.port}")
    click.echo(f"Content tree: {config.content.tree_file}")
    click.echo(f"Matching: {config.resolver.matching}")
    if config.sites:
        click.echo(f"Sites: {', '.join(site.name for site in config.sites)}")
    else:
        click.echo("Sites: none (paths resolve from the tree root)")

    run_server(config, tree, verbose=verbose)


def _configure_logging(*, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _load_tree(config: Config) -> ContentTree:
    if config.content.tree_file is None:
        raise click.ClickException(
            "No content tree configured. Pass --tree or set content.tree_file in sitepath.toml."
        )
    return load_tree(config.content.tree_file)


def _select_site(
    config: Config,
    site_name: str | None,
    host: str,
    path: str,
) -> SiteContext | None:
    registry = SiteRegistry(config.sites)
    if site_name is None:
        return registry.match(host, path)

    site = registry.get(site_name)
    if site is None:
        raise click.ClickException(f"Unknown site: {site_name}")
    return site


def _print_request(request: RequestContext, site: SiteContext | None) -> None:
    click.echo(f"Site: {site.name if site is not None else '(none)'}")
    click.echo(f"Item path: {request.item_path}")
    click.echo(f"Local path: {request.local_path}")


if __name__ == "__main__":
    cli()

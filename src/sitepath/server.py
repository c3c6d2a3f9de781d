"""aiohttp server for sitepath.

Application factory, the item resolution middleware and route registration.
Every request runs item resolution once before its handler.
"""

import logging
from collections.abc import Awaitable, Callable

from aiohttp import web

from sitepath.api.items import ITEM_REQUEST, create_items_routes
from sitepath.app_keys import (
    replacements_key,
    resolver_key,
    sites_key,
    tree_key,
    verbose_key,
)
from sitepath.config import Config
from sitepath.core.context import RequestContext, SiteContext, SiteRegistry
from sitepath.core.profiling import LoggingProfiler
from sitepath.core.resolver import ItemResolver
from sitepath.core.tree import ContentTree

logger = logging.getLogger(__name__)

USER_HEADER = "X-Forwarded-User"

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def create_resolver(config: Config) -> ItemResolver:
    """Create an ItemResolver from configuration."""
    return ItemResolver(
        matching=config.resolver.matching,
        replacements=config.encoding.replacements,
        display_name_fallback=config.resolver.display_name_fallback,
        site_start_fallback=config.resolver.site_start_fallback,
        skip_root_local_path=config.resolver.skip_root_local_path,
        profiler=LoggingProfiler(),
    )


def build_request_context(
    raw_path: str,
    site: SiteContext | None,
    *,
    user: str | None = None,
) -> RequestContext:
    """Build resolution state for a request path.

    The local path is the raw path without the site's virtual folder. A
    request for the site home addresses the site start path directly.

    Args:
        raw_path: Request path as sent by the client (still percent-encoded)
        site: Site serving the request, None if no site matched
        user: Authenticated principal, None for anonymous requests

    Returns:
        RequestContext for the resolver
    """
    local_path = site.to_local_path(raw_path) if site is not None else raw_path
    item_path = raw_path
    if site is not None and local_path == "/":
        item_path = site.start_path
    return RequestContext(item_path=item_path, local_path=local_path, user=user)


@web.middleware
async def item_resolver_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """Resolve the item addressed by the request before handling it."""
    raw_path = request.rel_url.raw_path
    site = request.app[sites_key].match(request.host, raw_path)
    item_request = build_request_context(
        raw_path,
        site,
        user=request.headers.get(USER_HEADER),
    )

    resolution = request.app[resolver_key].process(item_request, site, request.app[tree_key])
    if request.app[verbose_key]:
        logger.debug(f"{raw_path} -> {resolution.path} ({resolution.stage})")

    request[ITEM_REQUEST] = item_request
    return await handler(request)


def create_app(config: Config, tree: ContentTree, *, verbose: bool = False) -> web.Application:
    """Create aiohttp application.

    Args:
        config: Application configuration
        tree: Content tree to resolve requests against
        verbose: Log every resolution

    Returns:
        Configured aiohttp application
    """
    app = web.Application(middlewares=[item_resolver_middleware])

    app[resolver_key] = create_resolver(config)
    app[tree_key] = tree
    app[sites_key] = SiteRegistry(config.sites)
    app[replacements_key] = config.encoding.replacements
    app[verbose_key] = verbose

    app.router.add_routes(create_items_routes())

    return app


def run_server(config: Config, tree: ContentTree, *, verbose: bool = False) -> None:
    """Run the server.

    Args:
        config: Application configuration
        tree: Content tree to serve
        verbose: Log every resolution
    """
    app = create_app(config, tree, verbose=verbose)
    web.run_app(app, host=config.server.host, port=config.server.port)

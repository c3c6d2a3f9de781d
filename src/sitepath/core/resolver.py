"""Item resolution for incoming requests.

Resolves the item a request addresses by trying, in order:

1. Direct lookups of candidate paths built from the item path, the local
   path, the site root and the site start item (see candidates module).
2. Display name resolution: walking the local path (or the item path)
   segment by segment, matching display names as well as item names.
   Lookups run with security disabled; the result is re-checked against
   the caller before it is accepted.
3. The site start path, when the request allows it.

A direct hit on a wildcard item (named "*") is only kept when display name
resolution finds nothing better.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import StrEnum

from sitepath.core.candidates import iter_direct_candidates
from sitepath.core.context import RequestContext, SiteContext
from sitepath.core.matching import MatchingMode, NameMatcher, create_matcher
from sitepath.core.names import DEFAULT_REPLACEMENTS, NameReplacement
from sitepath.core.path_resolver import PathResolver
from sitepath.core.profiling import NullProfiler, Profiler
from sitepath.core.security import apply_security, security_disabled
from sitepath.core.tree import LookupOptions, Node, SecurityMode, TreeAccessor

logger = logging.getLogger(__name__)

WILDCARD_NAME = "*"


class ResolutionStage(StrEnum):
    """Stages of item resolution, in order."""

    START = "start"
    DIRECT_LOOKUP = "direct_lookup"
    DISPLAY_NAME_FALLBACK = "display_name_fallback"
    SITE_START_FALLBACK = "site_start_fallback"
    DONE = "done"


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving one request.

    Attributes:
        item: Resolved item, None when nothing matched
        path: Path string that produced the item
        stage: Stage that produced the item; START when resolution was
            skipped, DONE when every stage ran without a match
    """

    item: Node | None
    path: str | None
    stage: ResolutionStage


class ItemResolver:
    """Resolves the current item of a request.

    One instance is shared by all requests. It holds configuration only;
    all per-request state lives in the RequestContext passed to process().
    """

    def __init__(
        self,
        *,
        matcher: NameMatcher | None = None,
        matching: MatchingMode = MatchingMode.EXACT,
        replacements: tuple[NameReplacement, ...] = DEFAULT_REPLACEMENTS,
        display_name_fallback: bool = True,
        site_start_fallback: bool = True,
        skip_root_local_path: bool = False,
        profiler: Profiler | None = None,
    ) -> None:
        """Initialize resolver.

        Args:
            matcher: Name matcher for segment walks, created from matching if None
            matching: Matching mode used when no matcher is given
            replacements: Name replacements used when decoding paths
            display_name_fallback: Enable display name resolution
            site_start_fallback: Enable falling back to the site start path
            skip_root_local_path: Use only the item path rules when the
                local path is "/"
            profiler: Observability hooks, discarded when None
        """
        self._path_resolver = PathResolver(matcher or create_matcher(matching), replacements)
        self._replacements = replacements
        self._display_name_fallback = display_name_fallback
        self._site_start_fallback = site_start_fallback
        self._skip_root_local_path = skip_root_local_path
        self._profiler = profiler or NullProfiler()

    def process(
        self,
        request: RequestContext,
        site: SiteContext | None,
        tree: TreeAccessor | None,
    ) -> Resolution:
        """Resolve the item for a request and store it on the request.

        Does nothing when the request already has an item, no tree is
        available or the item path is empty.

        Args:
            request: Current request
            site: Site serving the request, None if no site matched
            tree: Tree to resolve against, None if none is available

        Returns:
            Resolution describing the outcome

        Raises:
            ValueError: If request is None
        """
        if request is None:
            raise ValueError("request is required")

        if request.item is not None or request.is_resolved or tree is None or not request.item_path:
            return Resolution(item=request.item, path=None, stage=ResolutionStage.START)

        self._notify(self._profiler.start_operation, "Resolve current item.")
        try:
            resolution = self._resolve(request, site, tree)
            request.set_item(resolution.item)
            if resolution.item is not None:
                self._notify(self._profiler.trace, f'Current item is "{resolution.path}".')
                logger.info(
                    f"Resolved {request.item_path} to {resolution.item.path} "
                    f"({resolution.stage})"
                )
            else:
                logger.info(f"No item resolved for {request.item_path}")
            return resolution
        finally:
            self._notify(self._profiler.end_operation)

    def _resolve(
        self,
        request: RequestContext,
        site: SiteContext | None,
        tree: TreeAccessor,
    ) -> Resolution:
        include_local_path = not (self._skip_root_local_path and request.local_path == "/")

        item, path = self._direct_lookup(request, site, tree, include_local_path)
        stage = ResolutionStage.DIRECT_LOOKUP

        if (
            (item is None or item.name == WILDCARD_NAME)
            and include_local_path
            and self._display_name_fallback
            and not request.permission_denied
        ):
            logger.debug(f"Trying display name resolution for {request.item_path}")
            found = self._resolve_using_display_name(request, site, tree)
            if found is not None:
                item, path = found
                stage = ResolutionStage.DISPLAY_NAME_FALLBACK

        if (
            item is None
            and self._site_start_fallback
            and request.use_site_start_path
            and site is not None
            and not request.permission_denied
        ):
            path = site.start_path
            logger.debug(f"Trying site start path {path}")
            item = self._get_item(request, tree, path)
            stage = ResolutionStage.SITE_START_FALLBACK

        if item is None:
            return Resolution(item=None, path=None, stage=ResolutionStage.DONE)
        return Resolution(item=item, path=path, stage=stage)

    def _direct_lookup(
        self,
        request: RequestContext,
        site: SiteContext | None,
        tree: TreeAccessor,
        include_local_path: bool,
    ) -> tuple[Node | None, str | None]:
        candidates = iter_direct_candidates(
            request,
            site,
            self._replacements,
            include_local_path=include_local_path,
        )
        for index, candidate in enumerate(candidates):
            if index > 0 and request.permission_denied:
                logger.debug(f"Permission denied, stopping direct lookup for {request.item_path}")
                break
            logger.debug(f"Trying {candidate.source} candidate {candidate.path}")
            item = self._get_item(request, tree, candidate.path)
            if item is not None:
                return item, candidate.path
        return None, None

    def _get_item(self, request: RequestContext, tree: TreeAccessor, path: str) -> Node | None:
        """Look an item up with the caller's security.

        Flags the request as permission denied when the item exists but
        the caller cannot read it.
        """
        options = LookupOptions(user=request.user)
        item = tree.get_item(path, options)
        if item is None:
            hidden = tree.get_item(path, replace(options, security=SecurityMode.BYPASS))
            if hidden is not None:
                logger.debug(f"Permission denied for {path}")
                request.permission_denied = True
        return item

    def _resolve_using_display_name(
        self,
        request: RequestContext,
        site: SiteContext | None,
        tree: TreeAccessor,
    ) -> tuple[Node, str] | None:
        with security_disabled():
            found = self._resolve_local_path(request, site, tree)
            if found is None:
                found = self._resolve_full_path(request, tree)

        if found is None:
            return None

        item, path = found
        secured = apply_security(tree, item, request.user)
        if secured is None:
            return None
        return secured, path

    def _resolve_local_path(
        self,
        request: RequestContext,
        site: SiteContext | None,
        tree: TreeAccessor,
    ) -> tuple[Node, str] | None:
        """Walk the local path from the site root item."""
        if site is None:
            return None

        root = tree.get_item(site.root_path, _bypass_options(request))
        if root is None:
            return None

        item = self._path_resolver.resolve_from_root(root, request.local_path)
        if item is None:
            return None
        return item, request.local_path

    def _resolve_full_path(
        self,
        request: RequestContext,
        tree: TreeAccessor,
    ) -> tuple[Node, str] | None:
        """Walk the item path, then the local path, from their first segment."""
        for path in (request.item_path, request.local_path):
            item = self._resolve_rooted_path(request, tree, path)
            if item is not None:
                return item, path
        return None

    def _resolve_rooted_path(
        self,
        request: RequestContext,
        tree: TreeAccessor,
        path: str,
    ) -> Node | None:
        # "/sitecore/content/home": "/sitecore" names the root item,
        # "/content/home" is walked below it.
        if not path or path[0] != "/":
            return None

        index = path.find("/", 1)
        if index < 0:
            return None

        root = tree.get_item(path[:index], _bypass_options(request))
        if root is None:
            return None

        return self._path_resolver.resolve_from_root(root, path[index:])

    def _notify(self, hook: Callable[..., None], *args: str) -> None:
        try:
            hook(*args)
        except Exception:
            logger.warning("Profiler hook failed", exc_info=True)


def _bypass_options(request: RequestContext) -> LookupOptions:
    return LookupOptions(security=SecurityMode.BYPASS, user=request.user)

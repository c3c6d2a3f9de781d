"""Candidate paths for direct lookup.

Candidates are generated fresh for every request, in strict precedence
order, and are never cached: the same URL can map to different items for
different languages or users.
"""

from collections.abc import Iterable, Iterator
from enum import StrEnum
from typing import NamedTuple

from sitepath.core.context import RequestContext, SiteContext
from sitepath.core.names import DEFAULT_REPLACEMENTS, NameReplacement, decode_name, make_path


class CandidateSource(StrEnum):
    """Rule a candidate path was generated by."""

    ITEM_PATH_DECODED = "item_path_decoded"
    ITEM_PATH = "item_path"
    LOCAL_PATH = "local_path"
    LOCAL_PATH_DECODED = "local_path_decoded"
    ROOTED_LOCAL_PATH = "rooted_local_path"
    ROOTED_LOCAL_PATH_DECODED = "rooted_local_path_decoded"
    START_ITEM_COMBINATION = "start_item_combination"


class Candidate(NamedTuple):
    """Path to try against the tree, with the rule that produced it."""

    source: CandidateSource
    path: str


def unique(values: Iterable[str]) -> list[str]:
    """Deduplicate strings, keeping the first occurrence of each."""
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


def cross_product_candidates(
    root_path: str,
    start_item: str,
    local_path: str,
    replacements: tuple[NameReplacement, ...] = DEFAULT_REPLACEMENTS,
) -> list[str]:
    """Build root/start item/local path combinations.

    Every combination of raw and decoded root path, start item and local
    path is joined, root path varying slowest and local path fastest.

    Returns:
        Deduplicated candidate paths in generation order
    """
    roots = (root_path, decode_name(root_path, replacements))
    start_items = (start_item, decode_name(start_item, replacements))
    local_paths = (local_path, decode_name(local_path, replacements))
    return unique(
        make_path(make_path(root, start), local)
        for root in roots
        for start in start_items
        for local in local_paths
    )


def iter_direct_candidates(
    request: RequestContext,
    site: SiteContext | None,
    replacements: tuple[NameReplacement, ...] = DEFAULT_REPLACEMENTS,
    *,
    include_local_path: bool = True,
) -> Iterator[Candidate]:
    """Yield direct lookup candidates in precedence order.

    Candidates are produced lazily so the caller can stop as soon as one
    resolves or permission is denied. A path already yielded is not
    yielded again under a later rule.

    Args:
        request: Current request
        site: Site serving the request, None if no site matched
        replacements: Name replacements used for decoding
        include_local_path: When False only the item path rules are used

    Yields:
        Candidate for each rule, in order
    """
    seen: set[str] = set()
    for candidate in _generate(request, site, replacements, include_local_path):
        if candidate.path in seen:
            continue
        seen.add(candidate.path)
        yield candidate


def _generate(
    request: RequestContext,
    site: SiteContext | None,
    replacements: tuple[NameReplacement, ...],
    include_local_path: bool,
) -> Iterator[Candidate]:
    yield Candidate(
        CandidateSource.ITEM_PATH_DECODED,
        decode_name(request.item_path, replacements),
    )
    yield Candidate(CandidateSource.ITEM_PATH, request.item_path)

    if not include_local_path:
        return

    local_path = request.local_path
    root_path = site.root_path if site is not None else ""

    yield Candidate(CandidateSource.LOCAL_PATH, local_path)
    yield Candidate(CandidateSource.LOCAL_PATH_DECODED, decode_name(local_path, replacements))

    rooted = make_path(root_path, local_path)
    yield Candidate(CandidateSource.ROOTED_LOCAL_PATH, rooted)
    yield Candidate(CandidateSource.ROOTED_LOCAL_PATH_DECODED, decode_name(rooted, replacements))

    start_item = site.start_item if site is not None else ""
    for path in cross_product_candidates(root_path, start_item, local_path, replacements):
        yield Candidate(CandidateSource.START_ITEM_COMBINATION, path)

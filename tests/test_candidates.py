"""Tests for direct lookup candidate generation."""

from sitepath.core.candidates import (
    CandidateSource,
    cross_product_candidates,
    iter_direct_candidates,
    unique,
)
from sitepath.core.context import RequestContext, SiteContext


class TestUnique:
    """Tests for unique()."""

    def test__keeps_first_occurrence_order(self) -> None:
        assert unique(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]


class TestCrossProductCandidates:
    """Tests for cross_product_candidates()."""

    def test__all_distinct__generation_order(self) -> None:
        """Root varies slowest, local path fastest, raw before decoded."""
        candidates = cross_product_candidates("/r%20", "/s%20", "/l%20")

        assert candidates == [
            "/r%20/s%20/l%20",
            "/r%20/s%20/l ",
            "/r%20/s /l%20",
            "/r%20/s /l ",
            "/r /s%20/l%20",
            "/r /s%20/l ",
            "/r /s /l%20",
            "/r /s /l ",
        ]

    def test__duplicates__removed(self) -> None:
        """Parts without encoded characters produce a single candidate each."""
        candidates = cross_product_candidates("/sitecore/content", "/home", "/about%20us")

        assert candidates == [
            "/sitecore/content/home/about%20us",
            "/sitecore/content/home/about us",
        ]
        assert len(candidates) == len(set(candidates))

    def test__empty_start_item__joins_root_and_local(self) -> None:
        assert cross_product_candidates("/sitecore/content", "", "/about") == [
            "/sitecore/content/about",
        ]


class TestIterDirectCandidates:
    """Tests for iter_direct_candidates()."""

    def test__precedence_order(self) -> None:
        """Yield candidates in rule order."""
        request = RequestContext(item_path="/item%20path", local_path="/local%20path")
        site = SiteContext(name="website", root_path="/root", start_item="/start")

        candidates = list(iter_direct_candidates(request, site))

        assert [(c.source, c.path) for c in candidates] == [
            (CandidateSource.ITEM_PATH_DECODED, "/item path"),
            (CandidateSource.ITEM_PATH, "/item%20path"),
            (CandidateSource.LOCAL_PATH, "/local%20path"),
            (CandidateSource.LOCAL_PATH_DECODED, "/local path"),
            (CandidateSource.ROOTED_LOCAL_PATH, "/root/local%20path"),
            (CandidateSource.ROOTED_LOCAL_PATH_DECODED, "/root/local path"),
            (CandidateSource.START_ITEM_COMBINATION, "/root/start/local%20path"),
            (CandidateSource.START_ITEM_COMBINATION, "/root/start/local path"),
        ]

    def test__repeated_paths__yielded_once(self) -> None:
        """A path produced by several rules is only tried under the first."""
        request = RequestContext(item_path="/about", local_path="/about")
        site = SiteContext(name="website", root_path="/sitecore/content", start_item="/home")

        paths = [c.path for c in iter_direct_candidates(request, site)]

        assert paths == ["/about", "/sitecore/content/about", "/sitecore/content/home/about"]

    def test__no_site__uses_empty_root(self) -> None:
        request = RequestContext(item_path="/sitecore/content", local_path="/x")

        paths = [c.path for c in iter_direct_candidates(request, None)]

        assert paths == ["/sitecore/content", "/x"]

    def test__local_path_excluded__item_path_only(self) -> None:
        request = RequestContext(item_path="/a%20b", local_path="/")
        site = SiteContext(name="website", root_path="/sitecore/content", start_item="/home")

        paths = [
            c.path for c in iter_direct_candidates(request, site, include_local_path=False)
        ]

        assert paths == ["/a b", "/a%20b"]

    def test__lazy__stops_when_caller_stops(self) -> None:
        request = RequestContext(item_path="/a", local_path="/b")

        candidates = iter_direct_candidates(request, None)

        assert next(candidates).path == "/a"

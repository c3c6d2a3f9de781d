"""Child lookup by display name or canonical name.

A matcher strategy is chosen once from configuration and shared by every
resolution; matchers hold no per-request state.
"""

import re
import unicodedata
from enum import StrEnum
from typing import Protocol

from sitepath.core.tree import Node

_SEPARATOR_RUN = re.compile(r"[\s\-_]+")


class MatchingMode(StrEnum):
    """Name matching strategy."""

    EXACT = "exact"
    MIXED = "mixed"


class NameMatcher(Protocol):
    """Protocol for finding a child of a node by name."""

    def find_child(self, parent: Node, name: str) -> Node | None:
        """Return the best matching child of parent, None if nothing matches."""
        ...


class ExactNameMatcher:
    """Match children by display name, then by canonical name.

    Both comparisons are case-insensitive. All children are checked for
    a display name match before any canonical name is considered.
    """

    def find_child(self, parent: Node, name: str) -> Node | None:
        lowered = name.lower()
        for child in parent.children:
            if child.display_name.lower() == lowered:
                return child
        for child in parent.children:
            if child.name.lower() == lowered:
                return child
        return None


class MixedNameMatcher:
    """Fall back to normalized matching when the inner matcher misses.

    Normalization drops diacritics, folds case and treats runs of spaces,
    hyphens and underscores as a single space, so "cafe-menu" matches an
    item displayed as "Café Menu".
    """

    def __init__(self, inner: NameMatcher) -> None:
        self._inner = inner

    @property
    def inner(self) -> NameMatcher:
        return self._inner

    def find_child(self, parent: Node, name: str) -> Node | None:
        child = self._inner.find_child(parent, name)
        if child is not None:
            return child

        key = normalize_name(name)
        if not key:
            return None
        for child in parent.children:
            if normalize_name(child.display_name) == key:
                return child
        for child in parent.children:
            if normalize_name(child.name) == key:
                return child
        return None


def normalize_name(name: str) -> str:
    """Build the comparison key used by mixed matching."""
    decomposed = unicodedata.normalize("NFKD", name)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _SEPARATOR_RUN.sub(" ", stripped.casefold()).strip()


def create_matcher(mode: MatchingMode) -> NameMatcher:
    """Create the matcher for a configured mode.

    Args:
        mode: Matching mode from configuration

    Returns:
        NameMatcher instance
    """
    matcher: NameMatcher = ExactNameMatcher()
    if mode is MatchingMode.MIXED:
        matcher = MixedNameMatcher(matcher)
    return matcher

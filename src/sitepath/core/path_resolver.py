"""Segment-by-segment path resolution."""

import logging

from sitepath.core.matching import NameMatcher
from sitepath.core.names import DEFAULT_REPLACEMENTS, NameReplacement, decode_name
from sitepath.core.tree import Node

logger = logging.getLogger(__name__)


class PathResolver:
    """Walks a relative path from a root node using a NameMatcher."""

    def __init__(
        self,
        matcher: NameMatcher,
        replacements: tuple[NameReplacement, ...] = DEFAULT_REPLACEMENTS,
    ) -> None:
        """Initialize resolver.

        Args:
            matcher: Strategy used to match each segment against children
            replacements: Name replacements reversed on each segment
        """
        self._matcher = matcher
        self._replacements = replacements

    def resolve_from_root(self, root: Node, relative_path: str) -> Node | None:
        """Resolve a path relative to root.

        Empty segments are ignored, so leading, trailing and doubled slashes
        are harmless. Resolution stops at the first segment with no matching
        child; there is no backtracking to other same-named siblings.

        Args:
            root: Node to start from
            relative_path: Path such as "/news/2024" (possibly encoded)

        Returns:
            Node reached after all segments, root for a path with no segments,
            None if any segment does not match
        """
        current = root
        for segment in relative_path.split("/"):
            if not segment:
                continue
            name = decode_name(segment, self._replacements)
            child = self._matcher.find_child(current, name)
            if child is None:
                logger.debug(f"No child '{name}' under {current.path}")
                return None
            current = child
        return current

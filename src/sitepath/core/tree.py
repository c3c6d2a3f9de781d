"""Content tree access.

Defines the contract the resolver uses to look items up, and ContentTree,
an in-memory tree implementing it. ContentTree stores nodes the way the
tree storage engine exposes them: immutable, addressed by canonical-name
path or by id.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Protocol, runtime_checkable

from sitepath.core.security import is_security_disabled


class SecurityMode(StrEnum):
    """Whether a lookup checks read permissions."""

    ENFORCE = "enforce"
    BYPASS = "bypass"


@dataclass(frozen=True)
class Node:
    """Item in the content tree."""

    id: str
    name: str
    path: str
    display_name: str = ""
    children: tuple["Node", ...] = field(default=(), compare=False, repr=False)
    readers: frozenset[str] | None = None

    def __post_init__(self) -> None:
        if not self.display_name:
            object.__setattr__(self, "display_name", self.name)

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "display_name": self.display_name,
            "path": self.path,
        }


@dataclass(frozen=True)
class LookupOptions:
    """Options for a single tree lookup."""

    language: str = "current"
    version: str = "latest"
    database: str | None = None
    security: SecurityMode = SecurityMode.ENFORCE
    user: str | None = None


@runtime_checkable
class TreeAccessor(Protocol):
    """Protocol for content tree lookups used by the resolver."""

    def get_item(self, path_or_id: str, options: LookupOptions) -> Node | None:
        """Look up an item by absolute path or id, None if absent or hidden."""
        ...

    def can_read(self, node: Node, user: str | None) -> bool:
        """Return True if user may read node."""
        ...


class ContentTree:
    """In-memory content tree.

    Path lookups walk canonical names case-insensitively from the top-level
    items; when siblings share a name the first one in tree order wins.
    An item is visible under enforced security only when it and all of its
    ancestors are readable by the user.
    """

    __slots__ = ("_id_index", "_parents", "_roots")

    def __init__(self, roots: tuple[Node, ...]) -> None:
        """Initialize tree.

        Args:
            roots: Top-level items
        """
        self._roots = roots
        self._id_index: dict[str, Node] = {}
        # Keyed by node identity; ids may repeat across items.
        self._parents: dict[int, Node | None] = {}
        for root in roots:
            self._index(root, None)

    def _index(self, node: Node, parent: Node | None) -> None:
        self._id_index.setdefault(_normalize_id(node.id), node)
        self._parents[id(node)] = parent
        for child in node.children:
            self._index(child, node)

    @property
    def roots(self) -> tuple[Node, ...]:
        """Top-level items."""
        return self._roots

    def get_item(self, path_or_id: str, options: LookupOptions | None = None) -> Node | None:
        """Look up an item by path or id.

        Args:
            path_or_id: Absolute path (e.g., "/sitecore/content") or item id
            options: Lookup options, enforced security for anonymous by default

        Returns:
            Node if found and visible, None otherwise
        """
        options = options or LookupOptions()
        node = self._find(path_or_id)
        if node is None:
            return None

        if options.security is SecurityMode.BYPASS or is_security_disabled():
            return node
        if not self._is_visible(node, options.user):
            return None
        return node

    def can_read(self, node: Node, user: str | None) -> bool:
        """Check read access to a node, including access inherited from ancestors."""
        if is_security_disabled():
            return True
        return self._is_visible(node, user)

    def get_parent(self, node: Node) -> Node | None:
        """Return parent of node, None for top-level items."""
        return self._parents.get(id(node))

    def _find(self, path_or_id: str) -> Node | None:
        if not path_or_id:
            return None
        by_id = self._id_index.get(_normalize_id(path_or_id))
        if by_id is not None and not path_or_id.startswith("/"):
            return by_id

        segments = [segment for segment in path_or_id.split("/") if segment]
        if not segments:
            return None

        current = _child_by_name(self._roots, segments[0])
        for segment in segments[1:]:
            if current is None:
                return None
            current = _child_by_name(current.children, segment)
        return current

    def _is_visible(self, node: Node, user: str | None) -> bool:
        current: Node | None = node
        while current is not None:
            if not _readable(current, user):
                return False
            current = self._parents.get(id(current))
        return True


class TreeBuilder:
    """Builder for constructing ContentTree instances."""

    def __init__(self) -> None:
        self._names: list[str] = []
        self._ids: list[str] = []
        self._seen_ids: set[str] = set()
        self._display_names: list[str] = []
        self._readers: list[frozenset[str] | None] = []
        self._children: list[list[int]] = []
        self._roots: list[int] = []

    def add_item(
        self,
        name: str,
        parent_idx: int | None = None,
        *,
        display_name: str = "",
        item_id: str | None = None,
        readers: frozenset[str] | None = None,
    ) -> int:
        """Add an item to the tree.

        Args:
            name: Canonical item name
            parent_idx: Index of parent item, None for top-level items
            display_name: Display name, defaults to name
            item_id: Item id, generated from the index when omitted
            readers: Principals allowed to read the item, None for everyone

        Returns:
            Index of the added item

        Raises:
            ValueError: If another item already uses the id
        """
        idx = len(self._names)
        item_id = item_id or f"{{{idx:08X}-0000-0000-0000-000000000000}}"
        key = _normalize_id(item_id)
        if key in self._seen_ids:
            raise ValueError(f"Duplicate item id: {item_id}")
        self._seen_ids.add(key)

        self._names.append(name)
        self._ids.append(item_id)
        self._display_names.append(display_name)
        self._readers.append(readers)
        self._children.append([])

        if parent_idx is None:
            self._roots.append(idx)
        else:
            self._children[parent_idx].append(idx)

        return idx

    def build(self) -> ContentTree:
        """Build the ContentTree instance."""
        return ContentTree(tuple(self._build_node(idx, "") for idx in self._roots))

    def _build_node(self, idx: int, parent_path: str) -> Node:
        path = f"{parent_path}/{self._names[idx]}"
        return Node(
            id=self._ids[idx],
            name=self._names[idx],
            path=path,
            display_name=self._display_names[idx],
            children=tuple(self._build_node(child, path) for child in self._children[idx]),
            readers=self._readers[idx],
        )


def _child_by_name(children: tuple[Node, ...], name: str) -> Node | None:
    lowered = name.lower()
    for child in children:
        if child.name.lower() == lowered:
            return child
    return None


def _readable(node: Node, user: str | None) -> bool:
    if node.readers is None:
        return True
    return user is not None and user in node.readers


def _normalize_id(item_id: str) -> str:
    return item_id.strip("{}").lower()

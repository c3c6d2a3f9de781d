"""Shared test fixtures."""

import pytest
from sitepath.core.context import SiteContext
from sitepath.core.tree import ContentTree, LookupOptions, Node, SecurityMode, TreeBuilder

SITECORE_ID = "{11111111-1111-1111-1111-111111111111}"


class RecordingTree:
    """Tree accessor wrapper recording every lookup.

    Lookups of paths registered in aliases return the aliased node instead
    of consulting the wrapped tree.
    """

    def __init__(self, tree: ContentTree, aliases: dict[str, Node] | None = None) -> None:
        self.tree = tree
        self.aliases = aliases or {}
        self.calls: list[tuple[str, SecurityMode]] = []

    def get_item(self, path_or_id: str, options: LookupOptions) -> Node | None:
        self.calls.append((path_or_id, options.security))
        if path_or_id in self.aliases:
            return self.aliases[path_or_id]
        return self.tree.get_item(path_or_id, options)

    def can_read(self, node: Node, user: str | None) -> bool:
        return self.tree.can_read(node, user)

    @property
    def enforced_paths(self) -> list[str]:
        """Paths looked up with security enforced, in call order."""
        return [path for path, security in self.calls if security is SecurityMode.ENFORCE]


@pytest.fixture
def tree() -> ContentTree:
    """Create a sample content tree.

    /sitecore
        /content
            /home
                /about          (display name "About Us")
                /products
                    /*
                    /chairs
            /news               (display name "Noticias")
            /private            (readers: editor)
                /report         (display name "Bericht")
            /menu               (display name "Café Menu")
    """
    builder = TreeBuilder()
    sitecore = builder.add_item("sitecore", item_id=SITECORE_ID)
    content = builder.add_item("content", sitecore)
    home = builder.add_item("home", content)
    builder.add_item("about", home, display_name="About Us")
    products = builder.add_item("products", home)
    builder.add_item("*", products)
    builder.add_item("chairs", products)
    builder.add_item("news", content, display_name="Noticias")
    private = builder.add_item("private", content, readers=frozenset({"editor"}))
    builder.add_item("report", private, display_name="Bericht")
    builder.add_item("menu", content, display_name="Café Menu")
    return builder.build()


@pytest.fixture
def recording_tree(tree: ContentTree) -> RecordingTree:
    """Wrap the sample tree to record lookups."""
    return RecordingTree(tree)


@pytest.fixture
def site() -> SiteContext:
    """Site rooted at /sitecore/content with /home as start item."""
    return SiteContext(name="website", root_path="/sitecore/content", start_item="/home")

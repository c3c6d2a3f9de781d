"""sitepath - resolve request paths to items in a content tree."""

from sitepath.core.context import RequestContext, SiteContext, SiteRegistry
from sitepath.core.resolver import ItemResolver, Resolution, ResolutionStage
from sitepath.core.tree import ContentTree, Node, TreeAccessor, TreeBuilder

__all__ = [
    "ContentTree",
    "ItemResolver",
    "Node",
    "RequestContext",
    "Resolution",
    "ResolutionStage",
    "SiteContext",
    "SiteRegistry",
    "TreeAccessor",
    "TreeBuilder",
]

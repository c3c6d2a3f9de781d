"""Application keys for type-safe app configuration access."""

from aiohttp import web

from sitepath.core.context import SiteRegistry
from sitepath.core.names import NameReplacement
from sitepath.core.resolver import ItemResolver
from sitepath.core.tree import ContentTree

resolver_key = web.AppKey("resolver", ItemResolver)
tree_key = web.AppKey("tree", ContentTree)
sites_key = web.AppKey("sites", SiteRegistry)
replacements_key = web.AppKey("replacements", tuple[NameReplacement, ...])
verbose_key = web.AppKey("verbose", bool)

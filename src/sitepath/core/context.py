"""Request and site state consumed by the resolver."""

from dataclasses import dataclass, field

from sitepath.core.names import make_path
from sitepath.core.tree import Node


@dataclass(frozen=True)
class SiteContext:
    """Configuration of the site serving a request."""

    name: str
    root_path: str
    start_item: str = ""
    host_name: str = ""
    virtual_folder: str = "/"
    start_path_override: str | None = None

    @property
    def start_path(self) -> str:
        """Full path of the site home item."""
        if self.start_path_override is not None:
            return self.start_path_override
        return make_path(self.root_path, self.start_item)

    def matches(self, host: str, path: str) -> bool:
        """Check whether a request for host and path belongs to this site."""
        if self.host_name and self.host_name.lower() != host.split(":", 1)[0].lower():
            return False
        return self._in_virtual_folder(path)

    def to_local_path(self, path: str) -> str:
        """Strip the virtual folder from a request path."""
        folder = self.virtual_folder.rstrip("/")
        if folder and self._in_virtual_folder(path):
            path = path[len(folder) :]
        return path if path.startswith("/") else f"/{path}"

    def _in_virtual_folder(self, path: str) -> bool:
        folder = self.virtual_folder.rstrip("/").lower()
        if not folder:
            return True
        lowered = path.lower()
        return lowered == folder or lowered.startswith(folder + "/")


class SiteRegistry:
    """Ordered collection of sites; the first matching site wins."""

    def __init__(self, sites: list[SiteContext]) -> None:
        self._sites = sites

    @property
    def sites(self) -> list[SiteContext]:
        return list(self._sites)

    def get(self, name: str) -> SiteContext | None:
        """Get site by name."""
        for site in self._sites:
            if site.name == name:
                return site
        return None

    def match(self, host: str, path: str) -> SiteContext | None:
        """Find the site serving a request."""
        for site in self._sites:
            if site.matches(host, path):
                return site
        return None


@dataclass
class RequestContext:
    """Per-request resolution state.

    The resolved item slot is written exactly once per request.
    """

    item_path: str
    local_path: str = ""
    user: str | None = None
    use_site_start_path: bool = True
    permission_denied: bool = False
    _item: Node | None = field(default=None, init=False, repr=False)
    _resolved: bool = field(default=False, init=False, repr=False)

    @property
    def item(self) -> Node | None:
        """Resolved item, None until resolved or when nothing matched."""
        return self._item

    @property
    def is_resolved(self) -> bool:
        """Whether the resolved item slot has been written."""
        return self._resolved

    def set_item(self, item: Node | None) -> None:
        """Write the resolved item slot.

        Raises:
            RuntimeError: If the slot was already written
        """
        if self._resolved:
            raise RuntimeError(f"Item already resolved for {self.item_path!r}")
        self._item = item
        self._resolved = True

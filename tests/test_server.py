"""Tests for server module."""

from typing import Any

import pytest
from aiohttp import web
from sitepath.app_keys import replacements_key, resolver_key, sites_key, tree_key
from sitepath.config import Config, ContentConfig, EncodingConfig, ResolverConfig, ServerConfig
from sitepath.core.context import SiteContext
from sitepath.core.resolver import ItemResolver
from sitepath.core.tree import ContentTree
from sitepath.server import USER_HEADER, build_request_context, create_app


@pytest.fixture
def test_config() -> Config:
    """Create a configuration with a catch-all site and a blog site."""
    return Config(
        server=ServerConfig(),
        content=ContentConfig(),
        resolver=ResolverConfig(),
        encoding=EncodingConfig(),
        sites=[
            SiteContext(
                name="blog",
                root_path="/sitecore/content/home",
                start_item="/products",
                virtual_folder="/blog",
            ),
            SiteContext(name="website", root_path="/sitecore/content", start_item="/home"),
        ],
    )


@pytest.fixture
def app(test_config: Config, tree: ContentTree) -> web.Application:
    return create_app(test_config, tree)


class TestBuildRequestContext:
    """Tests for build_request_context()."""

    def test__site_home__uses_start_path(self, site: SiteContext) -> None:
        request = build_request_context("/", site)

        assert request.item_path == "/sitecore/content/home"
        assert request.local_path == "/"

    def test__page__keeps_raw_path(self, site: SiteContext) -> None:
        request = build_request_context("/about%20us", site, user="editor")

        assert request.item_path == "/about%20us"
        assert request.local_path == "/about%20us"
        assert request.user == "editor"

    def test__virtual_folder__stripped_from_local_path(self) -> None:
        site = SiteContext(name="blog", root_path="/sitecore/content/blog", virtual_folder="/blog")

        request = build_request_context("/blog/posts", site)

        assert request.item_path == "/blog/posts"
        assert request.local_path == "/posts"

    def test__no_site__local_path_is_raw_path(self) -> None:
        request = build_request_context("/sitecore/content", None)

        assert request.item_path == "/sitecore/content"
        assert request.local_path == "/sitecore/content"


class TestCreateApp:
    """Tests for create_app()."""

    def test__valid_config__returns_configured_app(
        self, test_config: Config, tree: ContentTree
    ) -> None:
        app = create_app(test_config, tree)

        assert isinstance(app[resolver_key], ItemResolver)
        assert app[tree_key] is tree
        assert [site.name for site in app[sites_key].sites] == ["blog", "website"]
        assert app[replacements_key] == test_config.encoding.replacements


class TestItemEndpoint:
    """Tests for GET /{path}."""

    @pytest.mark.asyncio
    async def test__site_root__serves_home(self, aiohttp_client: Any, app: web.Application) -> None:
        client = await aiohttp_client(app)
        response = await client.get("/")

        assert response.status == 200
        data = await response.json()
        assert data["item"]["path"] == "/sitecore/content/home"
        assert [child["name"] for child in data["children"]] == ["about", "products"]

    @pytest.mark.asyncio
    async def test__children__link_below_request_path(
        self, aiohttp_client: Any, app: web.Application
    ) -> None:
        """Child links encode item names that are not valid in a URL."""
        client = await aiohttp_client(app)
        response = await client.get("/home/products")

        assert response.status == 200
        data = await response.json()
        assert [child["href"] for child in data["children"]] == [
            "/home/products/,-w-,",
            "/home/products/chairs",
        ]

    @pytest.mark.asyncio
    async def test__display_name__resolves(self, aiohttp_client: Any, app: web.Application) -> None:
        client = await aiohttp_client(app)
        response = await client.get("/Noticias")

        assert response.status == 200
        data = await response.json()
        assert data["item"]["name"] == "news"
        assert data["item"]["display_name"] == "Noticias"

    @pytest.mark.asyncio
    async def test__encoded_display_name__resolves(
        self, aiohttp_client: Any, app: web.Application
    ) -> None:
        client = await aiohttp_client(app)
        response = await client.get("/home/About%20Us")

        assert response.status == 200
        data = await response.json()
        assert data["item"]["path"] == "/sitecore/content/home/about"

    @pytest.mark.asyncio
    async def test__virtual_folder_site__resolves_from_its_root(
        self, aiohttp_client: Any, app: web.Application
    ) -> None:
        client = await aiohttp_client(app)
        response = await client.get("/blog/chairs")

        assert response.status == 200
        data = await response.json()
        assert data["item"]["path"] == "/sitecore/content/home/products/chairs"

    @pytest.mark.asyncio
    async def test__restricted_item__returns_403(
        self, aiohttp_client: Any, app: web.Application
    ) -> None:
        client = await aiohttp_client(app)
        response = await client.get("/private")

        assert response.status == 403
        data = await response.json()
        assert data["error"] == "Permission denied"
        assert data["path"] == "/private"

    @pytest.mark.asyncio
    async def test__restricted_item__served_to_reader(
        self, aiohttp_client: Any, app: web.Application
    ) -> None:
        client = await aiohttp_client(app)
        response = await client.get("/private", headers={USER_HEADER: "editor"})

        assert response.status == 200
        data = await response.json()
        assert data["item"]["path"] == "/sitecore/content/private"
        assert [child["name"] for child in data["children"]] == ["report"]

    @pytest.mark.asyncio
    async def test__hidden_children__not_listed(
        self, aiohttp_client: Any, app: web.Application
    ) -> None:
        client = await aiohttp_client(app)
        response = await client.get("/sitecore/content")

        assert response.status == 200
        data = await response.json()
        assert [child["name"] for child in data["children"]] == ["home", "news", "menu"]


class TestMissingItem:
    """Tests for requests that resolve to nothing."""

    @pytest.fixture
    def app(self, tree: ContentTree) -> web.Application:
        config = Config(
            server=ServerConfig(),
            content=ContentConfig(),
            resolver=ResolverConfig(site_start_fallback=False),
            encoding=EncodingConfig(),
            sites=[SiteContext(name="website", root_path="/sitecore/content", start_item="/home")],
        )
        return create_app(config, tree)

    @pytest.mark.asyncio
    async def test__unknown_path__returns_404(
        self, aiohttp_client: Any, app: web.Application
    ) -> None:
        client = await aiohttp_client(app)
        response = await client.get("/does/not/exist")

        assert response.status == 404
        data = await response.json()
        assert data["error"] == "Item not found"
        assert data["path"] == "/does/not/exist"

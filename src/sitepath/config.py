"""Configuration management for sitepath.

Supports TOML configuration format with auto-discovery.
"""

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path

from sitepath.core.context import SiteContext
from sitepath.core.matching import MatchingMode
from sitepath.core.names import DEFAULT_REPLACEMENTS, NameReplacement

CONFIG_FILENAME = "sitepath.toml"


@dataclass
class ServerConfig:
    """Server configuration."""

    host: str = "127.0.0.1"
    port: int = 8080


@dataclass
class ContentConfig:
    """Content tree configuration."""

    tree_file: Path | None = None


@dataclass
class ResolverConfig:
    """Item resolution configuration."""

    matching: MatchingMode = MatchingMode.EXACT
    display_name_fallback: bool = True
    site_start_fallback: bool = True
    skip_root_local_path: bool = False


@dataclass
class EncodingConfig:
    """Item name encoding configuration."""

    replacements: tuple[NameReplacement, ...] = DEFAULT_REPLACEMENTS


@dataclass
class Config:
    """Application configuration."""

    server: ServerConfig
    content: ContentConfig
    resolver: ResolverConfig
    encoding: EncodingConfig
    sites: list[SiteContext] = field(default_factory=list)
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> "Config":
        """Load configuration from file.

        If config_path is provided, loads from that file.
        Otherwise, searches for sitepath.toml in current directory and parents.

        Args:
            config_path: Optional explicit path to config file

        Returns:
            Config instance with defaults for missing sections

        Raises:
            FileNotFoundError: If explicit config_path doesn't exist
            ValueError: If configuration is invalid
        """
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return cls._load_from_file(config_path)

        discovered_path = cls._discover_config()
        if discovered_path is None:
            return cls._default()

        return cls._load_from_file(discovered_path)

    @classmethod
    def _discover_config(cls) -> Path | None:
        """Search for config file in current directory and parents."""
        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.exists():
                return candidate
            parent = current.parent
            if parent == current:
                return None
            current = parent

    @classmethod
    def _default(cls) -> "Config":
        """Create config with all defaults."""
        return cls(
            server=ServerConfig(),
            content=ContentConfig(),
            resolver=ResolverConfig(),
            encoding=EncodingConfig(),
        )

    @classmethod
    def _load_from_file(cls, path: Path) -> "Config":
        """Load configuration from a specific file.

        Args:
            path: Path to TOML configuration file

        Returns:
            Config instance

        Raises:
            ValueError: If configuration is invalid
        """
        with path.open("rb") as f:
            data = tomllib.load(f)

        config_dir = path.parent

        return cls(
            server=cls._parse_server(data.get("server")),
            content=cls._parse_content(data.get("content"), config_dir),
            resolver=cls._parse_resolver(data.get("resolver")),
            encoding=cls._parse_encoding(data.get("encoding")),
            sites=cls._parse_sites(data.get("sites")),
            config_path=path,
        )

    @classmethod
    def _parse_server(cls, data: object) -> ServerConfig:
        if data is None:
            return ServerConfig()

        if not isinstance(data, dict):
            raise ValueError("server section must be a dictionary")

        host = data.get("host", "127.0.0.1")
        if not isinstance(host, str):
            raise ValueError("server.host must be a string")

        port = data.get("port", 8080)
        if not isinstance(port, int) or isinstance(port, bool):
            raise ValueError("server.port must be an integer")

        return ServerConfig(host=host, port=port)

    @classmethod
    def _parse_content(cls, data: object, config_dir: Path) -> ContentConfig:
        """Parse content configuration section.

        Args:
            data: Raw content section data
            config_dir: Directory containing config file (for relative paths)

        Returns:
            ContentConfig instance
        """
        if data is None:
            return ContentConfig()

        if not isinstance(data, dict):
            raise ValueError("content section must be a dictionary")

        tree_file = data.get("tree_file")
        if tree_file is None:
            return ContentConfig()
        if not isinstance(tree_file, str):
            raise ValueError("content.tree_file must be a string")

        return ContentConfig(tree_file=config_dir / tree_file)

    @classmethod
    def _parse_resolver(cls, data: object) -> ResolverConfig:
        """Parse resolver configuration section.

        Args:
            data: Raw resolver section data

        Returns:
            ResolverConfig instance
        """
        if data is None:
            return ResolverConfig()

        if not isinstance(data, dict):
            raise ValueError("resolver section must be a dictionary")

        matching_raw = data.get("matching", MatchingMode.EXACT.value)
        if not isinstance(matching_raw, str):
            raise ValueError("resolver.matching must be a string")
        try:
            matching = MatchingMode(matching_raw)
        except ValueError:
            allowed = ", ".join(mode.value for mode in MatchingMode)
            raise ValueError(f"resolver.matching must be one of: {allowed}") from None

        flags: dict[str, bool] = {}
        for key in ("display_name_fallback", "site_start_fallback", "skip_root_local_path"):
            value = data.get(key, key != "skip_root_local_path")
            if not isinstance(value, bool):
                raise ValueError(f"resolver.{key} must be a boolean")
            flags[key] = value

        return ResolverConfig(matching=matching, **flags)

    @classmethod
    def _parse_encoding(cls, data: object) -> EncodingConfig:
        """Parse encoding configuration section.

        Args:
            data: Raw encoding section data

        Returns:
            EncodingConfig instance, default replacements when not set
        """
        if data is None:
            return EncodingConfig()

        if not isinstance(data, dict):
            raise ValueError("encoding section must be a dictionary")

        replacements_raw = data.get("replacements")
        if replacements_raw is None:
            return EncodingConfig()
        if not isinstance(replacements_raw, list):
            raise ValueError("encoding.replacements must be a list")

        replacements: list[NameReplacement] = []
        for item in replacements_raw:
            if not isinstance(item, dict):
                raise ValueError("encoding.replacements items must be dictionaries")
            find = item.get("find")
            replace_with = item.get("replace_with")
            if not isinstance(find, str) or not find:
                raise ValueError("encoding.replacements.find must be a non-empty string")
            if not isinstance(replace_with, str) or not replace_with:
                raise ValueError("encoding.replacements.replace_with must be a non-empty string")
            replacements.append(NameReplacement(find=find, replace_with=replace_with))

        return EncodingConfig(replacements=tuple(replacements))

    @classmethod
    def _parse_sites(cls, data: object) -> list[SiteContext]:
        """Parse sites array of tables.

        Args:
            data: Raw sites data

        Returns:
            List of SiteContext in declaration order
        """
        if data is None:
            return []

        if not isinstance(data, list):
            raise ValueError("sites must be an array of tables")

        sites: list[SiteContext] = []
        for item in data:
            if not isinstance(item, dict):
                raise ValueError("sites items must be dictionaries")

            name = item.get("name")
            if not isinstance(name, str) or not name:
                raise ValueError("sites.name must be a non-empty string")

            root_path = item.get("root_path")
            if not isinstance(root_path, str):
                raise ValueError(f"sites.{name}.root_path must be a string")

            values: dict[str, str] = {}
            for key, default in (("start_item", ""), ("host_name", ""), ("virtual_folder", "/")):
                value = item.get(key, default)
                if not isinstance(value, str):
                    raise ValueError(f"sites.{name}.{key} must be a string")
                values[key] = value

            start_path = item.get("start_path")
            if start_path is not None and not isinstance(start_path, str):
                raise ValueError(f"sites.{name}.start_path must be a string")

            sites.append(
                SiteContext(
                    name=name,
                    root_path=root_path,
                    start_path_override=start_path,
                    **values,
                )
            )

        return sites

    def with_overrides(
        self,
        *,
        host: str | None = None,
        port: int | None = None,
        tree_file: Path | None = None,
        matching: MatchingMode | None = None,
    ) -> "Config":
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. This follows
        the immutable pattern - the original Config is not modified.

        Args:
            host: Override server.host
            port: Override server.port
            tree_file: Override content.tree_file
            matching: Override resolver.matching

        Returns:
            New Config instance with overrides applied
        """
        server = self.server
        if host is not None or port is not None:
            server = replace(
                self.server,
                host=host if host is not None else self.server.host,
                port=port if port is not None else self.server.port,
            )

        content = self.content
        if tree_file is not None:
            content = replace(self.content, tree_file=tree_file)

        resolver = self.resolver
        if matching is not None:
            resolver = replace(self.resolver, matching=matching)

        return replace(self, server=server, content=content, resolver=resolver)

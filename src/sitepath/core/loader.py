"""Content tree loading from JSON fixtures.

Fixture format:
    {
        "items": [
            {
                "name": "sitecore",
                "id": "{11111111-1111-1111-1111-111111111111}",
                "children": [
                    {"name": "news", "display_name": "Noticias", "readers": ["editor"]}
                ]
            }
        ]
    }

"id", "display_name", "readers" and "children" are optional.
"""

import json
from pathlib import Path

from sitepath.core.tree import ContentTree, TreeBuilder


def load_tree(path: Path) -> ContentTree:
    """Load a content tree from a JSON file.

    Args:
        path: Path to JSON fixture

    Returns:
        ContentTree instance

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the fixture is invalid
    """
    if not path.exists():
        raise FileNotFoundError(f"Tree file not found: {path}")

    with path.open("rb") as f:
        data = json.load(f)

    return build_tree(data)


def build_tree(data: object) -> ContentTree:
    """Build a content tree from decoded fixture data."""
    if not isinstance(data, dict):
        raise ValueError("Tree fixture must be a dictionary")

    items = data.get("items", [])
    if not isinstance(items, list):
        raise ValueError("items must be a list")

    builder = TreeBuilder()
    for item in items:
        _add_item(builder, item, None, "items")
    return builder.build()


def _add_item(builder: TreeBuilder, data: object, parent_idx: int | None, location: str) -> None:
    if not isinstance(data, dict):
        raise ValueError(f"{location} entries must be dictionaries")

    name = data.get("name")
    if not isinstance(name, str) or not name:
        raise ValueError(f"{location}.name must be a non-empty string")
    location = f"{location}.{name}"

    item_id = data.get("id")
    if item_id is not None and not isinstance(item_id, str):
        raise ValueError(f"{location}.id must be a string")

    display_name = data.get("display_name", "")
    if not isinstance(display_name, str):
        raise ValueError(f"{location}.display_name must be a string")

    readers_raw = data.get("readers")
    readers: frozenset[str] | None = None
    if readers_raw is not None:
        if not isinstance(readers_raw, list):
            raise ValueError(f"{location}.readers must be a list")
        for reader in readers_raw:
            if not isinstance(reader, str):
                raise ValueError(f"{location}.readers items must be strings")
        readers = frozenset(readers_raw)

    children = data.get("children", [])
    if not isinstance(children, list):
        raise ValueError(f"{location}.children must be a list")

    try:
        idx = builder.add_item(
            name,
            parent_idx,
            display_name=display_name,
            item_id=item_id,
            readers=readers,
        )
    except ValueError as e:
        raise ValueError(f"{location}.id duplicates an earlier item: {item_id}") from e
    for child in children:
        _add_item(builder, child, idx, location)

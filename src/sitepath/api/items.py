"""Items endpoint.

Returns the item resolved for the request path as JSON. Each readable
child carries an href addressing it below the request path.
"""

from aiohttp import web

from sitepath.app_keys import replacements_key, tree_key
from sitepath.core.context import RequestContext
from sitepath.core.names import encode_name, make_path

ITEM_REQUEST = "item_request"


def create_items_routes() -> list[web.RouteDef]:
    return [
        web.get("/{path:.*}", get_item),
    ]


async def get_item(request: web.Request) -> web.Response:
    item_request: RequestContext = request[ITEM_REQUEST]
    item = item_request.item
    tree = request.app[tree_key]
    replacements = request.app[replacements_key]

    if item is None:
        if item_request.permission_denied:
            return web.json_response(
                {"error": "Permission denied", "path": item_request.item_path},
                status=403,
            )
        return web.json_response(
            {"error": "Item not found", "path": item_request.item_path},
            status=404,
        )

    base = request.rel_url.raw_path
    return web.json_response(
        {
            "item": item.to_dict(),
            "children": [
                {
                    **child.to_dict(),
                    "href": make_path(base, encode_name(child.name, replacements)),
                }
                for child in item.children
                if tree.can_read(child, item_request.user)
            ],
        },
    )

"""Scoped security bypass and security re-application.

Some lookups need to see items across permission boundaries (e.g. to
match display names). They run inside a bypass scope, and the final
answer is re-checked against the caller afterwards.

The bypass flag lives in a ContextVar, so a scope opened by one thread or
asyncio task is never visible to another.
"""

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from sitepath.core.tree import Node, TreeAccessor

logger = logging.getLogger(__name__)

T = TypeVar("T")

_security_disabled: ContextVar[bool] = ContextVar("security_disabled", default=False)


def is_security_disabled() -> bool:
    """Return True inside a security bypass scope."""
    return _security_disabled.get()


@contextmanager
def security_disabled() -> Iterator[None]:
    """Disable permission checks for the duration of the block.

    Scopes nest; leaving a scope restores the state that was active when
    it was entered, including when the block raises.
    """
    token = _security_disabled.set(True)
    try:
        yield
    finally:
        _security_disabled.reset(token)


def with_security_bypassed(action: Callable[[], T]) -> T:
    """Run action with permission checks disabled and return its result."""
    with security_disabled():
        return action()


def apply_security(
    tree: "TreeAccessor",
    node: "Node | None",
    user: str | None,
) -> "Node | None":
    """Re-check the caller's read access to a node.

    Args:
        tree: Tree that owns the node
        node: Node found with security bypassed (may be None)
        user: Principal of the current request

    Returns:
        The node if the caller may read it, None otherwise
    """
    if node is None:
        return None
    if not tree.can_read(node, user):
        logger.debug(f"Access to {node.path} denied for {user or 'anonymous'}")
        return None
    return node

"""Tests for security bypass scopes and security re-application."""

import asyncio
import threading

import pytest
from sitepath.core.security import (
    apply_security,
    is_security_disabled,
    security_disabled,
    with_security_bypassed,
)
from sitepath.core.tree import ContentTree, LookupOptions, SecurityMode


class TestSecurityDisabled:
    """Tests for security_disabled()."""

    def test__scope__disables_and_restores(self) -> None:
        assert not is_security_disabled()

        with security_disabled():
            assert is_security_disabled()

        assert not is_security_disabled()

    def test__nested_scopes__restore_outer_state(self) -> None:
        """Leaving an inner scope keeps the outer scope active."""
        with security_disabled():
            with security_disabled():
                assert is_security_disabled()
            assert is_security_disabled()

        assert not is_security_disabled()

    def test__exception__restores_state(self) -> None:
        """Security is enforced again after the block raises."""
        with pytest.raises(RuntimeError, match="boom"):
            with security_disabled():
                raise RuntimeError("boom")

        assert not is_security_disabled()

    def test__other_thread__not_affected(self) -> None:
        """A scope on one thread is invisible to other threads."""
        entered = threading.Event()
        release = threading.Event()
        observed: list[bool] = []

        def hold_scope() -> None:
            with security_disabled():
                entered.set()
                release.wait(timeout=5)

        def observe() -> None:
            observed.append(is_security_disabled())

        holder = threading.Thread(target=hold_scope)
        holder.start()
        entered.wait(timeout=5)

        observer = threading.Thread(target=observe)
        observer.start()
        observer.join()

        release.set()
        holder.join()

        assert observed == [False]

    @pytest.mark.asyncio
    async def test__other_task__not_affected(self) -> None:
        """A scope in one asyncio task is invisible to concurrent tasks."""
        entered = asyncio.Event()
        release = asyncio.Event()

        async def hold_scope() -> bool:
            with security_disabled():
                entered.set()
                await release.wait()
                return is_security_disabled()

        async def observe() -> bool:
            await entered.wait()
            result = is_security_disabled()
            release.set()
            return result

        held, observed = await asyncio.gather(hold_scope(), observe())

        assert held is True
        assert observed is False


class TestWithSecurityBypassed:
    """Tests for with_security_bypassed()."""

    def test__returns_action_result(self, tree: ContentTree) -> None:
        """Run the action with security disabled and return its result."""
        item = with_security_bypassed(lambda: tree.get_item("/sitecore/content/private"))

        assert item is not None
        assert item.name == "private"
        assert not is_security_disabled()


class TestApplySecurity:
    """Tests for apply_security()."""

    def test__readable_node__returned(self, tree: ContentTree) -> None:
        item = tree.get_item("/sitecore/content/home")

        assert apply_security(tree, item, None) is item

    def test__unreadable_node__returns_none(self, tree: ContentTree) -> None:
        """Reject nodes the caller cannot read instead of raising."""
        options = LookupOptions(security=SecurityMode.BYPASS)
        item = tree.get_item("/sitecore/content/private", options)

        assert item is not None
        assert apply_security(tree, item, None) is None
        assert apply_security(tree, item, "editor") is item

    def test__none__returns_none(self, tree: ContentTree) -> None:
        assert apply_security(tree, None, "editor") is None

"""Tests for building and caching the navigation tree."""

import pytest

from docsync.schemas.documentation import Document
from docsync.services.navigation_service import humanize, path_to_title


async def add(store, path: str, title: str | None = None, order: int = 0) -> None:
    await store.upsert(
        Document(
            path=path,
            title=title or path.rsplit("/", 1)[-1],
            content_raw="",
            content_html="",
            content_hash=f"sha-{path}",
            order=order,
        )
    )


class TestNavigationBuilder:
    """Test section and item ordering."""

    @pytest.mark.asyncio
    async def test_item_preference_beats_insertion_order(self, store, navigation):
        await add(store, "getting-started/quick-start", "Quick Start")
        await add(store, "getting-started/installation", "Installation")

        tree = await navigation.build()

        assert tree == [
            {
                "title": "Getting Started",
                "items": [
                    {"title": "Installation", "path": "getting-started/installation"},
                    {"title": "Quick Start", "path": "getting-started/quick-start"},
                ],
            }
        ]

    @pytest.mark.asyncio
    async def test_unlisted_items_follow_in_store_order(self, store, navigation):
        await add(store, "getting-started/zeta")
        await add(store, "getting-started/alpha")
        await add(store, "getting-started/quick-start")

        tree = await navigation.build()
        paths = [item["path"] for item in tree[0]["items"]]

        assert paths == [
            "getting-started/quick-start",
            "getting-started/alpha",
            "getting-started/zeta",
        ]

    @pytest.mark.asyncio
    async def test_configured_sections_first_then_discovered(self, store, navigation):
        await add(store, "query-builder/introduction")
        await add(store, "forms/introduction")
        await add(store, "custom_widgets/charts")
        await add(store, "getting-started/installation")

        tree = await navigation.build()

        assert [s["title"] for s in tree] == [
            "Getting Started",
            "Forms",
            "Custom Widgets",
            "Query Builder",
        ]

    @pytest.mark.asyncio
    async def test_empty_sections_are_omitted(self, store, navigation):
        await add(store, "forms/introduction")

        tree = await navigation.build()

        assert [s["title"] for s in tree] == ["Forms"]

    @pytest.mark.asyncio
    async def test_empty_store(self, navigation):
        assert await navigation.build() == []

    @pytest.mark.asyncio
    async def test_top_level_page_is_its_own_section(self, store, navigation):
        await add(store, "changelog", "Changelog")

        tree = await navigation.build()

        assert tree == [{"title": "Changelog", "items": [{"title": "Changelog", "path": "changelog"}]}]

    @pytest.mark.asyncio
    async def test_get_navigation_is_cached_until_invalidated(self, store, navigation):
        await add(store, "forms/introduction")
        first = await navigation.get_navigation()

        await add(store, "forms/validation")
        assert await navigation.get_navigation() == first

        await navigation.invalidate()
        refreshed = await navigation.get_navigation()
        assert len(refreshed[0]["items"]) == 2


class TestTitleHelpers:

    def test_humanize(self):
        assert humanize("query-builder") == "Query Builder"
        assert humanize("two_factor") == "Two Factor"
        assert humanize("ai") == "Ai"

    def test_path_to_title_uses_parent_for_readme(self):
        assert path_to_title("frontend/README") == "Frontend"
        assert path_to_title("forms/field-types") == "Field Types"

"""
CategoryStore 테스트
"""

import pytest

from core.ledger.types import DEFAULT_CATEGORIES
from core.storage.category_store import CategoryStore


class TestCategoryStore:
    """카테고리 CRUD 테스트"""

    @pytest.mark.asyncio
    async def test_create_and_get(self, category_store: CategoryStore, user_id: str) -> None:
        category = await category_store.create(user_id, "Food", "expense", "#EF4444", "utensils")

        fetched = await category_store.get(user_id, category.id)

        assert fetched == category
        assert fetched.color == "#EF4444"

    @pytest.mark.asyncio
    async def test_list_sorted_and_filtered(
        self, category_store: CategoryStore, user_id: str
    ) -> None:
        await category_store.create(user_id, "Salary", "income")
        await category_store.create(user_id, "Rent", "expense")
        await category_store.create(user_id, "Coffee", "expense")

        expenses = await category_store.list_by_user(user_id, "expense")
        everything = await category_store.list_by_user(user_id)

        assert [c.name for c in expenses] == ["Coffee", "Rent"]
        assert [c.name for c in everything] == ["Coffee", "Rent", "Salary"]

    @pytest.mark.asyncio
    async def test_deactivate(self, category_store: CategoryStore, user_id: str) -> None:
        category = await category_store.create(user_id, "Food", "expense")

        assert await category_store.deactivate(user_id, category.id) is True
        assert await category_store.get(user_id, category.id) is None
        assert await category_store.deactivate(user_id, category.id) is False

    @pytest.mark.asyncio
    async def test_update_metadata(self, category_store: CategoryStore, user_id: str) -> None:
        category = await category_store.create(user_id, "Food", "expense")

        updated = await category_store.update_metadata(
            user_id, category.id, {"name": "Groceries", "color": "#10B981", "icon": "cart"}
        )

        assert updated is True
        fetched = await category_store.get(user_id, category.id)
        assert fetched.name == "Groceries"
        assert fetched.color == "#10B981"
        assert fetched.icon == "cart"
        assert fetched.type == "expense"

    @pytest.mark.asyncio
    async def test_update_metadata_missing_or_other_owner(
        self, category_store: CategoryStore, user_id: str
    ) -> None:
        category = await category_store.create(user_id, "Food", "expense")

        assert await category_store.update_metadata("someone-else", category.id, {"name": "X"}) is False
        assert await category_store.update_metadata(user_id, "missing", {"name": "X"}) is False
        assert (await category_store.get(user_id, category.id)).name == "Food"

    @pytest.mark.asyncio
    async def test_update_metadata_rejects_unknown_column(
        self, category_store: CategoryStore, user_id: str
    ) -> None:
        category = await category_store.create(user_id, "Food", "expense")

        with pytest.raises(ValueError):
            await category_store.update_metadata(user_id, category.id, {"user_id": "x"})

    @pytest.mark.asyncio
    async def test_seed_defaults_once(self, category_store: CategoryStore, user_id: str) -> None:
        """소유자당 1회만 생성"""
        first = await category_store.seed_defaults(user_id)
        second = await category_store.seed_defaults(user_id)

        assert first == len(DEFAULT_CATEGORIES)
        assert second == 0
        assert len(await category_store.list_by_user(user_id)) == len(DEFAULT_CATEGORIES)

    @pytest.mark.asyncio
    async def test_seed_defaults_per_user(
        self, category_store: CategoryStore, user_id: str
    ) -> None:
        await category_store.seed_defaults(user_id)

        assert await category_store.seed_defaults("other-user") == len(DEFAULT_CATEGORIES)

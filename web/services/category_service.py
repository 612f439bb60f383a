"""
카테고리 서비스

카테고리 CRUD 및 기본 카테고리 생성
"""

from typing import Any

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.ledger.errors import InvalidArgumentError, NotFoundError
from core.ledger.models import Category
from core.storage.category_store import CategoryStore


def category_to_dict(category: Category) -> dict[str, Any]:
    """Category → 응답 dict"""
    return {
        "id": category.id,
        "name": category.name,
        "type": category.type,
        "color": category.color,
        "icon": category.icon,
        "is_active": category.is_active,
        "created_at": category.created_at,
    }


class CategoryService:
    """카테고리 서비스

    Args:
        db: SQLite 어댑터
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db
        self.store = CategoryStore(db)

    async def get_categories(
        self,
        user_id: str,
        category_type: str | None = None,
    ) -> dict[str, Any]:
        """활성 카테고리 목록 (이름순)"""
        categories = await self.store.list_by_user(user_id, category_type)
        return {
            "categories": [category_to_dict(c) for c in categories],
            "total_count": len(categories),
        }

    async def get_category(self, user_id: str, category_id: str) -> dict[str, Any]:
        category = await self.store.get(user_id, category_id)
        if category is None:
            raise NotFoundError("Category", category_id)
        return category_to_dict(category)

    async def create_category(
        self,
        user_id: str,
        name: str,
        category_type: str,
        color: str,
        icon: str,
    ) -> dict[str, Any]:
        """카테고리 생성"""
        name = name.strip()
        if not name:
            raise InvalidArgumentError("name", "name is required")

        category = await self.store.create(user_id, name, category_type, color, icon)
        return category_to_dict(category)

    async def update_category(
        self,
        user_id: str,
        category_id: str,
        changes: dict[str, Any],
    ) -> dict[str, Any]:
        """카테고리 수정 (name, type, color, icon)"""
        if not changes:
            raise InvalidArgumentError("body", "No fields to update")

        values = dict(changes)
        for field_name, value in values.items():
            if value is None:
                raise InvalidArgumentError(field_name, f"{field_name} cannot be null")
        if "name" in values:
            values["name"] = values["name"].strip()
            if not values["name"]:
                raise InvalidArgumentError("name", "name is required")

        if not await self.store.update_metadata(user_id, category_id, values):
            raise NotFoundError("Category", category_id)

        return await self.get_category(user_id, category_id)

    async def delete_category(self, user_id: str, category_id: str) -> None:
        """카테고리 비활성화 (soft delete)"""
        if not await self.store.deactivate(user_id, category_id):
            raise NotFoundError("Category", category_id)

    async def seed_defaults(self, user_id: str) -> dict[str, Any]:
        """기본 카테고리 생성 (소유자당 1회)"""
        created = await self.store.seed_defaults(user_id)
        if created:
            message = f"Created {created} default categories"
        else:
            message = "Categories already initialized"
        return {"created": created, "message": message}

"""
CategoryStore - 카테고리 저장소

categories 테이블 CRUD.
Ledger 엔진 관점에서는 읽기 전용 (존재/소유자/활성 여부만 확인).
"""

import logging
from typing import Any
from uuid import uuid4

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.constants import Defaults
from core.ledger.models import Category
from core.ledger.types import DEFAULT_CATEGORIES
from core.utils.timezone import now_epoch

logger = logging.getLogger(__name__)


class CategoryStore:
    """카테고리 저장소

    Args:
        db: SQLite 어댑터
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    async def create(
        self,
        user_id: str,
        name: str,
        category_type: str,
        color: str = Defaults.CATEGORY_COLOR,
        icon: str = Defaults.CATEGORY_ICON,
    ) -> Category:
        """카테고리 생성"""
        category_id = str(uuid4())

        async with self.db.transaction():
            await self.db.execute(
                """
                INSERT INTO categories (id, user_id, name, type, color, icon, is_active, created_at)
                VALUES (?, ?, ?, ?, ?, ?, 1, ?)
                """,
                (category_id, user_id, name, category_type, color, icon, now_epoch()),
            )

        category = await self.get(user_id, category_id)
        assert category is not None
        return category

    async def get(
        self,
        user_id: str,
        category_id: str,
        include_inactive: bool = False,
    ) -> Category | None:
        """카테고리 단건 조회 (소유자 일치 필수)"""
        sql = f"SELECT {Category.COLUMNS} FROM categories WHERE id = ? AND user_id = ?"
        if not include_inactive:
            sql += " AND is_active = 1"

        row = await self.db.fetchone(sql, (category_id, user_id))
        return Category.from_row(row) if row else None

    async def list_by_user(
        self,
        user_id: str,
        category_type: str | None = None,
    ) -> list[Category]:
        """활성 카테고리 목록 (이름순)

        Args:
            user_id: 소유자 ID
            category_type: income / expense 필터 (선택)
        """
        sql = f"""
            SELECT {Category.COLUMNS} FROM categories
            WHERE user_id = ? AND is_active = 1
        """
        params: list[str] = [user_id]
        if category_type:
            sql += " AND type = ?"
            params.append(category_type)
        sql += " ORDER BY name ASC"

        rows = await self.db.fetchall(sql, tuple(params))
        return [Category.from_row(row) for row in rows]

    async def update_metadata(
        self,
        user_id: str,
        category_id: str,
        changes: dict[str, Any],
    ) -> bool:
        """카테고리 수정 (name, type, color, icon)

        Returns:
            수정 성공 여부 (대상 없으면 False)
        """
        allowed = {"name", "type", "color", "icon"}
        unknown = set(changes) - allowed
        if unknown:
            raise ValueError(f"수정할 수 없는 카테고리 필드: {sorted(unknown)}")
        if not changes:
            return False

        assignments = ", ".join(f"{column} = ?" for column in changes)

        async with self.db.transaction():
            cursor = await self.db.execute(
                f"""
                UPDATE categories SET {assignments}
                WHERE id = ? AND user_id = ? AND is_active = 1
                """,
                (*changes.values(), category_id, user_id),
            )
            updated = cursor.rowcount == 1

        if updated:
            logger.info(f"Category updated: {category_id}", extra={"fields": sorted(changes)})
        return updated

    async def deactivate(self, user_id: str, category_id: str) -> bool:
        """카테고리 비활성화 (soft delete)

        기존 거래의 category_id는 유지.
        """
        async with self.db.transaction():
            cursor = await self.db.execute(
                """
                UPDATE categories SET is_active = 0
                WHERE id = ? AND user_id = ? AND is_active = 1
                """,
                (category_id, user_id),
            )
            deactivated = cursor.rowcount == 1

        if deactivated:
            logger.info(f"Category deactivated: {category_id}")
        return deactivated

    async def seed_defaults(self, user_id: str) -> int:
        """기본 카테고리 생성

        이미 카테고리가 하나라도 있으면 아무것도 하지 않음.

        Returns:
            생성된 카테고리 수
        """
        async with self.db.transaction():
            row = await self.db.fetchone(
                "SELECT COUNT(*) FROM categories WHERE user_id = ?",
                (user_id,),
            )
            if row and row[0] > 0:
                return 0

            now = now_epoch()
            await self.db.executemany(
                """
                INSERT INTO categories (id, user_id, name, type, color, icon, is_active, created_at)
                VALUES (?, ?, ?, ?, ?, ?, 1, ?)
                """,
                [
                    (str(uuid4()), user_id, name, category_type, color, icon, now)
                    for name, category_type, color, icon in DEFAULT_CATEGORIES
                ],
            )

        logger.info(
            f"Default categories seeded: {len(DEFAULT_CATEGORIES)}",
            extra={"user_id": user_id},
        )
        return len(DEFAULT_CATEGORIES)

"""
TransactionStore - 거래 저장소

transactions 테이블 CRUD 및 v_transaction_detail View 조회.
쓰기 메서드는 잔고를 건드리지 않으며, LedgerEngine이 연 트랜잭션 안에서 호출됨.
"""

import logging
from dataclasses import dataclass
from typing import Any

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.constants import Limits
from core.ledger.models import Transaction, TransactionDetail
from core.ledger.tags import encode_tags

logger = logging.getLogger(__name__)


# 부분 업데이트 가능한 컬럼
UPDATABLE_COLUMNS = frozenset({
    "account_id",
    "category_id",
    "type",
    "amount",
    "description",
    "date",
    "tags",
    "notes",
    "is_recurring",
    "recurring_frequency",
    "recurring_end_date",
})


@dataclass
class TransactionFilter:
    """거래 목록 필터"""

    account_id: str | None = None
    category_id: str | None = None
    type: str | None = None
    start_date: int | None = None
    end_date: int | None = None

    def to_where(self, user_id: str) -> tuple[str, list[Any]]:
        """WHERE 절과 파라미터 생성"""
        clauses = ["user_id = ?"]
        params: list[Any] = [user_id]

        if self.account_id:
            clauses.append("account_id = ?")
            params.append(self.account_id)
        if self.category_id:
            clauses.append("category_id = ?")
            params.append(self.category_id)
        if self.type:
            clauses.append("type = ?")
            params.append(self.type)
        if self.start_date is not None:
            clauses.append("date >= ?")
            params.append(self.start_date)
        if self.end_date is not None:
            clauses.append("date <= ?")
            params.append(self.end_date)

        return " AND ".join(clauses), params


def _to_db_value(column: str, value: Any) -> Any:
    if column == "tags":
        return encode_tags(value)
    if column == "is_recurring":
        return 1 if value else 0
    return value


class TransactionStore:
    """거래 저장소

    Args:
        db: SQLite 어댑터
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    async def insert(self, tx: Transaction) -> None:
        """거래 행 삽입 (트랜잭션 안에서 호출)"""
        await self.db.execute(
            f"""
            INSERT INTO transactions ({Transaction.COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                tx.id,
                tx.user_id,
                tx.account_id,
                tx.category_id,
                tx.type,
                tx.amount,
                tx.description,
                tx.date,
                encode_tags(tx.tags),
                tx.notes,
                1 if tx.is_recurring else 0,
                tx.recurring_frequency,
                tx.recurring_end_date,
                tx.idempotency_key,
                tx.created_at,
                tx.updated_at,
            ),
        )

    async def get(self, user_id: str, transaction_id: str) -> Transaction | None:
        """거래 단건 조회 (소유자 일치 필수)"""
        row = await self.db.fetchone(
            f"SELECT {Transaction.COLUMNS} FROM transactions WHERE id = ? AND user_id = ?",
            (transaction_id, user_id),
        )
        return Transaction.from_row(row) if row else None

    async def get_by_idempotency_key(
        self,
        user_id: str,
        idempotency_key: str,
    ) -> Transaction | None:
        """멱등성 키로 거래 조회"""
        row = await self.db.fetchone(
            f"""
            SELECT {Transaction.COLUMNS} FROM transactions
            WHERE user_id = ? AND idempotency_key = ?
            """,
            (user_id, idempotency_key),
        )
        return Transaction.from_row(row) if row else None

    async def get_detail(
        self,
        user_id: str,
        transaction_id: str,
    ) -> TransactionDetail | None:
        """거래 + 계좌/카테고리 표시 필드 조회

        불변식과 무관한 표시용 조회.
        """
        row = await self.db.fetchone(
            f"""
            SELECT {TransactionDetail.COLUMNS} FROM v_transaction_detail
            WHERE id = ? AND user_id = ?
            """,
            (transaction_id, user_id),
        )
        return TransactionDetail.from_row(row) if row else None

    async def list_details(
        self,
        user_id: str,
        filters: TransactionFilter | None = None,
        limit: int = Limits.LIST_DEFAULT,
        offset: int = 0,
    ) -> list[TransactionDetail]:
        """거래 목록 조회 (날짜 역순)"""
        where, params = (filters or TransactionFilter()).to_where(user_id)
        rows = await self.db.fetchall(
            f"""
            SELECT {TransactionDetail.COLUMNS} FROM v_transaction_detail
            WHERE {where}
            ORDER BY date DESC, created_at DESC
            LIMIT ? OFFSET ?
            """,
            (*params, limit, offset),
        )
        return [TransactionDetail.from_row(row) for row in rows]

    async def count(
        self,
        user_id: str,
        filters: TransactionFilter | None = None,
    ) -> int:
        """필터 조건의 거래 수"""
        where, params = (filters or TransactionFilter()).to_where(user_id)
        row = await self.db.fetchone(
            f"SELECT COUNT(*) FROM transactions WHERE {where}",
            tuple(params),
        )
        return row[0] if row else 0

    async def update_fields(
        self,
        user_id: str,
        transaction_id: str,
        values: dict[str, Any],
        updated_at: int,
    ) -> bool:
        """거래 부분 업데이트 (트랜잭션 안에서 호출)

        Args:
            values: 컬럼명 → 새 값 (tags는 목록)
            updated_at: 수정 시각 (epoch 초)

        Returns:
            수정 성공 여부
        """
        unknown = set(values) - UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"수정할 수 없는 거래 필드: {sorted(unknown)}")

        assignments = [f"{column} = ?" for column in values]
        assignments.append("updated_at = ?")
        params = [_to_db_value(column, value) for column, value in values.items()]
        params.extend([updated_at, transaction_id, user_id])

        cursor = await self.db.execute(
            f"""
            UPDATE transactions SET {", ".join(assignments)}
            WHERE id = ? AND user_id = ?
            """,
            tuple(params),
        )
        return cursor.rowcount == 1

    async def delete(self, user_id: str, transaction_id: str) -> bool:
        """거래 삭제 (트랜잭션 안에서 호출)"""
        cursor = await self.db.execute(
            "DELETE FROM transactions WHERE id = ? AND user_id = ?",
            (transaction_id, user_id),
        )
        return cursor.rowcount == 1

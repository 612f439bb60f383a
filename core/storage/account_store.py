"""
AccountStore - 계좌 저장소

accounts 테이블 CRUD.
잔고는 adjust_balance (상대 조정) / recompute_balance (재계산) 로만 변경.
직접 덮어쓰기 API는 제공하지 않음.
"""

import logging
from typing import Any
from uuid import uuid4

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.constants import Defaults
from core.ledger.errors import StorageFailureError
from core.ledger.models import Account, BalanceCheck
from core.ledger.schema import effect_sql
from core.utils.timezone import now_epoch

logger = logging.getLogger(__name__)


class AccountStore:
    """계좌 저장소

    Args:
        db: SQLite 어댑터
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    async def create(
        self,
        user_id: str,
        name: str,
        account_type: str,
        currency: str = Defaults.CURRENCY,
    ) -> Account:
        """계좌 생성 (잔고 0으로 시작)

        Args:
            user_id: 소유자 ID
            name: 표시 이름
            account_type: checking, savings, credit, investment, cash
            currency: 통화 코드

        Returns:
            생성된 Account
        """
        account_id = str(uuid4())
        now = now_epoch()

        async with self.db.transaction():
            await self.db.execute(
                """
                INSERT INTO accounts (id, user_id, name, type, balance, currency,
                                      is_active, created_at, updated_at)
                VALUES (?, ?, ?, ?, 0, ?, 1, ?, ?)
                """,
                (account_id, user_id, name, account_type, currency, now, now),
            )

        logger.info(
            f"Account created: {account_id}",
            extra={"user_id": user_id, "account_type": account_type},
        )

        account = await self.get(user_id, account_id, include_inactive=True)
        assert account is not None
        return account

    async def get(
        self,
        user_id: str,
        account_id: str,
        include_inactive: bool = False,
    ) -> Account | None:
        """계좌 단건 조회 (소유자 일치 필수)

        Args:
            user_id: 소유자 ID
            account_id: 계좌 ID
            include_inactive: 비활성 계좌 포함 여부

        Returns:
            Account 또는 None
        """
        sql = f"SELECT {Account.COLUMNS} FROM accounts WHERE id = ? AND user_id = ?"
        if not include_inactive:
            sql += " AND is_active = 1"

        row = await self.db.fetchone(sql, (account_id, user_id))
        return Account.from_row(row) if row else None

    async def list_by_user(self, user_id: str) -> list[Account]:
        """활성 계좌 목록 (최신순)"""
        rows = await self.db.fetchall(
            f"""
            SELECT {Account.COLUMNS} FROM accounts
            WHERE user_id = ? AND is_active = 1
            ORDER BY created_at DESC, name
            """,
            (user_id,),
        )
        return [Account.from_row(row) for row in rows]

    async def update_metadata(
        self,
        user_id: str,
        account_id: str,
        changes: dict[str, Any],
    ) -> bool:
        """계좌 메타데이터 수정 (name, type, currency)

        잔고는 수정 대상이 아님.

        Returns:
            수정 성공 여부 (대상 없으면 False)
        """
        allowed = {"name", "type", "currency"}
        unknown = set(changes) - allowed
        if unknown:
            raise ValueError(f"수정할 수 없는 계좌 필드: {sorted(unknown)}")
        if not changes:
            return False

        assignments = ", ".join(f"{column} = ?" for column in changes)
        params = (*changes.values(), now_epoch(), account_id, user_id)

        async with self.db.transaction():
            cursor = await self.db.execute(
                f"""
                UPDATE accounts SET {assignments}, updated_at = ?
                WHERE id = ? AND user_id = ? AND is_active = 1
                """,
                params,
            )
            updated = cursor.rowcount == 1

        return updated

    async def deactivate(self, user_id: str, account_id: str) -> bool:
        """계좌 비활성화 (soft delete)

        기존 거래는 계좌 참조를 유지하며 잔고도 그대로 보존.
        """
        async with self.db.transaction():
            cursor = await self.db.execute(
                """
                UPDATE accounts SET is_active = 0, updated_at = ?
                WHERE id = ? AND user_id = ? AND is_active = 1
                """,
                (now_epoch(), account_id, user_id),
            )
            deactivated = cursor.rowcount == 1

        if deactivated:
            logger.info(f"Account deactivated: {account_id}")
        return deactivated

    # -------------------------------------------------------------------------
    # 잔고 변경 (LedgerEngine 전용, 호출자가 연 트랜잭션 안에서 실행)
    # -------------------------------------------------------------------------

    async def adjust_balance(self, account_id: str, delta: int) -> None:
        """잔고 상대 조정 (balance = balance + delta)

        SQLite 내부에서 평가되므로 호출자 측 read-modify-write가 없음.
        반드시 db.transaction() 안에서 호출.

        Raises:
            StorageFailureError: 대상 계좌 행이 없는 경우
        """
        if not self.db.in_transaction:
            raise RuntimeError("adjust_balance must run inside db.transaction()")

        cursor = await self.db.execute(
            """
            UPDATE accounts SET balance = balance + ?, updated_at = ?
            WHERE id = ?
            """,
            (delta, now_epoch(), account_id),
        )
        if cursor.rowcount != 1:
            raise StorageFailureError(
                f"Balance adjustment affected {cursor.rowcount} rows for account {account_id}"
            )

    async def recompute_balance(self, account_id: str) -> None:
        """거래 합계로 잔고 재계산 (복구 경로)

        반드시 db.transaction() 안에서 호출.
        """
        if not self.db.in_transaction:
            raise RuntimeError("recompute_balance must run inside db.transaction()")

        cursor = await self.db.execute(
            f"""
            UPDATE accounts SET
                balance = COALESCE((
                    SELECT SUM({effect_sql("t")})
                    FROM transactions t
                    WHERE t.account_id = accounts.id
                ), 0),
                updated_at = ?
            WHERE id = ?
            """,
            (now_epoch(), account_id),
        )
        if cursor.rowcount != 1:
            raise StorageFailureError(f"Balance recompute found no account {account_id}")

    # -------------------------------------------------------------------------
    # 검증
    # -------------------------------------------------------------------------

    async def balance_check(self, account_id: str) -> BalanceCheck | None:
        """저장 잔고와 거래 합계 비교"""
        row = await self.db.fetchone(
            """
            SELECT account_id, stored_balance, expected_balance
            FROM v_account_reconciliation
            WHERE account_id = ?
            """,
            (account_id,),
        )
        if not row:
            return None
        return BalanceCheck(account_id=row[0], stored=int(row[1]), expected=int(row[2]))

    async def balance_checks(self, user_id: str | None = None) -> list[BalanceCheck]:
        """전체(또는 소유자별) 계좌 잔고 검증"""
        sql = """
            SELECT account_id, stored_balance, expected_balance
            FROM v_account_reconciliation
        """
        params: tuple[Any, ...] = ()
        if user_id is not None:
            sql += " WHERE user_id = ?"
            params = (user_id,)
        sql += " ORDER BY account_id"

        rows = await self.db.fetchall(sql, params)
        return [
            BalanceCheck(account_id=row[0], stored=int(row[1]), expected=int(row[2]))
            for row in rows
        ]

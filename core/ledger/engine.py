"""
Ledger 엔진

거래 생성/수정/삭제와 계좌 잔고 재조정을 하나의 단위로 적용.

불변식:
    account.balance == Σ effect(t)  (해당 계좌를 참조하는 모든 거래 t)

적용 순서:
    1. 입력/참조 검증 (쓰기 없음)
    2. 계좌 락 획득 (계좌 ID 정렬 순서)
    3. BEGIN IMMEDIATE 트랜잭션 안에서 거래 행 재조회 → 행 변경 → 잔고 상대 조정
    4. 커밋 후 표시용 조인 조회
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator
from uuid import uuid4

import aiosqlite

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.ledger.errors import (
    InvalidArgumentError,
    LedgerInconsistentError,
    NotFoundError,
    StorageFailureError,
)
from core.ledger.locks import AccountLockManager
from core.ledger.models import (
    BalanceCheck,
    DeleteResult,
    NewTransaction,
    Transaction,
    TransactionChanges,
    TransactionDetail,
)
from core.ledger.validation import (
    effect_of,
    parse_date,
    parse_optional_date,
    parse_recurring_frequency,
    parse_tags,
    parse_transaction_type,
    require_non_empty,
    require_positive_amount,
    resolve_account,
    resolve_category,
)
from core.storage.account_store import AccountStore
from core.storage.category_store import CategoryStore
from core.storage.transaction_store import TransactionStore
from core.utils.timezone import now_epoch

logger = logging.getLogger(__name__)


class _Relock(Exception):
    """락 획득 후 거래의 계좌가 바뀐 경우 (다시 잠그고 재시도)"""

    def __init__(self, current: Transaction):
        self.current = current


class LedgerEngine:
    """Ledger 엔진

    잔고 변경은 오직 이 클래스를 통해서만 일어남.

    Args:
        db: SQLite 어댑터 (쓰기 가능)
        locks: 프로세스 공유 계좌 락 관리자 (None이면 전용 인스턴스)
    """

    # 동시 재할당으로 계좌가 계속 바뀌는 경우 재시도 상한
    MAX_RELOCK_ATTEMPTS = 3

    def __init__(self, db: SQLiteAdapter, locks: AccountLockManager | None = None):
        self.db = db
        self.locks = locks or AccountLockManager()
        self.accounts = AccountStore(db)
        self.categories = CategoryStore(db)
        self.transactions = TransactionStore(db)

    # =========================================================================
    # 생성
    # =========================================================================

    async def create_transaction(
        self,
        user_id: str,
        new: NewTransaction,
    ) -> TransactionDetail:
        """거래 생성 + 잔고 반영

        idempotency_key가 이미 사용된 경우 아무것도 쓰지 않고 기존 거래 반환.

        Raises:
            InvalidArgumentError: 유형/금액/반복/태그 검증 실패, 멱등성 키 충돌
            NotFoundError: 계좌/카테고리 없음
            StorageFailureError: 저장 실패 (롤백 완료)
        """
        tx_type = parse_transaction_type(new.type)
        amount = require_positive_amount(new.amount)
        date = parse_date(new.date)
        frequency = parse_recurring_frequency(new.recurring_frequency)
        end_date = parse_optional_date(new.recurring_end_date, "recurring_end_date")
        tags = parse_tags(new.tags)

        await resolve_account(self.accounts, user_id, new.account_id)
        await resolve_category(self.categories, user_id, new.category_id)

        delta = effect_of(tx_type, amount)
        now = now_epoch()
        tx = Transaction(
            id=str(uuid4()),
            user_id=user_id,
            account_id=new.account_id,
            category_id=new.category_id or None,
            type=tx_type,
            amount=amount,
            description=new.description,
            date=date,
            tags=tags,
            notes=new.notes or None,
            is_recurring=bool(new.is_recurring),
            recurring_frequency=frequency,
            recurring_end_date=end_date,
            idempotency_key=new.idempotency_key or None,
            created_at=now,
            updated_at=now,
        )

        replay: Transaction | None = None
        async with self.locks.acquire(tx.account_id):
            async with self._atomic("create"):
                if tx.idempotency_key:
                    replay = await self.transactions.get_by_idempotency_key(
                        user_id, tx.idempotency_key
                    )
                if replay is None:
                    await self.transactions.insert(tx)
                    await self.accounts.adjust_balance(tx.account_id, delta)

        if replay is not None:
            self._check_replay(replay, tx)
            logger.info(
                f"Transaction create replayed: {replay.id}",
                extra={"idempotency_key": tx.idempotency_key},
            )
            return await self._detail(user_id, replay.id)

        logger.info(
            f"Transaction created: {tx.id}",
            extra={"account_id": tx.account_id, "type": tx_type, "delta": delta},
        )
        return await self._detail(user_id, tx.id)

    @staticmethod
    def _check_replay(existing: Transaction, requested: Transaction) -> None:
        """같은 멱등성 키의 재요청이 동일 거래인지 확인"""
        same = (
            existing.account_id == requested.account_id
            and existing.type == requested.type
            and existing.amount == requested.amount
        )
        if not same:
            raise InvalidArgumentError(
                "idempotency_key",
                "idempotency_key was already used for a different transaction",
            )

    # =========================================================================
    # 수정
    # =========================================================================

    async def update_transaction(
        self,
        user_id: str,
        transaction_id: str,
        changes: TransactionChanges,
    ) -> TransactionDetail:
        """거래 부분 수정 + 잔고 재조정

        amount/type/account_id 중 하나라도 요청에 있으면
        이전 계좌에서 old_delta를 되돌리고 새 계좌에 new_delta를 적용.
        메타데이터만 바뀌면 잔고는 건드리지 않음.

        Raises:
            InvalidArgumentError: 빈 요청, 유형/금액 등 검증 실패
            NotFoundError: 거래/계좌/카테고리 없음
            StorageFailureError: 저장 실패 (롤백 완료)
        """
        present = changes.present()
        if not present:
            raise InvalidArgumentError("body", "No fields to update")

        staged = self._stage(present)

        current = await self.transactions.get(user_id, transaction_id)
        if current is None:
            raise NotFoundError("Transaction", transaction_id)

        if "account_id" in staged and staged["account_id"] != current.account_id:
            await resolve_account(self.accounts, user_id, staged["account_id"])
        if staged.get("category_id"):
            await resolve_category(self.categories, user_id, staged["category_id"])

        touches_balance = changes.touches_balance()

        for _ in range(self.MAX_RELOCK_ATTEMPTS):
            try:
                await self._apply_update(user_id, current, staged, touches_balance)
                break
            except _Relock as relock:
                current = relock.current
        else:
            raise StorageFailureError(
                f"Transaction {transaction_id} kept moving between accounts, retry"
            )

        return await self._detail(user_id, transaction_id)

    def _stage(self, present: dict[str, Any]) -> dict[str, Any]:
        """요청 필드 검증 후 컬럼 값으로 변환"""
        staged: dict[str, Any] = {}
        for name, value in present.items():
            if name == "account_id":
                staged[name] = require_non_empty(value, "account_id")
            elif name == "category_id":
                staged[name] = value or None
            elif name == "type":
                staged[name] = parse_transaction_type(value)
            elif name == "amount":
                staged[name] = require_positive_amount(value)
            elif name == "date":
                if value is None:
                    raise InvalidArgumentError("date", "date cannot be null")
                staged[name] = parse_date(value)
            elif name == "tags":
                staged[name] = parse_tags(value)
            elif name == "is_recurring":
                staged[name] = bool(value)
            elif name == "recurring_frequency":
                staged[name] = parse_recurring_frequency(value)
            elif name == "recurring_end_date":
                staged[name] = parse_optional_date(value, "recurring_end_date")
            else:
                staged[name] = value
        return staged

    async def _apply_update(
        self,
        user_id: str,
        expected: Transaction,
        staged: dict[str, Any],
        touches_balance: bool,
    ) -> None:
        new_account_id = staged.get("account_id", expected.account_id)

        async with self.locks.acquire(expected.account_id, new_account_id) as held:
            async with self._atomic("update"):
                current = await self.transactions.get(user_id, expected.id)
                if current is None:
                    raise NotFoundError("Transaction", expected.id)
                if current.account_id not in held:
                    raise _Relock(current)

                old_delta = effect_of(current.type, current.amount)
                new_type = staged.get("type", current.type)
                new_amount = staged.get("amount", current.amount)
                new_delta = effect_of(new_type, new_amount)

                updated = await self.transactions.update_fields(
                    user_id, current.id, staged, now_epoch()
                )
                if not updated:
                    raise NotFoundError("Transaction", current.id)

                if touches_balance:
                    # 같은 계좌여도 되돌리기 → 적용 순서로 두 번 조정
                    await self.accounts.adjust_balance(current.account_id, -old_delta)
                    await self.accounts.adjust_balance(new_account_id, new_delta)

        if touches_balance:
            logger.info(
                f"Transaction updated: {expected.id}",
                extra={
                    "old_account_id": current.account_id,
                    "new_account_id": new_account_id,
                    "old_delta": old_delta,
                    "new_delta": new_delta,
                },
            )
        else:
            logger.info(f"Transaction metadata updated: {expected.id}")

    # =========================================================================
    # 삭제
    # =========================================================================

    async def delete_transaction(self, user_id: str, transaction_id: str) -> DeleteResult:
        """거래 삭제 + 잔고 되돌리기

        이미 삭제된 거래는 NotFound (잔고 변화 없음).

        Raises:
            NotFoundError: 거래 없음
            StorageFailureError: 저장 실패 (롤백 완료)
        """
        current = await self.transactions.get(user_id, transaction_id)
        if current is None:
            raise NotFoundError("Transaction", transaction_id)

        for _ in range(self.MAX_RELOCK_ATTEMPTS):
            try:
                result = await self._apply_delete(user_id, current)
                break
            except _Relock as relock:
                current = relock.current
        else:
            raise StorageFailureError(
                f"Transaction {transaction_id} kept moving between accounts, retry"
            )

        logger.info(
            f"Transaction deleted: {transaction_id}",
            extra={"account_id": result.account_id, "reversed_delta": result.reversed_delta},
        )
        return result

    async def _apply_delete(self, user_id: str, expected: Transaction) -> DeleteResult:
        async with self.locks.acquire(expected.account_id):
            async with self._atomic("delete"):
                current = await self.transactions.get(user_id, expected.id)
                if current is None:
                    raise NotFoundError("Transaction", expected.id)
                if current.account_id != expected.account_id:
                    raise _Relock(current)

                delta = effect_of(current.type, current.amount)
                if not await self.transactions.delete(user_id, current.id):
                    raise NotFoundError("Transaction", current.id)
                await self.accounts.adjust_balance(current.account_id, -delta)

        return DeleteResult(
            transaction_id=current.id,
            account_id=current.account_id,
            reversed_delta=delta,
        )

    # =========================================================================
    # 검증 / 복구
    # =========================================================================

    async def verify_account(self, user_id: str, account_id: str) -> BalanceCheck:
        """계좌 잔고 불변식 검증 (읽기 전용)

        Raises:
            NotFoundError: 계좌 없음 (비활성 계좌는 검증 대상)
        """
        account = await self.accounts.get(user_id, account_id, include_inactive=True)
        if account is None:
            raise NotFoundError("Account", account_id)

        async with self._storage_errors("verify"):
            check = await self.accounts.balance_check(account_id)
        if check is None:
            raise NotFoundError("Account", account_id)
        if not check.is_consistent:
            logger.warning(
                f"Ledger drift detected: {account_id}",
                extra={"stored": check.stored, "expected": check.expected},
            )
        return check

    async def ensure_consistent(self, user_id: str, account_id: str) -> BalanceCheck:
        """불일치 시 LedgerInconsistentError 발생"""
        check = await self.verify_account(user_id, account_id)
        if not check.is_consistent:
            raise LedgerInconsistentError(account_id, check.stored, check.expected)
        return check

    async def verify_all(self, user_id: str | None = None) -> list[BalanceCheck]:
        """전체(또는 소유자별) 계좌 검증 결과"""
        async with self._storage_errors("verify"):
            return await self.accounts.balance_checks(user_id)

    async def repair_account(self, user_id: str, account_id: str) -> BalanceCheck:
        """거래 합계로 잔고 재계산

        Returns:
            재계산 직전의 검증 결과
        """
        account = await self.accounts.get(user_id, account_id, include_inactive=True)
        if account is None:
            raise NotFoundError("Account", account_id)
        return await self._repair(account_id)

    async def repair_all(self) -> list[BalanceCheck]:
        """불일치 계좌 전체 복구

        Returns:
            복구된 계좌들의 복구 직전 검증 결과
        """
        repaired = []
        async with self._storage_errors("verify"):
            checks = await self.accounts.balance_checks()
        for check in checks:
            if check.is_consistent:
                continue
            before = await self._repair(check.account_id)
            if not before.is_consistent:
                repaired.append(before)
        return repaired

    async def _repair(self, account_id: str) -> BalanceCheck:
        async with self.locks.acquire(account_id):
            async with self._atomic("repair"):
                before = await self.accounts.balance_check(account_id)
                if before is None:
                    raise NotFoundError("Account", account_id)
                if not before.is_consistent:
                    await self.accounts.recompute_balance(account_id)

        if not before.is_consistent:
            logger.warning(
                f"Ledger repaired: {account_id}",
                extra={"stored": before.stored, "expected": before.expected},
            )
        return before

    # =========================================================================
    # 내부 헬퍼
    # =========================================================================

    @asynccontextmanager
    async def _atomic(self, operation: str) -> AsyncIterator[None]:
        """하나의 SQLite 트랜잭션 (실패 시 전체 롤백)

        SQLite 오류는 재시도 가능한 StorageFailureError로 변환.
        """
        try:
            async with self.db.transaction():
                yield
        except aiosqlite.Error as e:
            logger.error(f"Ledger {operation} rolled back: {e}")
            raise StorageFailureError(f"Ledger {operation} failed: {e}") from e

    @asynccontextmanager
    async def _storage_errors(self, operation: str) -> AsyncIterator[None]:
        """조회 중 SQLite 오류 → StorageFailureError"""
        try:
            yield
        except aiosqlite.Error as e:
            logger.error(f"Ledger {operation} read failed: {e}")
            raise StorageFailureError(f"Ledger {operation} failed: {e}") from e

    async def _detail(self, user_id: str, transaction_id: str) -> TransactionDetail:
        async with self._storage_errors("read"):
            detail = await self.transactions.get_detail(user_id, transaction_id)
        if detail is None:
            raise NotFoundError("Transaction", transaction_id)
        return detail

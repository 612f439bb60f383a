"""
거래 서비스

요청 모델 ↔ Ledger 엔진 변환.
금액은 Decimal → 최소 단위 정수, 날짜는 epoch 초로 변환 후 엔진에 전달.
"""

from typing import Any

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.constants import Limits
from core.ledger.engine import LedgerEngine
from core.ledger.errors import NotFoundError
from core.ledger.locks import AccountLockManager
from core.ledger.models import NewTransaction, TransactionChanges, TransactionDetail
from core.ledger.validation import (
    parse_amount,
    parse_date,
    parse_optional_date,
    parse_transaction_type,
)
from core.storage.transaction_store import TransactionFilter, TransactionStore
from core.utils.money import format_minor_units
from web.models.requests import TransactionCreateRequest, TransactionUpdateRequest


def transaction_to_dict(tx: TransactionDetail) -> dict[str, Any]:
    """TransactionDetail → 응답 dict"""
    return {
        "id": tx.id,
        "account_id": tx.account_id,
        "category_id": tx.category_id,
        "type": tx.type,
        "amount": format_minor_units(tx.amount),
        "description": tx.description,
        "date": tx.date,
        "tags": list(tx.tags),
        "notes": tx.notes,
        "is_recurring": tx.is_recurring,
        "recurring_frequency": tx.recurring_frequency,
        "recurring_end_date": tx.recurring_end_date,
        "idempotency_key": tx.idempotency_key,
        "created_at": tx.created_at,
        "updated_at": tx.updated_at,
        "account_name": tx.account_name,
        "account_type": tx.account_type,
        "category_name": tx.category_name,
        "category_color": tx.category_color,
        "category_icon": tx.category_icon,
    }


class TransactionService:
    """거래 서비스

    잔고에 영향을 주는 모든 작업은 LedgerEngine에 위임.

    Args:
        db: SQLite 어댑터
        locks: 프로세스 공유 계좌 락 관리자
    """

    def __init__(self, db: SQLiteAdapter, locks: AccountLockManager | None = None):
        self.db = db
        self.store = TransactionStore(db)
        self.engine = LedgerEngine(db, locks)

    async def get_transactions(
        self,
        user_id: str,
        account_id: str | None = None,
        category_id: str | None = None,
        tx_type: str | None = None,
        start_date: int | str | None = None,
        end_date: int | str | None = None,
        limit: int = Limits.LIST_DEFAULT,
        offset: int = 0,
    ) -> dict[str, Any]:
        """거래 목록 조회 (날짜 역순)

        Returns:
            transactions, total_count, limit, offset 포함 응답
        """
        filters = TransactionFilter(
            account_id=account_id,
            category_id=category_id,
            type=parse_transaction_type(tx_type) if tx_type else None,
            start_date=parse_optional_date(start_date, "start_date"),
            end_date=parse_optional_date(end_date, "end_date"),
        )

        transactions = await self.store.list_details(user_id, filters, limit, offset)
        total_count = await self.store.count(user_id, filters)

        return {
            "transactions": [transaction_to_dict(t) for t in transactions],
            "total_count": total_count,
            "limit": limit,
            "offset": offset,
        }

    async def get_transaction(self, user_id: str, transaction_id: str) -> dict[str, Any]:
        tx = await self.store.get_detail(user_id, transaction_id)
        if tx is None:
            raise NotFoundError("Transaction", transaction_id)
        return transaction_to_dict(tx)

    async def create_transaction(
        self,
        user_id: str,
        request: TransactionCreateRequest,
    ) -> dict[str, Any]:
        """거래 생성"""
        new = NewTransaction(
            account_id=request.account_id,
            category_id=request.category_id,
            type=request.type,
            amount=parse_amount(request.amount),
            description=request.description,
            date=parse_date(request.date),
            tags=request.tags,
            notes=request.notes,
            is_recurring=request.is_recurring,
            recurring_frequency=request.recurring_frequency,
            recurring_end_date=parse_optional_date(
                request.recurring_end_date, "recurring_end_date"
            ),
            idempotency_key=request.idempotency_key,
        )
        tx = await self.engine.create_transaction(user_id, new)
        return transaction_to_dict(tx)

    async def update_transaction(
        self,
        user_id: str,
        transaction_id: str,
        request: TransactionUpdateRequest,
    ) -> dict[str, Any]:
        """거래 부분 수정

        본문에 포함된 필드만 TransactionChanges로 전달 (미포함은 UNSET).
        """
        present = request.model_dump(exclude_unset=True)
        if present.get("amount") is not None:
            present["amount"] = parse_amount(present["amount"])

        tx = await self.engine.update_transaction(
            user_id, transaction_id, TransactionChanges(**present)
        )
        return transaction_to_dict(tx)

    async def delete_transaction(self, user_id: str, transaction_id: str) -> dict[str, Any]:
        """거래 삭제"""
        result = await self.engine.delete_transaction(user_id, transaction_id)
        return {
            "id": result.transaction_id,
            "account_id": result.account_id,
            "reversed_amount": format_minor_units(result.reversed_delta),
            "message": "Transaction deleted",
        }

"""
계좌 서비스

계좌 CRUD 및 잔고 검증/복구
"""

import logging
from typing import Any

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.ledger.engine import LedgerEngine
from core.ledger.errors import InvalidArgumentError, NotFoundError
from core.ledger.locks import AccountLockManager
from core.ledger.models import Account, BalanceCheck
from core.storage.account_store import AccountStore
from core.utils.money import format_minor_units

logger = logging.getLogger(__name__)


def account_to_dict(account: Account) -> dict[str, Any]:
    """Account → 응답 dict"""
    return {
        "id": account.id,
        "name": account.name,
        "type": account.type,
        "balance": format_minor_units(account.balance),
        "currency": account.currency,
        "is_active": account.is_active,
        "created_at": account.created_at,
        "updated_at": account.updated_at,
    }


def check_to_dict(check: BalanceCheck) -> dict[str, Any]:
    """BalanceCheck → 응답 dict"""
    return {
        "account_id": check.account_id,
        "stored_balance": format_minor_units(check.stored),
        "expected_balance": format_minor_units(check.expected),
        "drift": format_minor_units(check.drift),
        "consistent": check.is_consistent,
    }


class AccountService:
    """계좌 서비스

    잔고는 읽기/검증/복구만 가능. 변경은 거래를 통해서만.

    Args:
        db: SQLite 어댑터
        locks: 프로세스 공유 계좌 락 관리자
    """

    def __init__(self, db: SQLiteAdapter, locks: AccountLockManager | None = None):
        self.db = db
        self.store = AccountStore(db)
        self.engine = LedgerEngine(db, locks)

    async def get_accounts(self, user_id: str) -> dict[str, Any]:
        """활성 계좌 목록"""
        accounts = await self.store.list_by_user(user_id)
        return {
            "accounts": [account_to_dict(a) for a in accounts],
            "total_count": len(accounts),
        }

    async def get_account(
        self,
        user_id: str,
        account_id: str,
        verify: bool = True,
    ) -> dict[str, Any]:
        """계좌 상세

        Args:
            verify: True면 잔고 불변식 확인 (불일치 시 LedgerInconsistentError)
        """
        account = await self.store.get(user_id, account_id, include_inactive=True)
        if account is None:
            raise NotFoundError("Account", account_id)

        if verify:
            await self.engine.ensure_consistent(user_id, account_id)

        return account_to_dict(account)

    async def create_account(
        self,
        user_id: str,
        name: str,
        account_type: str,
        currency: str,
    ) -> dict[str, Any]:
        """계좌 생성 (잔고 0)"""
        name = name.strip()
        if not name:
            raise InvalidArgumentError("name", "name is required")

        account = await self.store.create(user_id, name, account_type, currency.upper())
        return account_to_dict(account)

    async def update_account(
        self,
        user_id: str,
        account_id: str,
        changes: dict[str, Any],
    ) -> dict[str, Any]:
        """계좌 메타데이터 수정 (name, type, currency)"""
        if not changes:
            raise InvalidArgumentError("body", "No fields to update")

        values = dict(changes)
        for field_name in ("name", "type", "currency"):
            if field_name in values and values[field_name] is None:
                raise InvalidArgumentError(field_name, f"{field_name} cannot be null")
        if "name" in values:
            values["name"] = values["name"].strip()
            if not values["name"]:
                raise InvalidArgumentError("name", "name is required")
        if "currency" in values:
            values["currency"] = values["currency"].upper()

        if not await self.store.update_metadata(user_id, account_id, values):
            raise NotFoundError("Account", account_id)

        account = await self.store.get(user_id, account_id)
        if account is None:
            raise NotFoundError("Account", account_id)
        return account_to_dict(account)

    async def delete_account(self, user_id: str, account_id: str) -> None:
        """계좌 비활성화 (soft delete)"""
        if not await self.store.deactivate(user_id, account_id):
            raise NotFoundError("Account", account_id)

    async def get_reconciliation(self, user_id: str, account_id: str) -> dict[str, Any]:
        """잔고 불변식 검증 결과"""
        check = await self.engine.verify_account(user_id, account_id)
        return check_to_dict(check)

    async def repair_account(self, user_id: str, account_id: str) -> dict[str, Any]:
        """거래 합계로 잔고 재계산"""
        before = await self.engine.repair_account(user_id, account_id)
        return {
            "account_id": account_id,
            "repaired": not before.is_consistent,
            "previous_balance": format_minor_units(before.stored),
            "balance": format_minor_units(before.expected),
        }

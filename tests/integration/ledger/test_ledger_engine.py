"""LedgerEngine 통합 테스트

생성/수정/삭제 후 잔고 불변식, 재할당, 멱등성, 롤백
"""

import aiosqlite
import pytest
import pytest_asyncio

from core.ledger.engine import LedgerEngine
from core.ledger.errors import (
    InvalidArgumentError,
    LedgerInconsistentError,
    NotFoundError,
    StorageFailureError,
)
from core.ledger.models import Account, NewTransaction, TransactionChanges
from core.storage.account_store import AccountStore
from core.storage.category_store import CategoryStore

DATE = 1700000000


def income(account_id: str, amount: int, **kwargs) -> NewTransaction:
    return NewTransaction(account_id=account_id, type="income", amount=amount, date=DATE, **kwargs)


def expense(account_id: str, amount: int, **kwargs) -> NewTransaction:
    return NewTransaction(account_id=account_id, type="expense", amount=amount, date=DATE, **kwargs)


async def balance_of(engine: LedgerEngine, user_id: str, account_id: str) -> int:
    account = await engine.accounts.get(user_id, account_id, include_inactive=True)
    assert account is not None
    return account.balance


async def assert_invariant(engine: LedgerEngine) -> None:
    for check in await engine.verify_all():
        assert check.is_consistent, check


@pytest_asyncio.fixture
async def account_a(account_store: AccountStore, user_id: str) -> Account:
    return await account_store.create(user_id, "A", "checking")


@pytest_asyncio.fixture
async def account_b(account_store: AccountStore, user_id: str) -> Account:
    return await account_store.create(user_id, "B", "savings")


class TestCreate:
    """거래 생성"""

    @pytest.mark.asyncio
    async def test_income_increases_balance(
        self, engine: LedgerEngine, account_a: Account, user_id: str
    ) -> None:
        tx = await engine.create_transaction(user_id, income(account_a.id, 20000))

        assert tx.amount == 20000
        assert tx.account_name == "A"
        assert await balance_of(engine, user_id, account_a.id) == 20000

    @pytest.mark.asyncio
    async def test_expense_decreases_balance(
        self, engine: LedgerEngine, account_a: Account, user_id: str
    ) -> None:
        await engine.create_transaction(user_id, expense(account_a.id, 4250))

        assert await balance_of(engine, user_id, account_a.id) == -4250

    @pytest.mark.asyncio
    async def test_transfer_has_no_effect(
        self, engine: LedgerEngine, account_a: Account, user_id: str
    ) -> None:
        """transfer는 라벨 전용"""
        tx = await engine.create_transaction(
            user_id,
            NewTransaction(account_id=account_a.id, type="transfer", amount=999, date=DATE),
        )

        assert tx.type == "transfer"
        assert await balance_of(engine, user_id, account_a.id) == 0

    @pytest.mark.asyncio
    async def test_round_trip(
        self,
        engine: LedgerEngine,
        account_a: Account,
        category_store: CategoryStore,
        user_id: str,
    ) -> None:
        """create → get 동일 값"""
        category = await category_store.create(user_id, "Food", "expense")
        created = await engine.create_transaction(
            user_id,
            expense(
                account_a.id,
                1234,
                category_id=category.id,
                description="Lunch",
                tags=[" food ", "weekday"],
                notes="with team",
                is_recurring=True,
                recurring_frequency="weekly",
            ),
        )

        fetched = await engine.transactions.get_detail(user_id, created.id)

        assert fetched == created
        assert fetched.tags == ["food", "weekday"]
        assert fetched.category_name == "Food"
        assert fetched.recurring_frequency == "weekly"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides, field_name",
        [
            ({"type": "refund"}, "type"),
            ({"amount": 0}, "amount"),
            ({"amount": -5}, "amount"),
            ({"recurring_frequency": "hourly"}, "recurring_frequency"),
            ({"tags": "food"}, "tags"),
            ({"account_id": ""}, "account_id"),
        ],
    )
    async def test_invalid_argument_writes_nothing(
        self,
        engine: LedgerEngine,
        account_a: Account,
        user_id: str,
        overrides: dict,
        field_name: str,
    ) -> None:
        values = {"account_id": account_a.id, "type": "income", "amount": 100, "date": DATE}
        values.update(overrides)

        with pytest.raises(InvalidArgumentError) as exc_info:
            await engine.create_transaction(user_id, NewTransaction(**values))

        assert exc_info.value.field == field_name
        assert await engine.transactions.count(user_id) == 0
        assert await balance_of(engine, user_id, account_a.id) == 0

    @pytest.mark.asyncio
    async def test_unknown_account(self, engine: LedgerEngine, user_id: str) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            await engine.create_transaction(user_id, income("missing", 100))

        assert exc_info.value.entity == "Account"

    @pytest.mark.asyncio
    async def test_other_owner_account(
        self, engine: LedgerEngine, account_a: Account
    ) -> None:
        """다른 소유자의 계좌는 NotFound"""
        with pytest.raises(NotFoundError):
            await engine.create_transaction("intruder", income(account_a.id, 100))

    @pytest.mark.asyncio
    async def test_inactive_account(
        self,
        engine: LedgerEngine,
        account_store: AccountStore,
        account_a: Account,
        user_id: str,
    ) -> None:
        await account_store.deactivate(user_id, account_a.id)

        with pytest.raises(NotFoundError):
            await engine.create_transaction(user_id, income(account_a.id, 100))

    @pytest.mark.asyncio
    async def test_unknown_category(
        self, engine: LedgerEngine, account_a: Account, user_id: str
    ) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            await engine.create_transaction(
                user_id, income(account_a.id, 100, category_id="missing")
            )

        assert exc_info.value.entity == "Category"
        assert await balance_of(engine, user_id, account_a.id) == 0


class TestIdempotency:
    """멱등성 키"""

    @pytest.mark.asyncio
    async def test_same_key_applies_once(
        self, engine: LedgerEngine, account_a: Account, user_id: str
    ) -> None:
        first = await engine.create_transaction(
            user_id, income(account_a.id, 500, idempotency_key="pay-1")
        )
        second = await engine.create_transaction(
            user_id, income(account_a.id, 500, idempotency_key="pay-1")
        )

        assert second.id == first.id
        assert await engine.transactions.count(user_id) == 1
        assert await balance_of(engine, user_id, account_a.id) == 500

    @pytest.mark.asyncio
    async def test_same_key_different_request(
        self, engine: LedgerEngine, account_a: Account, user_id: str
    ) -> None:
        await engine.create_transaction(user_id, income(account_a.id, 500, idempotency_key="k"))

        with pytest.raises(InvalidArgumentError) as exc_info:
            await engine.create_transaction(
                user_id, income(account_a.id, 700, idempotency_key="k")
            )

        assert exc_info.value.field == "idempotency_key"
        assert await balance_of(engine, user_id, account_a.id) == 500

    @pytest.mark.asyncio
    async def test_keys_are_per_owner(
        self,
        engine: LedgerEngine,
        account_store: AccountStore,
        account_a: Account,
        user_id: str,
    ) -> None:
        other = await account_store.create("other-user", "O", "cash")

        await engine.create_transaction(user_id, income(account_a.id, 100, idempotency_key="k"))
        await engine.create_transaction("other-user", income(other.id, 100, idempotency_key="k"))

        assert await balance_of(engine, "other-user", other.id) == 100


class TestUpdate:
    """거래 수정"""

    @pytest.mark.asyncio
    async def test_scenarios(
        self, engine: LedgerEngine, account_a: Account, user_id: str
    ) -> None:
        """income 200 → amount 150 → expense → 삭제"""
        tx = await engine.create_transaction(user_id, income(account_a.id, 20000))
        assert await balance_of(engine, user_id, account_a.id) == 20000

        await engine.update_transaction(user_id, tx.id, TransactionChanges(amount=15000))
        assert await balance_of(engine, user_id, account_a.id) == 15000

        updated = await engine.update_transaction(
            user_id, tx.id, TransactionChanges(type="expense")
        )
        assert updated.type == "expense"
        assert updated.amount == 15000
        assert await balance_of(engine, user_id, account_a.id) == -15000

        await engine.delete_transaction(user_id, tx.id)
        assert await balance_of(engine, user_id, account_a.id) == 0
        await assert_invariant(engine)

    @pytest.mark.asyncio
    async def test_reassignment(
        self,
        engine: LedgerEngine,
        account_a: Account,
        account_b: Account,
        user_id: str,
    ) -> None:
        """A=100, B=50, A의 expense 30을 B로 이동 → A=100, B=20"""
        await engine.create_transaction(user_id, income(account_a.id, 13000))
        await engine.create_transaction(user_id, income(account_b.id, 5000))
        tx = await engine.create_transaction(user_id, expense(account_a.id, 3000))
        assert await balance_of(engine, user_id, account_a.id) == 10000

        moved = await engine.update_transaction(
            user_id, tx.id, TransactionChanges(account_id=account_b.id)
        )

        assert moved.account_id == account_b.id
        assert moved.account_name == "B"
        assert await balance_of(engine, user_id, account_a.id) == 13000
        assert await balance_of(engine, user_id, account_b.id) == 2000
        await assert_invariant(engine)

    @pytest.mark.asyncio
    async def test_reassignment_with_amount_and_type(
        self,
        engine: LedgerEngine,
        account_a: Account,
        account_b: Account,
        user_id: str,
    ) -> None:
        tx = await engine.create_transaction(user_id, expense(account_a.id, 3000))

        await engine.update_transaction(
            user_id,
            tx.id,
            TransactionChanges(account_id=account_b.id, type="income", amount=800),
        )

        assert await balance_of(engine, user_id, account_a.id) == 0
        assert await balance_of(engine, user_id, account_b.id) == 800
        await assert_invariant(engine)

    @pytest.mark.asyncio
    async def test_metadata_is_balance_neutral(
        self, engine: LedgerEngine, account_a: Account, user_id: str
    ) -> None:
        tx = await engine.create_transaction(user_id, income(account_a.id, 1000))

        updated = await engine.update_transaction(
            user_id,
            tx.id,
            TransactionChanges(
                description="bonus",
                notes="Q4",
                tags=["work"],
                date=DATE + 86400,
            ),
        )

        assert updated.description == "bonus"
        assert updated.tags == ["work"]
        assert updated.date == DATE + 86400
        assert await balance_of(engine, user_id, account_a.id) == 1000

    @pytest.mark.asyncio
    async def test_identical_update_is_noop_for_balance(
        self, engine: LedgerEngine, account_a: Account, user_id: str
    ) -> None:
        """같은 값 재적용은 잔고 변화 없음"""
        tx = await engine.create_transaction(user_id, income(account_a.id, 1000))
        changes = TransactionChanges(amount=700, type="income", account_id=account_a.id)

        await engine.update_transaction(user_id, tx.id, changes)
        await engine.update_transaction(user_id, tx.id, changes)

        assert await balance_of(engine, user_id, account_a.id) == 700

    @pytest.mark.asyncio
    async def test_clear_category(
        self,
        engine: LedgerEngine,
        account_a: Account,
        category_store: CategoryStore,
        user_id: str,
    ) -> None:
        """명시적 null로 카테고리 해제"""
        category = await category_store.create(user_id, "Food", "expense")
        tx = await engine.create_transaction(
            user_id, expense(account_a.id, 100, category_id=category.id)
        )

        updated = await engine.update_transaction(
            user_id, tx.id, TransactionChanges(category_id=None)
        )

        assert updated.category_id is None
        assert updated.category_name is None

    @pytest.mark.asyncio
    async def test_empty_update(
        self, engine: LedgerEngine, account_a: Account, user_id: str
    ) -> None:
        tx = await engine.create_transaction(user_id, income(account_a.id, 100))

        with pytest.raises(InvalidArgumentError):
            await engine.update_transaction(user_id, tx.id, TransactionChanges())

    @pytest.mark.asyncio
    async def test_invalid_values_write_nothing(
        self, engine: LedgerEngine, account_a: Account, user_id: str
    ) -> None:
        tx = await engine.create_transaction(user_id, income(account_a.id, 100))

        with pytest.raises(InvalidArgumentError) as exc_info:
            await engine.update_transaction(
                user_id, tx.id, TransactionChanges(description="x", amount=0)
            )

        assert exc_info.value.field == "amount"
        unchanged = await engine.transactions.get(user_id, tx.id)
        assert unchanged.description is None
        assert await balance_of(engine, user_id, account_a.id) == 100

    @pytest.mark.asyncio
    async def test_null_account_rejected(
        self, engine: LedgerEngine, account_a: Account, user_id: str
    ) -> None:
        tx = await engine.create_transaction(user_id, income(account_a.id, 100))

        with pytest.raises(InvalidArgumentError) as exc_info:
            await engine.update_transaction(user_id, tx.id, TransactionChanges(account_id=None))

        assert exc_info.value.field == "account_id"

    @pytest.mark.asyncio
    async def test_unknown_target_account(
        self, engine: LedgerEngine, account_a: Account, user_id: str
    ) -> None:
        tx = await engine.create_transaction(user_id, income(account_a.id, 100))

        with pytest.raises(NotFoundError):
            await engine.update_transaction(
                user_id, tx.id, TransactionChanges(account_id="missing")
            )

        assert await balance_of(engine, user_id, account_a.id) == 100

    @pytest.mark.asyncio
    async def test_missing_transaction(self, engine: LedgerEngine, user_id: str) -> None:
        with pytest.raises(NotFoundError):
            await engine.update_transaction(user_id, "missing", TransactionChanges(amount=1))

    @pytest.mark.asyncio
    async def test_other_owner_transaction(
        self, engine: LedgerEngine, account_a: Account, user_id: str
    ) -> None:
        tx = await engine.create_transaction(user_id, income(account_a.id, 100))

        with pytest.raises(NotFoundError):
            await engine.update_transaction("intruder", tx.id, TransactionChanges(amount=1))


class TestDelete:
    """거래 삭제"""

    @pytest.mark.asyncio
    async def test_delete_reverses_effect(
        self, engine: LedgerEngine, account_a: Account, user_id: str
    ) -> None:
        await engine.create_transaction(user_id, income(account_a.id, 1000))
        tx = await engine.create_transaction(user_id, expense(account_a.id, 300))

        result = await engine.delete_transaction(user_id, tx.id)

        assert result.account_id == account_a.id
        assert result.reversed_delta == -300
        assert await balance_of(engine, user_id, account_a.id) == 1000

    @pytest.mark.asyncio
    async def test_delete_twice(
        self, engine: LedgerEngine, account_a: Account, user_id: str
    ) -> None:
        """두 번째 삭제는 NotFound, 잔고 변화 없음"""
        tx = await engine.create_transaction(user_id, income(account_a.id, 1000))
        await engine.delete_transaction(user_id, tx.id)

        with pytest.raises(NotFoundError):
            await engine.delete_transaction(user_id, tx.id)

        assert await balance_of(engine, user_id, account_a.id) == 0

    @pytest.mark.asyncio
    async def test_delete_on_inactive_account(
        self,
        engine: LedgerEngine,
        account_store: AccountStore,
        account_a: Account,
        user_id: str,
    ) -> None:
        """비활성 계좌의 기존 거래도 삭제 가능 (잔고 유지 관리)"""
        tx = await engine.create_transaction(user_id, income(account_a.id, 1000))
        await account_store.deactivate(user_id, account_a.id)

        await engine.delete_transaction(user_id, tx.id)

        assert await balance_of(engine, user_id, account_a.id) == 0


class TestRollback:
    """원자성 (행 변경과 잔고 조정은 함께 커밋되거나 함께 취소)"""

    @pytest.mark.asyncio
    async def test_create_rolls_back_on_storage_error(
        self,
        engine: LedgerEngine,
        account_a: Account,
        user_id: str,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        async def broken_adjust(account_id: str, delta: int) -> None:
            raise aiosqlite.OperationalError("disk I/O error")

        monkeypatch.setattr(engine.accounts, "adjust_balance", broken_adjust)

        with pytest.raises(StorageFailureError) as exc_info:
            await engine.create_transaction(user_id, income(account_a.id, 1000))

        assert exc_info.value.retryable is True
        assert await engine.transactions.count(user_id) == 0
        assert await balance_of(engine, user_id, account_a.id) == 0

    @pytest.mark.asyncio
    async def test_update_rolls_back_on_error(
        self,
        engine: LedgerEngine,
        account_a: Account,
        account_b: Account,
        user_id: str,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """첫 번째 조정 후 실패해도 이전 상태 유지"""
        tx = await engine.create_transaction(user_id, expense(account_a.id, 300))
        original_adjust = engine.accounts.adjust_balance
        calls = 0

        async def flaky_adjust(account_id: str, delta: int) -> None:
            nonlocal calls
            calls += 1
            if calls == 2:
                raise RuntimeError("crash between legs")
            await original_adjust(account_id, delta)

        monkeypatch.setattr(engine.accounts, "adjust_balance", flaky_adjust)

        with pytest.raises(RuntimeError):
            await engine.update_transaction(
                user_id, tx.id, TransactionChanges(account_id=account_b.id)
            )

        unchanged = await engine.transactions.get(user_id, tx.id)
        assert unchanged.account_id == account_a.id
        assert await balance_of(engine, user_id, account_a.id) == -300
        assert await balance_of(engine, user_id, account_b.id) == 0

    @pytest.mark.asyncio
    async def test_delete_rolls_back_on_error(
        self,
        engine: LedgerEngine,
        account_a: Account,
        user_id: str,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        tx = await engine.create_transaction(user_id, income(account_a.id, 1000))

        async def broken_adjust(account_id: str, delta: int) -> None:
            raise aiosqlite.OperationalError("database is locked")

        monkeypatch.setattr(engine.accounts, "adjust_balance", broken_adjust)

        with pytest.raises(StorageFailureError):
            await engine.delete_transaction(user_id, tx.id)

        assert await engine.transactions.get(user_id, tx.id) is not None
        assert await balance_of(engine, user_id, account_a.id) == 1000


class TestVerifyAndRepair:
    """잔고 검증 / 복구"""

    async def _corrupt(self, engine: LedgerEngine, account_id: str, balance: int) -> None:
        async with engine.db.transaction():
            await engine.db.execute(
                "UPDATE accounts SET balance = ? WHERE id = ?",
                (balance, account_id),
            )

    @pytest.mark.asyncio
    async def test_verify_consistent(
        self, engine: LedgerEngine, account_a: Account, user_id: str
    ) -> None:
        await engine.create_transaction(user_id, income(account_a.id, 1000))

        check = await engine.verify_account(user_id, account_a.id)

        assert check.is_consistent
        assert check.expected == 1000

    @pytest.mark.asyncio
    async def test_detect_and_repair(
        self, engine: LedgerEngine, account_a: Account, user_id: str
    ) -> None:
        """수동 변조된 잔고 감지 후 재계산"""
        await engine.create_transaction(user_id, income(account_a.id, 1000))
        await engine.create_transaction(user_id, expense(account_a.id, 250))
        await self._corrupt(engine, account_a.id, 99999)

        with pytest.raises(LedgerInconsistentError) as exc_info:
            await engine.ensure_consistent(user_id, account_a.id)
        assert exc_info.value.stored == 99999
        assert exc_info.value.expected == 750

        before = await engine.repair_account(user_id, account_a.id)

        assert before.drift == 99999 - 750
        assert await balance_of(engine, user_id, account_a.id) == 750
        await engine.ensure_consistent(user_id, account_a.id)

    @pytest.mark.asyncio
    async def test_repair_consistent_account_is_noop(
        self, engine: LedgerEngine, account_a: Account, user_id: str
    ) -> None:
        await engine.create_transaction(user_id, income(account_a.id, 1000))

        before = await engine.repair_account(user_id, account_a.id)

        assert before.is_consistent
        assert await balance_of(engine, user_id, account_a.id) == 1000

    @pytest.mark.asyncio
    async def test_repair_all(
        self,
        engine: LedgerEngine,
        account_a: Account,
        account_b: Account,
        user_id: str,
    ) -> None:
        await engine.create_transaction(user_id, income(account_a.id, 1000))
        await engine.create_transaction(user_id, income(account_b.id, 500))
        await self._corrupt(engine, account_b.id, 0)

        repaired = await engine.repair_all()

        assert [c.account_id for c in repaired] == [account_b.id]
        await assert_invariant(engine)

    @pytest.mark.asyncio
    async def test_verify_unknown_account(self, engine: LedgerEngine, user_id: str) -> None:
        with pytest.raises(NotFoundError):
            await engine.verify_account(user_id, "missing")

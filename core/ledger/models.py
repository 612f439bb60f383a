"""
Ledger 데이터 모델

DB 행 ↔ dataclass 변환. 금액/잔고는 최소 단위 정수.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any

from core.ledger.tags import decode_tags
from core.ledger.types import UNSET


@dataclass
class Account:
    """계좌"""

    id: str
    user_id: str
    name: str
    type: str
    balance: int
    currency: str
    is_active: bool
    created_at: int
    updated_at: int

    COLUMNS = (
        "id, user_id, name, type, balance, currency, is_active, created_at, updated_at"
    )

    @classmethod
    def from_row(cls, row: tuple[Any, ...]) -> Account:
        return cls(
            id=row[0],
            user_id=row[1],
            name=row[2],
            type=row[3],
            balance=int(row[4]),
            currency=row[5],
            is_active=bool(row[6]),
            created_at=row[7],
            updated_at=row[8],
        )


@dataclass
class Category:
    """카테고리"""

    id: str
    user_id: str
    name: str
    type: str
    color: str
    icon: str
    is_active: bool
    created_at: int

    COLUMNS = "id, user_id, name, type, color, icon, is_active, created_at"

    @classmethod
    def from_row(cls, row: tuple[Any, ...]) -> Category:
        return cls(
            id=row[0],
            user_id=row[1],
            name=row[2],
            type=row[3],
            color=row[4],
            icon=row[5],
            is_active=bool(row[6]),
            created_at=row[7],
        )


@dataclass
class Transaction:
    """거래

    amount는 항상 양수. 부호는 type에서 결정.
    """

    id: str
    user_id: str
    account_id: str
    category_id: str | None
    type: str
    amount: int
    description: str | None
    date: int
    tags: list[str]
    notes: str | None
    is_recurring: bool
    recurring_frequency: str | None
    recurring_end_date: int | None
    idempotency_key: str | None
    created_at: int
    updated_at: int

    COLUMNS = (
        "id, user_id, account_id, category_id, type, amount, description, date, "
        "tags, notes, is_recurring, recurring_frequency, recurring_end_date, "
        "idempotency_key, created_at, updated_at"
    )

    @classmethod
    def from_row(cls, row: tuple[Any, ...]) -> Transaction:
        return cls(
            id=row[0],
            user_id=row[1],
            account_id=row[2],
            category_id=row[3],
            type=row[4],
            amount=int(row[5]),
            description=row[6],
            date=row[7],
            tags=decode_tags(row[8]),
            notes=row[9],
            is_recurring=bool(row[10]),
            recurring_frequency=row[11],
            recurring_end_date=row[12],
            idempotency_key=row[13],
            created_at=row[14],
            updated_at=row[15],
        )


@dataclass
class TransactionDetail(Transaction):
    """거래 + 표시용 조인 필드 (v_transaction_detail)"""

    account_name: str | None = None
    account_type: str | None = None
    category_name: str | None = None
    category_color: str | None = None
    category_icon: str | None = None

    COLUMNS = (
        Transaction.COLUMNS
        + ", account_name, account_type, category_name, category_color, category_icon"
    )

    @classmethod
    def from_row(cls, row: tuple[Any, ...]) -> TransactionDetail:
        base = Transaction.from_row(row[:16])
        return cls(
            **{f.name: getattr(base, f.name) for f in fields(Transaction)},
            account_name=row[16],
            account_type=row[17],
            category_name=row[18],
            category_color=row[19],
            category_icon=row[20],
        )


@dataclass
class NewTransaction:
    """거래 생성 입력

    amount는 최소 단위 정수, date는 epoch 초 (경계에서 변환 완료된 값).
    """

    account_id: str
    type: str
    amount: int
    date: int
    category_id: str | None = None
    description: str | None = None
    tags: list[str] = field(default_factory=list)
    notes: str | None = None
    is_recurring: bool = False
    recurring_frequency: str | None = None
    recurring_end_date: int | None = None
    idempotency_key: str | None = None


@dataclass
class TransactionChanges:
    """거래 부분 업데이트 입력

    UNSET: 변경 없음 / None: null로 설정 (category_id 등)
    """

    account_id: Any = UNSET
    category_id: Any = UNSET
    type: Any = UNSET
    amount: Any = UNSET
    description: Any = UNSET
    date: Any = UNSET
    tags: Any = UNSET
    notes: Any = UNSET
    is_recurring: Any = UNSET
    recurring_frequency: Any = UNSET
    recurring_end_date: Any = UNSET

    # 잔고에 영향을 주는 필드
    BALANCE_FIELDS = ("account_id", "type", "amount")

    def present(self) -> dict[str, Any]:
        """요청에 포함된 필드만 반환"""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not UNSET
        }

    def touches_balance(self) -> bool:
        """잔고 재조정이 필요한 필드 포함 여부"""
        return any(getattr(self, name) is not UNSET for name in self.BALANCE_FIELDS)


@dataclass(frozen=True)
class BalanceCheck:
    """잔고 검증 결과

    expected = Σ effect(t), drift = stored - expected
    """

    account_id: str
    stored: int
    expected: int

    @property
    def drift(self) -> int:
        return self.stored - self.expected

    @property
    def is_consistent(self) -> bool:
        return self.drift == 0


@dataclass(frozen=True)
class DeleteResult:
    """거래 삭제 결과"""

    transaction_id: str
    account_id: str
    reversed_delta: int

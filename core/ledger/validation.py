"""
참조 검증 및 입력 검증 헬퍼

부수효과 없는 순수 조회/검증. 모든 실패는 쓰기 이전에 발생.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from core.constants import Limits
from core.ledger.errors import InvalidArgumentError, NotFoundError
from core.ledger.models import Account, Category
from core.ledger.tags import TagsFormatError, normalize_tags
from core.types import TransactionType, RecurringFrequency
from core.utils.money import format_minor_units, to_minor_units
from core.utils.timezone import to_epoch_seconds

if TYPE_CHECKING:
    from core.storage.account_store import AccountStore
    from core.storage.category_store import CategoryStore


def effect_of(tx_type: str, amount: int) -> int:
    """거래 1건의 잔고 효과 (부호 있는 delta)

    income → +amount, expense → -amount, transfer → 0
    """
    if tx_type == TransactionType.INCOME.value:
        return amount
    if tx_type == TransactionType.EXPENSE.value:
        return -amount
    return 0


# -------------------------------------------------------------------------
# 참조 검증
# -------------------------------------------------------------------------


async def resolve_account(
    accounts: AccountStore,
    user_id: str,
    account_id: str | None,
) -> Account:
    """계좌 조회 (존재 + 소유자 + 활성)

    Raises:
        InvalidArgumentError: account_id 누락
        NotFoundError: 없거나 소유자 불일치 또는 비활성
    """
    if not account_id:
        raise InvalidArgumentError("account_id", "account_id is required")

    account = await accounts.get(user_id, account_id)
    if account is None:
        raise NotFoundError("Account", account_id)
    return account


async def resolve_category(
    categories: CategoryStore,
    user_id: str,
    category_id: str | None,
) -> Category | None:
    """카테고리 조회 (id 없으면 검증 생략)

    Raises:
        NotFoundError: 없거나 소유자 불일치 또는 비활성
    """
    if not category_id:
        return None

    category = await categories.get(user_id, category_id)
    if category is None:
        raise NotFoundError("Category", category_id)
    return category


# -------------------------------------------------------------------------
# 값 검증
# -------------------------------------------------------------------------


def parse_transaction_type(value: Any) -> str:
    """거래 유형 검증"""
    try:
        return TransactionType(value).value
    except ValueError:
        valid = ", ".join(t.value for t in TransactionType)
        raise InvalidArgumentError("type", f"type must be one of: {valid}") from None


def require_positive_amount(value: Any) -> int:
    """금액 검증 (최소 단위 정수, 0 < amount <= Limits.AMOUNT_MAX)"""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError("amount", "amount must be an integer number of minor units")
    if value <= 0:
        raise InvalidArgumentError("amount", "amount must be greater than 0")
    if value > Limits.AMOUNT_MAX:
        raise InvalidArgumentError(
            "amount", f"amount must not exceed {format_minor_units(Limits.AMOUNT_MAX)}"
        )
    return value


def parse_amount(value: Any) -> int:
    """외부 입력 금액 (Decimal/문자열/숫자) → 양수 최소 단위 정수"""
    try:
        minor = to_minor_units(value)
    except ValueError as e:
        raise InvalidArgumentError("amount", str(e)) from e
    return require_positive_amount(minor)


def parse_date(value: Any, field: str = "date") -> int:
    """날짜 → epoch 초"""
    try:
        return to_epoch_seconds(value)
    except ValueError as e:
        raise InvalidArgumentError(field, str(e)) from e


def parse_optional_date(value: Any, field: str) -> int | None:
    if value is None or value == "":
        return None
    return parse_date(value, field)


def parse_recurring_frequency(value: Any) -> str | None:
    """반복 주기 검증 (None 허용)"""
    if value is None or value == "":
        return None
    try:
        return RecurringFrequency(value).value
    except ValueError:
        valid = ", ".join(f.value for f in RecurringFrequency)
        raise InvalidArgumentError(
            "recurring_frequency", f"recurring_frequency must be one of: {valid}"
        ) from None


def parse_tags(value: Any) -> list[str]:
    """태그 검증"""
    try:
        return normalize_tags(value)
    except TagsFormatError as e:
        raise InvalidArgumentError("tags", str(e)) from e


def require_non_empty(value: Any, field: str) -> str:
    """필수 문자열 검증"""
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgumentError(field, f"{field} is required")
    return value.strip()

"""
요청 스키마 (Pydantic)

Web API 요청 데이터 검증

금액은 Decimal (소수점 2자리까지), 날짜는 epoch 초 또는 ISO 문자열.
거래 유형/금액 부호 등 도메인 검증은 Ledger에서 수행 (400 + field).
"""

from decimal import Decimal

from pydantic import BaseModel, Field

from core.constants import Defaults
from core.types import AccountType, CategoryType


# =========================================================================
# 계좌
# =========================================================================


class AccountCreateRequest(BaseModel):
    """계좌 생성 요청

    잔고는 항상 0에서 시작하며 거래로만 변경됨.
    """

    name: str = Field(..., min_length=1, max_length=100, description="계좌 이름")
    type: AccountType = Field(..., description="계좌 유형")
    currency: str | None = Field(
        default=None,
        min_length=3,
        max_length=3,
        description="통화 코드 (None이면 설정값)",
    )

    model_config = {
        "extra": "forbid",
        "json_schema_extra": {
            "examples": [
                {"name": "Main Checking", "type": "checking", "currency": "USD"},
            ]
        },
    }


class AccountUpdateRequest(BaseModel):
    """계좌 메타데이터 수정 요청

    balance는 받지 않음 (extra 필드 거부).
    """

    name: str | None = Field(default=None, min_length=1, max_length=100, description="계좌 이름")
    type: AccountType | None = Field(default=None, description="계좌 유형")
    currency: str | None = Field(default=None, min_length=3, max_length=3, description="통화 코드")

    model_config = {"extra": "forbid"}


# =========================================================================
# 카테고리
# =========================================================================


class CategoryCreateRequest(BaseModel):
    """카테고리 생성 요청"""

    name: str = Field(..., min_length=1, max_length=100, description="카테고리 이름")
    type: CategoryType = Field(..., description="카테고리 유형 (income/expense)")
    color: str = Field(default=Defaults.CATEGORY_COLOR, description="표시 색상")
    icon: str = Field(default=Defaults.CATEGORY_ICON, description="표시 아이콘")


class CategoryUpdateRequest(BaseModel):
    """카테고리 수정 요청 (지정한 필드만 변경)"""

    name: str | None = Field(default=None, min_length=1, max_length=100, description="카테고리 이름")
    type: CategoryType | None = Field(default=None, description="카테고리 유형")
    color: str | None = Field(default=None, description="표시 색상")
    icon: str | None = Field(default=None, description="표시 아이콘")

    model_config = {"extra": "forbid"}


# =========================================================================
# 거래
# =========================================================================


class TransactionCreateRequest(BaseModel):
    """거래 생성 요청

    idempotency_key를 지정하면 같은 키의 재요청은 기존 거래를 반환.
    """

    account_id: str = Field(..., description="계좌 ID")
    category_id: str | None = Field(default=None, description="카테고리 ID")
    type: str = Field(..., description="거래 유형 (income/expense/transfer)")
    amount: Decimal = Field(..., description="금액 (양수, 소수점 2자리까지)")
    description: str | None = Field(default=None, description="설명")
    date: int | str = Field(..., description="거래 일자 (epoch 초 또는 ISO 8601)")
    tags: list[str] = Field(default_factory=list, description="태그 목록")
    notes: str | None = Field(default=None, description="메모")
    is_recurring: bool = Field(default=False, description="반복 거래 여부 (정보용)")
    recurring_frequency: str | None = Field(
        default=None,
        description="반복 주기 (daily/weekly/monthly/yearly)",
    )
    recurring_end_date: int | str | None = Field(default=None, description="반복 종료일")
    idempotency_key: str | None = Field(
        default=None,
        max_length=128,
        description="멱등성 키 (재시도 시 중복 반영 방지)",
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "account_id": "0b6f3c1e-1d5a-4c59-9a3e-3f0f6f1f2d11",
                    "type": "expense",
                    "amount": "42.50",
                    "description": "Groceries",
                    "date": "2024-03-01T12:00:00Z",
                    "tags": ["food", "weekly"],
                },
            ]
        }
    }


class TransactionUpdateRequest(BaseModel):
    """거래 부분 수정 요청

    요청 본문에 포함된 필드만 변경. 명시적 null은 "null로 설정".
    """

    account_id: str | None = Field(default=None, description="계좌 ID")
    category_id: str | None = Field(default=None, description="카테고리 ID (null이면 해제)")
    type: str | None = Field(default=None, description="거래 유형")
    amount: Decimal | None = Field(default=None, description="금액")
    description: str | None = Field(default=None, description="설명")
    date: int | str | None = Field(default=None, description="거래 일자")
    tags: list[str] | None = Field(default=None, description="태그 목록")
    notes: str | None = Field(default=None, description="메모")
    is_recurring: bool | None = Field(default=None, description="반복 거래 여부")
    recurring_frequency: str | None = Field(default=None, description="반복 주기")
    recurring_end_date: int | str | None = Field(default=None, description="반복 종료일")

    model_config = {
        "extra": "forbid",
        "json_schema_extra": {
            "examples": [
                {"amount": "150.00"},
                {"type": "expense"},
                {"account_id": "9a1d4e7b-...", "category_id": None},
            ]
        },
    }

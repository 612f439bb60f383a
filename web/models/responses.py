"""
응답 스키마 (Pydantic)

Web API 응답 데이터 직렬화

금액/잔고는 Decimal 문자열 ("-150.00"), 시각은 epoch 초.
"""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """헬스 체크 응답"""

    status: str = Field(default="ok", description="서비스 상태")
    environment: str = Field(..., description="실행 환경 (development/production)")
    version: str = Field(..., description="API 버전")


class ErrorResponse(BaseModel):
    """오류 응답 본문 (detail)"""

    error: str = Field(..., description="오류 메시지")
    field: str | None = Field(default=None, description="문제가 된 입력 필드")
    retryable: bool | None = Field(default=None, description="재시도 가능 여부")


# =========================================================================
# 계좌
# =========================================================================


class AccountResponse(BaseModel):
    """계좌 응답"""

    id: str = Field(..., description="계좌 ID")
    name: str = Field(..., description="계좌 이름")
    type: str = Field(..., description="계좌 유형")
    balance: str = Field(..., description="잔고 (거래 잔고 효과의 합계)")
    currency: str = Field(..., description="통화 코드")
    is_active: bool = Field(..., description="활성 여부")
    created_at: int = Field(..., description="생성 시각 (epoch 초)")
    updated_at: int = Field(..., description="수정 시각 (epoch 초)")


class AccountListResponse(BaseModel):
    """계좌 목록 응답"""

    accounts: list[AccountResponse] = Field(default_factory=list, description="활성 계좌 목록")
    total_count: int = Field(..., description="계좌 수")


class ReconciliationResponse(BaseModel):
    """계좌 잔고 검증 응답

    drift = stored_balance - expected_balance
    """

    account_id: str = Field(..., description="계좌 ID")
    stored_balance: str = Field(..., description="저장된 잔고")
    expected_balance: str = Field(..., description="거래 합계")
    drift: str = Field(..., description="차이")
    consistent: bool = Field(..., description="불변식 충족 여부")


class RepairResponse(BaseModel):
    """잔고 복구 응답"""

    account_id: str = Field(..., description="계좌 ID")
    repaired: bool = Field(..., description="재계산 수행 여부 (불일치였던 경우 True)")
    previous_balance: str = Field(..., description="복구 전 잔고")
    balance: str = Field(..., description="복구 후 잔고")


# =========================================================================
# 카테고리
# =========================================================================


class CategoryResponse(BaseModel):
    """카테고리 응답"""

    id: str = Field(..., description="카테고리 ID")
    name: str = Field(..., description="카테고리 이름")
    type: str = Field(..., description="카테고리 유형")
    color: str = Field(..., description="표시 색상")
    icon: str = Field(..., description="표시 아이콘")
    is_active: bool = Field(..., description="활성 여부")
    created_at: int = Field(..., description="생성 시각 (epoch 초)")


class CategoryListResponse(BaseModel):
    """카테고리 목록 응답"""

    categories: list[CategoryResponse] = Field(default_factory=list, description="카테고리 목록")
    total_count: int = Field(..., description="카테고리 수")


class InitResponse(BaseModel):
    """기본 카테고리 생성 응답"""

    created: int = Field(..., description="생성된 카테고리 수 (이미 있으면 0)")
    message: str = Field(..., description="결과 메시지")


# =========================================================================
# 거래
# =========================================================================


class TransactionResponse(BaseModel):
    """거래 응답 (계좌/카테고리 표시 필드 포함)"""

    id: str = Field(..., description="거래 ID")
    account_id: str = Field(..., description="계좌 ID")
    category_id: str | None = Field(default=None, description="카테고리 ID")
    type: str = Field(..., description="거래 유형")
    amount: str = Field(..., description="금액 (항상 양수)")
    description: str | None = Field(default=None, description="설명")
    date: int = Field(..., description="거래 일자 (epoch 초)")
    tags: list[str] = Field(default_factory=list, description="태그 목록")
    notes: str | None = Field(default=None, description="메모")
    is_recurring: bool = Field(default=False, description="반복 거래 여부")
    recurring_frequency: str | None = Field(default=None, description="반복 주기")
    recurring_end_date: int | None = Field(default=None, description="반복 종료일")
    idempotency_key: str | None = Field(default=None, description="멱등성 키")
    created_at: int = Field(..., description="생성 시각")
    updated_at: int = Field(..., description="수정 시각")
    account_name: str | None = Field(default=None, description="계좌 이름")
    account_type: str | None = Field(default=None, description="계좌 유형")
    category_name: str | None = Field(default=None, description="카테고리 이름")
    category_color: str | None = Field(default=None, description="카테고리 색상")
    category_icon: str | None = Field(default=None, description="카테고리 아이콘")


class TransactionListResponse(BaseModel):
    """거래 목록 응답"""

    transactions: list[TransactionResponse] = Field(default_factory=list, description="거래 목록")
    total_count: int = Field(..., description="필터 조건의 전체 거래 수")
    limit: int = Field(..., description="조회 제한")
    offset: int = Field(..., description="시작 위치")


class TransactionDeleteResponse(BaseModel):
    """거래 삭제 응답"""

    id: str = Field(..., description="삭제된 거래 ID")
    account_id: str = Field(..., description="잔고가 조정된 계좌 ID")
    reversed_amount: str = Field(..., description="되돌린 잔고 효과")
    message: str = Field(..., description="결과 메시지")

"""
계좌 라우트

계좌 CRUD 및 잔고 검증/복구 API
"""

from fastapi import APIRouter, Depends, Path

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import Settings
from core.ledger.errors import LedgerError
from core.ledger.locks import AccountLockManager
from web.dependencies import (
    get_account_locks,
    get_app_settings,
    get_db,
    get_db_write,
    get_user_id,
    to_http_exception,
)
from web.models.requests import AccountCreateRequest, AccountUpdateRequest
from web.models.responses import (
    AccountListResponse,
    AccountResponse,
    ReconciliationResponse,
    RepairResponse,
)
from web.services.account_service import AccountService

router = APIRouter(prefix="/api/money/accounts", tags=["Accounts"])


@router.get("", response_model=AccountListResponse)
async def get_accounts(
    db: SQLiteAdapter = Depends(get_db),
    user_id: str = Depends(get_user_id),
) -> AccountListResponse:
    """활성 계좌 목록 조회"""
    service = AccountService(db)
    result = await service.get_accounts(user_id)
    return AccountListResponse(**result)


@router.post("", response_model=AccountResponse, status_code=201)
async def create_account(
    request: AccountCreateRequest,
    db: SQLiteAdapter = Depends(get_db_write),
    settings: Settings = Depends(get_app_settings),
    user_id: str = Depends(get_user_id),
) -> AccountResponse:
    """계좌 생성

    잔고는 0으로 시작. 초기 금액은 income 거래로 기록.
    """
    service = AccountService(db)
    try:
        account = await service.create_account(
            user_id=user_id,
            name=request.name,
            account_type=request.type.value,
            currency=request.currency or settings.currency,
        )
    except LedgerError as e:
        raise to_http_exception(e) from e

    return AccountResponse(**account)


@router.get("/{account_id}", response_model=AccountResponse)
async def get_account(
    account_id: str = Path(..., description="계좌 ID"),
    db: SQLiteAdapter = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
    user_id: str = Depends(get_user_id),
) -> AccountResponse:
    """계좌 상세 조회

    ledger.verify_on_read 설정 시 잔고 불일치면 409.
    """
    service = AccountService(db)
    try:
        account = await service.get_account(
            user_id, account_id, verify=settings.ledger.verify_on_read
        )
    except LedgerError as e:
        raise to_http_exception(e) from e

    return AccountResponse(**account)


@router.put("/{account_id}", response_model=AccountResponse)
async def update_account(
    request: AccountUpdateRequest,
    account_id: str = Path(..., description="계좌 ID"),
    db: SQLiteAdapter = Depends(get_db_write),
    user_id: str = Depends(get_user_id),
) -> AccountResponse:
    """계좌 메타데이터 수정 (name, type, currency)

    잔고는 수정할 수 없음.
    """
    service = AccountService(db)
    changes = request.model_dump(exclude_unset=True)
    if changes.get("type") is not None:
        changes["type"] = request.type.value

    try:
        account = await service.update_account(user_id, account_id, changes)
    except LedgerError as e:
        raise to_http_exception(e) from e

    return AccountResponse(**account)


@router.delete("/{account_id}")
async def delete_account(
    account_id: str = Path(..., description="계좌 ID"),
    db: SQLiteAdapter = Depends(get_db_write),
    user_id: str = Depends(get_user_id),
) -> dict[str, str]:
    """계좌 비활성화 (soft delete)

    기존 거래와 잔고는 보존.
    """
    service = AccountService(db)
    try:
        await service.delete_account(user_id, account_id)
    except LedgerError as e:
        raise to_http_exception(e) from e

    return {"message": "Account deleted successfully"}


@router.get("/{account_id}/reconciliation", response_model=ReconciliationResponse)
async def get_reconciliation(
    account_id: str = Path(..., description="계좌 ID"),
    db: SQLiteAdapter = Depends(get_db),
    user_id: str = Depends(get_user_id),
) -> ReconciliationResponse:
    """잔고 불변식 검증

    저장된 잔고와 거래 잔고 효과 합계를 비교.
    """
    service = AccountService(db)
    try:
        result = await service.get_reconciliation(user_id, account_id)
    except LedgerError as e:
        raise to_http_exception(e) from e

    return ReconciliationResponse(**result)


@router.post("/{account_id}/repair", response_model=RepairResponse)
async def repair_account(
    account_id: str = Path(..., description="계좌 ID"),
    db: SQLiteAdapter = Depends(get_db_write),
    locks: AccountLockManager = Depends(get_account_locks),
    user_id: str = Depends(get_user_id),
) -> RepairResponse:
    """잔고 복구 (거래 합계로 재계산)"""
    service = AccountService(db, locks)
    try:
        result = await service.repair_account(user_id, account_id)
    except LedgerError as e:
        raise to_http_exception(e) from e

    return RepairResponse(**result)

"""
거래 라우트

거래 조회 및 생성/수정/삭제 API.
생성/수정/삭제는 계좌 잔고를 같은 트랜잭션 안에서 함께 조정.
"""

from fastapi import APIRouter, Depends, Path, Query

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.constants import Limits
from core.ledger.errors import LedgerError
from core.ledger.locks import AccountLockManager
from web.dependencies import (
    get_account_locks,
    get_db,
    get_db_write,
    get_user_id,
    to_http_exception,
)
from web.models.requests import TransactionCreateRequest, TransactionUpdateRequest
from web.models.responses import (
    TransactionDeleteResponse,
    TransactionListResponse,
    TransactionResponse,
)
from web.services.transaction_service import TransactionService

router = APIRouter(prefix="/api/money/transactions", tags=["Transactions"])


@router.get("", response_model=TransactionListResponse)
async def get_transactions(
    account_id: str | None = Query(default=None, description="계좌 필터"),
    category_id: str | None = Query(default=None, description="카테고리 필터"),
    type: str | None = Query(default=None, description="유형 필터 (income/expense/transfer)"),
    start_date: str | None = Query(default=None, description="시작일 (epoch 초 또는 ISO 8601)"),
    end_date: str | None = Query(default=None, description="종료일 (epoch 초 또는 ISO 8601)"),
    limit: int = Query(default=Limits.LIST_DEFAULT, ge=1, le=Limits.LIST_MAX, description="조회 제한"),
    offset: int = Query(default=0, ge=0, description="시작 위치"),
    db: SQLiteAdapter = Depends(get_db),
    user_id: str = Depends(get_user_id),
) -> TransactionListResponse:
    """거래 목록 조회 (날짜 역순)"""
    service = TransactionService(db)
    try:
        result = await service.get_transactions(
            user_id,
            account_id=account_id,
            category_id=category_id,
            tx_type=type,
            start_date=start_date,
            end_date=end_date,
            limit=limit,
            offset=offset,
        )
    except LedgerError as e:
        raise to_http_exception(e) from e

    return TransactionListResponse(**result)


@router.post("", response_model=TransactionResponse, status_code=201)
async def create_transaction(
    request: TransactionCreateRequest,
    db: SQLiteAdapter = Depends(get_db_write),
    locks: AccountLockManager = Depends(get_account_locks),
    user_id: str = Depends(get_user_id),
) -> TransactionResponse:
    """거래 생성

    income은 +amount, expense는 -amount로 계좌 잔고에 반영.
    transfer는 잔고 효과 없음.
    """
    service = TransactionService(db, locks)
    try:
        tx = await service.create_transaction(user_id, request)
    except LedgerError as e:
        raise to_http_exception(e) from e

    return TransactionResponse(**tx)


@router.get("/{transaction_id}", response_model=TransactionResponse)
async def get_transaction(
    transaction_id: str = Path(..., description="거래 ID"),
    db: SQLiteAdapter = Depends(get_db),
    user_id: str = Depends(get_user_id),
) -> TransactionResponse:
    """거래 상세 조회"""
    service = TransactionService(db)
    try:
        tx = await service.get_transaction(user_id, transaction_id)
    except LedgerError as e:
        raise to_http_exception(e) from e

    return TransactionResponse(**tx)


@router.put("/{transaction_id}", response_model=TransactionResponse)
async def update_transaction(
    request: TransactionUpdateRequest,
    transaction_id: str = Path(..., description="거래 ID"),
    db: SQLiteAdapter = Depends(get_db_write),
    locks: AccountLockManager = Depends(get_account_locks),
    user_id: str = Depends(get_user_id),
) -> TransactionResponse:
    """거래 부분 수정

    amount/type/account_id가 포함되면 이전 효과를 되돌리고 새 효과를 적용.
    """
    service = TransactionService(db, locks)
    try:
        tx = await service.update_transaction(user_id, transaction_id, request)
    except LedgerError as e:
        raise to_http_exception(e) from e

    return TransactionResponse(**tx)


@router.delete("/{transaction_id}", response_model=TransactionDeleteResponse)
async def delete_transaction(
    transaction_id: str = Path(..., description="거래 ID"),
    db: SQLiteAdapter = Depends(get_db_write),
    locks: AccountLockManager = Depends(get_account_locks),
    user_id: str = Depends(get_user_id),
) -> TransactionDeleteResponse:
    """거래 삭제 (잔고 효과 되돌리기)"""
    service = TransactionService(db, locks)
    try:
        result = await service.delete_transaction(user_id, transaction_id)
    except LedgerError as e:
        raise to_http_exception(e) from e

    return TransactionDeleteResponse(**result)

"""
의존성 주입

FastAPI의 Depends를 사용한 의존성 관리.
"""

from typing import AsyncGenerator

from fastapi import HTTPException

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import Settings, get_settings
from core.ledger.errors import (
    InvalidArgumentError,
    LedgerError,
    LedgerInconsistentError,
    NotFoundError,
    StorageFailureError,
)
from core.ledger.locks import AccountLockManager


def get_app_settings() -> Settings:
    """애플리케이션 설정 반환"""
    return get_settings()


def get_user_id() -> str:
    """요청 소유자 ID

    인증 연동 전까지 설정의 user_id 사용.
    """
    return get_settings().user_id


async def get_db() -> AsyncGenerator[SQLiteAdapter, None]:
    """DB 세션 반환 (읽기 전용)

    목록/상세/검증 조회용.
    """
    settings = get_settings()
    async with SQLiteAdapter(settings.db_path, readonly=True) as db:
        yield db


async def get_db_write() -> AsyncGenerator[SQLiteAdapter, None]:
    """DB 세션 반환 (쓰기 가능)

    계좌/카테고리/거래 변경 및 잔고 복구 시 사용.
    """
    settings = get_settings()
    async with SQLiteAdapter(settings.db_path, readonly=False) as db:
        yield db


# =========================================================================
# AccountLockManager (프로세스 공유)
# =========================================================================

# 요청마다 LedgerEngine이 새로 만들어지므로 락 관리자는 전역 하나를 공유
_account_locks = AccountLockManager()


def get_account_locks() -> AccountLockManager:
    """프로세스 공유 계좌 락 관리자 반환"""
    return _account_locks


def set_account_locks(locks: AccountLockManager) -> None:
    """계좌 락 관리자 교체 (테스트용)"""
    global _account_locks
    _account_locks = locks


# =========================================================================
# 오류 변환
# =========================================================================


def to_http_exception(error: LedgerError) -> HTTPException:
    """LedgerError → HTTPException

    - NotFound → 404
    - InvalidArgument → 400 (field 포함)
    - LedgerInconsistent → 409
    - StorageFailure → 503 (retryable)
    """
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=404, detail={"error": str(error)})

    if isinstance(error, InvalidArgumentError):
        return HTTPException(
            status_code=400,
            detail={"error": error.message, "field": error.field},
        )

    if isinstance(error, LedgerInconsistentError):
        return HTTPException(
            status_code=409,
            detail={
                "error": str(error),
                "account_id": error.account_id,
                "stored": error.stored,
                "expected": error.expected,
            },
        )

    if isinstance(error, StorageFailureError):
        return HTTPException(
            status_code=503,
            detail={"error": str(error), "retryable": error.retryable},
        )

    return HTTPException(status_code=500, detail={"error": str(error)})

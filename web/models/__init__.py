"""
Web 모델 패키지

Pydantic 스키마 정의
"""

from web.models.requests import (
    AccountCreateRequest,
    AccountUpdateRequest,
    CategoryCreateRequest,
    CategoryUpdateRequest,
    TransactionCreateRequest,
    TransactionUpdateRequest,
)
from web.models.responses import (
    AccountListResponse,
    AccountResponse,
    CategoryListResponse,
    CategoryResponse,
    ErrorResponse,
    HealthResponse,
    InitResponse,
    ReconciliationResponse,
    RepairResponse,
    TransactionDeleteResponse,
    TransactionListResponse,
    TransactionResponse,
)

__all__ = [
    # Requests
    "AccountCreateRequest",
    "AccountUpdateRequest",
    "CategoryCreateRequest",
    "CategoryUpdateRequest",
    "TransactionCreateRequest",
    "TransactionUpdateRequest",
    # Responses
    "AccountListResponse",
    "AccountResponse",
    "CategoryListResponse",
    "CategoryResponse",
    "ErrorResponse",
    "HealthResponse",
    "InitResponse",
    "ReconciliationResponse",
    "RepairResponse",
    "TransactionDeleteResponse",
    "TransactionListResponse",
    "TransactionResponse",
]

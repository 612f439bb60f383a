"""
카테고리 라우트

카테고리 CRUD 및 기본 카테고리 생성 API
"""

from fastapi import APIRouter, Depends, Path, Query

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.ledger.errors import LedgerError
from core.types import CategoryType
from web.dependencies import get_db, get_db_write, get_user_id, to_http_exception
from web.models.requests import CategoryCreateRequest, CategoryUpdateRequest
from web.models.responses import CategoryListResponse, CategoryResponse, InitResponse
from web.services.category_service import CategoryService

router = APIRouter(prefix="/api/money", tags=["Categories"])


@router.get("/categories", response_model=CategoryListResponse)
async def get_categories(
    type: CategoryType | None = Query(default=None, description="유형 필터 (income/expense)"),
    db: SQLiteAdapter = Depends(get_db),
    user_id: str = Depends(get_user_id),
) -> CategoryListResponse:
    """활성 카테고리 목록 조회 (이름순)"""
    service = CategoryService(db)
    result = await service.get_categories(user_id, type.value if type else None)
    return CategoryListResponse(**result)


@router.post("/categories", response_model=CategoryResponse, status_code=201)
async def create_category(
    request: CategoryCreateRequest,
    db: SQLiteAdapter = Depends(get_db_write),
    user_id: str = Depends(get_user_id),
) -> CategoryResponse:
    """카테고리 생성"""
    service = CategoryService(db)
    try:
        category = await service.create_category(
            user_id=user_id,
            name=request.name,
            category_type=request.type.value,
            color=request.color,
            icon=request.icon,
        )
    except LedgerError as e:
        raise to_http_exception(e) from e

    return CategoryResponse(**category)


@router.get("/categories/{category_id}", response_model=CategoryResponse)
async def get_category(
    category_id: str = Path(..., description="카테고리 ID"),
    db: SQLiteAdapter = Depends(get_db),
    user_id: str = Depends(get_user_id),
) -> CategoryResponse:
    """카테고리 상세 조회"""
    service = CategoryService(db)
    try:
        category = await service.get_category(user_id, category_id)
    except LedgerError as e:
        raise to_http_exception(e) from e

    return CategoryResponse(**category)


@router.put("/categories/{category_id}", response_model=CategoryResponse)
async def update_category(
    request: CategoryUpdateRequest,
    category_id: str = Path(..., description="카테고리 ID"),
    db: SQLiteAdapter = Depends(get_db_write),
    user_id: str = Depends(get_user_id),
) -> CategoryResponse:
    """카테고리 수정 (name, type, color, icon)

    기존 거래의 잔고에는 영향 없음.
    """
    service = CategoryService(db)
    changes = request.model_dump(exclude_unset=True)
    if changes.get("type") is not None:
        changes["type"] = request.type.value

    try:
        category = await service.update_category(user_id, category_id, changes)
    except LedgerError as e:
        raise to_http_exception(e) from e

    return CategoryResponse(**category)


@router.delete("/categories/{category_id}")
async def delete_category(
    category_id: str = Path(..., description="카테고리 ID"),
    db: SQLiteAdapter = Depends(get_db_write),
    user_id: str = Depends(get_user_id),
) -> dict[str, str]:
    """카테고리 비활성화 (soft delete)

    기존 거래의 카테고리 참조는 유지.
    """
    service = CategoryService(db)
    try:
        await service.delete_category(user_id, category_id)
    except LedgerError as e:
        raise to_http_exception(e) from e

    return {"message": "Category deleted successfully"}


@router.post("/init", response_model=InitResponse)
async def init_money(
    db: SQLiteAdapter = Depends(get_db_write),
    user_id: str = Depends(get_user_id),
) -> InitResponse:
    """기본 카테고리 생성

    소유자당 1회. 이미 카테고리가 있으면 created=0.
    """
    service = CategoryService(db)
    result = await service.seed_defaults(user_id)
    return InitResponse(**result)

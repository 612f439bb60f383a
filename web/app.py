"""
FastAPI 애플리케이션

라우터 등록 및 앱 설정.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.config.loader import get_settings
from core.logging import setup_logging

# 로깅 설정 (콘솔 + 파일)
setup_logging("web")

from web.routes import accounts, categories, health, transactions

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """앱 생명주기 관리"""
    from adapters.db.sqlite_adapter import SQLiteAdapter
    from core.ledger.engine import LedgerEngine
    from core.ledger.schema import init_ledger_schema
    from web.dependencies import get_account_locks

    settings = get_settings()

    # 시작 시 - DB 스키마 자동 초기화 (+ 선택적 잔고 복구)
    async with SQLiteAdapter(settings.db_path) as db:
        await init_ledger_schema(db)

        if settings.ledger.repair_on_startup:
            engine = LedgerEngine(db, get_account_locks())
            repaired = await engine.repair_all()
            if repaired:
                logger.warning(f"Web: 시작 시 잔고 복구 {len(repaired)}건")
            else:
                logger.info("Web: 잔고 불변식 확인 완료")

    logger.info(
        "Web: 시작",
        extra={"environment": settings.environment.value, "db_path": str(settings.db_path)},
    )

    yield


app = FastAPI(
    title="MoneyLedger API",
    description="거래 원장 및 계좌 잔고 재조정 API",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS 설정 (개발용)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# =========================================================================
# API 라우터 등록
# =========================================================================

app.include_router(health.router)
app.include_router(accounts.router)
app.include_router(categories.router)
app.include_router(transactions.router)

"""
pytest 공통 fixture 정의

임시 설정 파일, 스키마가 초기화된 임시 SQLite DB, LedgerEngine
"""

import tempfile
from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.ledger.engine import LedgerEngine
from core.ledger.schema import init_ledger_schema
from core.storage.account_store import AccountStore
from core.storage.category_store import CategoryStore

TEST_USER_ID = "test-user"
OTHER_USER_ID = "other-user"


@pytest.fixture
def temp_dir() -> Path:
    """OS 독립적인 임시 디렉토리 생성"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_settings_file(temp_dir: Path) -> Path:
    """테스트용 settings.yaml 파일 생성"""
    db_path = temp_dir / "ledger_test.db"
    settings_content = f"""# 테스트용 settings.yaml
environment: development
user_id: {TEST_USER_ID}
currency: usd
db_path: "{db_path.as_posix()}"

ledger:
  verify_on_read: true
  repair_on_startup: false
"""
    settings_path = temp_dir / "settings.yaml"
    settings_path.write_text(settings_content, encoding="utf-8")
    return settings_path


@pytest.fixture
def temp_settings_file_production(temp_dir: Path) -> Path:
    """테스트용 settings.yaml 파일 생성 (production 환경)"""
    settings_content = """environment: production
user_id: prod-user
currency: EUR

ledger:
  verify_on_read: false
  repair_on_startup: true
"""
    settings_path = temp_dir / "settings_prod.yaml"
    settings_path.write_text(settings_content, encoding="utf-8")
    return settings_path


@pytest.fixture
def temp_settings_file_invalid_environment(temp_dir: Path) -> Path:
    """잘못된 environment의 settings.yaml 파일 생성"""
    settings_content = """environment: staging
user_id: someone
"""
    settings_path = temp_dir / "settings_invalid.yaml"
    settings_path.write_text(settings_content, encoding="utf-8")
    return settings_path


# =========================================================================
# DB / Ledger
# =========================================================================


@pytest_asyncio.fixture
async def db(tmp_path: Path) -> AsyncGenerator[SQLiteAdapter, None]:
    """스키마가 초기화된 임시 DB"""
    adapter = SQLiteAdapter(tmp_path / "ledger.db")
    await adapter.connect()
    await init_ledger_schema(adapter)
    yield adapter
    await adapter.close()


@pytest_asyncio.fixture
async def engine(db: SQLiteAdapter) -> LedgerEngine:
    """LedgerEngine 인스턴스"""
    return LedgerEngine(db)


@pytest.fixture
def user_id() -> str:
    return TEST_USER_ID


@pytest.fixture
def account_store(db: SQLiteAdapter) -> AccountStore:
    return AccountStore(db)


@pytest.fixture
def category_store(db: SQLiteAdapter) -> CategoryStore:
    return CategoryStore(db)

"""
Ledger 스키마 초기화

Web 시작 시 자동으로 계좌/카테고리/거래 테이블과 View 생성.
CREATE IF NOT EXISTS / DROP VIEW IF EXISTS 패턴으로 안전하게 동작.
"""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


# 거래 1건의 잔고 효과 (core.ledger.validation.effect_of 와 동일 규칙)
EFFECT_SQL = (
    "CASE {t}.type "
    "WHEN 'income' THEN {t}.amount "
    "WHEN 'expense' THEN -{t}.amount "
    "ELSE 0 END"
)


def effect_sql(alias: str = "t") -> str:
    """잔고 효과 SQL 식 반환"""
    return EFFECT_SQL.format(t=alias)


async def init_ledger_schema(db: "SQLiteAdapter") -> None:
    """Ledger 스키마 초기화 (테이블 + View)

    Web 시작 시 호출되어 필요한 모든 테이블과 View를 생성.
    이미 존재하는 경우 안전하게 건너뜀 (IF NOT EXISTS).

    Args:
        db: SQLiteAdapter 인스턴스
    """
    existed = await db.table_exists("transactions")
    async with db.transaction():
        await _create_ledger_tables(db)
        await _create_ledger_indexes(db)
        await _create_ledger_views(db)

    if existed:
        logger.info("Ledger 스키마 확인 완료")
    else:
        logger.info("Ledger 스키마 신규 생성 완료")


async def _create_ledger_tables(db: "SQLiteAdapter") -> None:
    """Ledger 테이블 생성"""

    # accounts 테이블 (balance: 최소 단위 정수)
    await db.execute("""
        CREATE TABLE IF NOT EXISTS accounts (
            id               TEXT PRIMARY KEY,
            user_id          TEXT NOT NULL,
            name             TEXT NOT NULL,
            type             TEXT NOT NULL
                CHECK(type IN ('checking', 'savings', 'credit', 'investment', 'cash')),
            balance          INTEGER NOT NULL DEFAULT 0
                CHECK(typeof(balance) = 'integer'),
            currency         TEXT NOT NULL DEFAULT 'USD',
            is_active        INTEGER NOT NULL DEFAULT 1,
            created_at       INTEGER NOT NULL DEFAULT (CAST(strftime('%s', 'now') AS INTEGER)),
            updated_at       INTEGER NOT NULL DEFAULT (CAST(strftime('%s', 'now') AS INTEGER))
        )
    """)

    # categories 테이블
    await db.execute("""
        CREATE TABLE IF NOT EXISTS categories (
            id               TEXT PRIMARY KEY,
            user_id          TEXT NOT NULL,
            name             TEXT NOT NULL,
            type             TEXT NOT NULL CHECK(type IN ('income', 'expense')),
            color            TEXT NOT NULL DEFAULT '#6B7280',
            icon             TEXT NOT NULL DEFAULT 'folder',
            is_active        INTEGER NOT NULL DEFAULT 1,
            created_at       INTEGER NOT NULL DEFAULT (CAST(strftime('%s', 'now') AS INTEGER))
        )
    """)

    # transactions 테이블 (amount: 항상 양수)
    await db.execute("""
        CREATE TABLE IF NOT EXISTS transactions (
            id                   TEXT PRIMARY KEY,
            user_id              TEXT NOT NULL,
            account_id           TEXT NOT NULL,
            category_id          TEXT,
            type                 TEXT NOT NULL
                CHECK(type IN ('income', 'expense', 'transfer')),
            amount               INTEGER NOT NULL CHECK(amount > 0),
            description          TEXT,
            date                 INTEGER NOT NULL,
            tags                 TEXT,
            notes                TEXT,
            is_recurring         INTEGER NOT NULL DEFAULT 0,
            recurring_frequency  TEXT
                CHECK(recurring_frequency IN ('daily', 'weekly', 'monthly', 'yearly')),
            recurring_end_date   INTEGER,
            idempotency_key      TEXT,
            created_at           INTEGER NOT NULL DEFAULT (CAST(strftime('%s', 'now') AS INTEGER)),
            updated_at           INTEGER NOT NULL DEFAULT (CAST(strftime('%s', 'now') AS INTEGER)),
            FOREIGN KEY (account_id) REFERENCES accounts(id),
            FOREIGN KEY (category_id) REFERENCES categories(id) ON DELETE SET NULL
        )
    """)


async def _create_ledger_indexes(db: "SQLiteAdapter") -> None:
    """인덱스 생성"""

    await db.execute("""
        CREATE INDEX IF NOT EXISTS ix_accounts_user
        ON accounts(user_id, is_active)
    """)

    await db.execute("""
        CREATE INDEX IF NOT EXISTS ix_categories_user
        ON categories(user_id, is_active, type)
    """)

    await db.execute("""
        CREATE INDEX IF NOT EXISTS ix_transactions_account
        ON transactions(account_id)
    """)

    await db.execute("""
        CREATE INDEX IF NOT EXISTS ix_transactions_user_date
        ON transactions(user_id, date DESC, created_at DESC)
    """)

    await db.execute("""
        CREATE UNIQUE INDEX IF NOT EXISTS ux_transactions_idempotency
        ON transactions(user_id, idempotency_key)
        WHERE idempotency_key IS NOT NULL
    """)


async def _create_ledger_views(db: "SQLiteAdapter") -> None:
    """Ledger View 생성

    스키마 변경을 반영하기 위해 항상 DROP 후 재생성.
    """

    # 거래 + 표시용 조인 필드
    await db.execute("DROP VIEW IF EXISTS v_transaction_detail")
    await db.execute("""
        CREATE VIEW v_transaction_detail AS
        SELECT
            t.id, t.user_id, t.account_id, t.category_id, t.type, t.amount,
            t.description, t.date, t.tags, t.notes,
            t.is_recurring, t.recurring_frequency, t.recurring_end_date,
            t.idempotency_key, t.created_at, t.updated_at,
            a.name  AS account_name,
            a.type  AS account_type,
            c.name  AS category_name,
            c.color AS category_color,
            c.icon  AS category_icon
        FROM transactions t
        LEFT JOIN accounts a ON t.account_id = a.id
        LEFT JOIN categories c ON t.category_id = c.id
    """)

    # 계좌별 저장 잔고 vs 거래 합계
    await db.execute("DROP VIEW IF EXISTS v_account_reconciliation")
    await db.execute(f"""
        CREATE VIEW v_account_reconciliation AS
        SELECT
            a.id       AS account_id,
            a.user_id  AS user_id,
            a.balance  AS stored_balance,
            COALESCE((
                SELECT SUM({effect_sql("t")})
                FROM transactions t
                WHERE t.account_id = a.id
            ), 0)      AS expected_balance
        FROM accounts a
    """)

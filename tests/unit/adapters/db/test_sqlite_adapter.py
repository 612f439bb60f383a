"""
SQLite 어댑터 테스트

SQLiteAdapter 및 create_connection 테스트.
"""

import asyncio
from pathlib import Path

import pytest
import pytest_asyncio

from adapters.db.sqlite_adapter import SQLiteAdapter, create_connection


class TestCreateConnection:
    """create_connection 테스트"""

    @pytest.mark.asyncio
    async def test_create_connection(self, tmp_path: Path) -> None:
        """연결 생성"""
        db_path = tmp_path / "test.db"

        conn = await create_connection(db_path)

        assert conn is not None

        # WAL 모드 확인
        cursor = await conn.execute("PRAGMA journal_mode")
        row = await cursor.fetchone()
        assert row[0].upper() == "WAL"

        await conn.close()

    @pytest.mark.asyncio
    async def test_foreign_keys_enabled(self, tmp_path: Path) -> None:
        conn = await create_connection(tmp_path / "fk.db")

        cursor = await conn.execute("PRAGMA foreign_keys")
        row = await cursor.fetchone()
        assert row[0] == 1

        await conn.close()

    @pytest.mark.asyncio
    async def test_creates_parent_directory(self, tmp_path: Path) -> None:
        """부모 디렉토리 생성"""
        db_path = tmp_path / "subdir" / "test.db"

        conn = await create_connection(db_path)

        assert db_path.parent.exists()

        await conn.close()

    @pytest.mark.asyncio
    async def test_readonly_rejects_writes(self, tmp_path: Path) -> None:
        """읽기 전용 연결"""
        db_path = tmp_path / "ro.db"
        async with SQLiteAdapter(db_path) as adapter:
            async with adapter.transaction():
                await adapter.execute("CREATE TABLE t (id INTEGER)")

        import aiosqlite

        conn = await create_connection(db_path, readonly=True)
        with pytest.raises(aiosqlite.OperationalError):
            await conn.execute("INSERT INTO t (id) VALUES (1)")
        await conn.close()


class TestSQLiteAdapter:
    """SQLiteAdapter 테스트"""

    @pytest_asyncio.fixture
    async def adapter(self, tmp_path: Path) -> SQLiteAdapter:
        """어댑터 픽스처"""
        db_path = tmp_path / "test.db"
        adapter = SQLiteAdapter(db_path)
        await adapter.connect()
        yield adapter
        await adapter.close()

    @pytest.mark.asyncio
    async def test_connect_and_close(self, tmp_path: Path) -> None:
        """연결 및 종료"""
        adapter = SQLiteAdapter(tmp_path / "test.db")

        assert adapter.is_connected is False

        await adapter.connect()
        assert adapter.is_connected is True

        await adapter.close()
        assert adapter.is_connected is False

    @pytest.mark.asyncio
    async def test_execute_without_connection(self, tmp_path: Path) -> None:
        adapter = SQLiteAdapter(tmp_path / "test.db")

        with pytest.raises(RuntimeError):
            await adapter.execute("SELECT 1")

    @pytest.mark.asyncio
    async def test_fetchall(self, adapter: SQLiteAdapter) -> None:
        """전체 조회"""
        async with adapter.transaction():
            await adapter.execute("CREATE TABLE items (value TEXT)")
            await adapter.executemany(
                "INSERT INTO items (value) VALUES (?)",
                [("A",), ("B",), ("C",)],
            )

        rows = await adapter.fetchall("SELECT value FROM items ORDER BY value")

        assert [r[0] for r in rows] == ["A", "B", "C"]

    @pytest.mark.asyncio
    async def test_transaction_commit(self, adapter: SQLiteAdapter) -> None:
        """트랜잭션 커밋"""
        async with adapter.transaction():
            await adapter.execute("CREATE TABLE tx_test (id INTEGER)")

        async with adapter.transaction() as conn:
            assert adapter.in_transaction
            await conn.execute("INSERT INTO tx_test (id) VALUES (1)")
            await conn.execute("INSERT INTO tx_test (id) VALUES (2)")

        assert not adapter.in_transaction
        rows = await adapter.fetchall("SELECT id FROM tx_test")
        assert len(rows) == 2

    @pytest.mark.asyncio
    async def test_transaction_rollback(self, adapter: SQLiteAdapter) -> None:
        """트랜잭션 롤백"""
        async with adapter.transaction():
            await adapter.execute("CREATE TABLE tx_test2 (id INTEGER)")

        with pytest.raises(ValueError):
            async with adapter.transaction() as conn:
                await conn.execute("INSERT INTO tx_test2 (id) VALUES (1)")
                raise ValueError("의도적 에러")

        rows = await adapter.fetchall("SELECT id FROM tx_test2")
        assert len(rows) == 0

    @pytest.mark.asyncio
    async def test_transaction_rollback_on_cancel(self, adapter: SQLiteAdapter) -> None:
        """취소된 작업도 롤백"""
        async with adapter.transaction():
            await adapter.execute("CREATE TABLE tx_cancel (id INTEGER)")

        started = asyncio.Event()

        async def writer() -> None:
            async with adapter.transaction():
                await adapter.execute("INSERT INTO tx_cancel (id) VALUES (1)")
                started.set()
                await asyncio.sleep(10)

        task = asyncio.create_task(writer())
        await started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        rows = await adapter.fetchall("SELECT id FROM tx_cancel")
        assert rows == []

    @pytest.mark.asyncio
    async def test_transactions_serialized(self, adapter: SQLiteAdapter) -> None:
        """같은 연결의 트랜잭션은 순차 실행"""
        async with adapter.transaction():
            await adapter.execute("CREATE TABLE counter (n INTEGER)")
            await adapter.execute("INSERT INTO counter (n) VALUES (0)")

        async def bump() -> None:
            async with adapter.transaction():
                row = await adapter.fetchone("SELECT n FROM counter")
                await asyncio.sleep(0)
                await adapter.execute("UPDATE counter SET n = ?", (row[0] + 1,))

        await asyncio.gather(*(bump() for _ in range(10)))

        row = await adapter.fetchone("SELECT n FROM counter")
        assert row[0] == 10

    @pytest.mark.asyncio
    async def test_reads_wait_for_other_transaction(self, adapter: SQLiteAdapter) -> None:
        """다른 태스크의 진행 중 트랜잭션은 조회에 보이지 않음"""
        async with adapter.transaction():
            await adapter.execute("CREATE TABLE pair (a INTEGER, b INTEGER)")
            await adapter.execute("INSERT INTO pair (a, b) VALUES (0, 0)")

        halfway = asyncio.Event()

        async def writer() -> None:
            async with adapter.transaction():
                await adapter.execute("UPDATE pair SET a = a + 1")
                halfway.set()
                await asyncio.sleep(0.05)
                await adapter.execute("UPDATE pair SET b = b + 1")

        task = asyncio.create_task(writer())
        await halfway.wait()

        row = await adapter.fetchone("SELECT a, b FROM pair")
        await task

        assert row == (1, 1)

    @pytest.mark.asyncio
    async def test_table_exists(self, adapter: SQLiteAdapter) -> None:
        """테이블 존재 확인"""
        assert await adapter.table_exists("nonexistent") is False

        async with adapter.transaction():
            await adapter.execute("CREATE TABLE existing (id INTEGER)")

        assert await adapter.table_exists("existing") is True

    @pytest.mark.asyncio
    async def test_context_manager(self, tmp_path: Path) -> None:
        """컨텍스트 매니저"""
        async with SQLiteAdapter(tmp_path / "ctx_test.db") as adapter:
            assert adapter.is_connected is True

        # 컨텍스트 종료 후 연결 해제 확인
        assert adapter.is_connected is False

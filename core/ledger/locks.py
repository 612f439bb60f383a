"""
계좌 락 관리자

계좌 단위 임계 구역. 여러 계좌를 잠글 때는 항상 계좌 ID 정렬 순서로 획득하여
반대 방향 재할당(A→B, B→A)이 동시에 일어나도 교착되지 않음.
"""

import asyncio
from contextlib import AsyncExitStack, asynccontextmanager
from typing import AsyncIterator, Iterable


class AccountLockManager:
    """계좌별 asyncio.Lock 레지스트리

    프로세스 내 모든 LedgerEngine이 하나의 인스턴스를 공유해야 함.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock_for(self, account_id: str) -> asyncio.Lock:
        lock = self._locks.get(account_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[account_id] = lock
        return lock

    @staticmethod
    def lock_order(account_ids: Iterable[str]) -> list[str]:
        """획득 순서 (중복 제거 + 정렬)"""
        return sorted(set(account_ids))

    @asynccontextmanager
    async def acquire(self, *account_ids: str) -> AsyncIterator[list[str]]:
        """여러 계좌 락을 정렬 순서로 획득

        Yields:
            획득한 계좌 ID 목록 (획득 순서)
        """
        ordered = self.lock_order(account_ids)
        async with AsyncExitStack() as stack:
            for account_id in ordered:
                await stack.enter_async_context(self._lock_for(account_id))
            yield ordered

    def is_locked(self, account_id: str) -> bool:
        """계좌 락 보유 여부 (테스트/진단용)"""
        lock = self._locks.get(account_id)
        return lock is not None and lock.locked()

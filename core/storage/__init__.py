"""
스토리지 모듈

Account Store, Category Store, Transaction Store 등 데이터 저장소 제공
"""

from core.storage.account_store import AccountStore
from core.storage.category_store import CategoryStore
from core.storage.transaction_store import TransactionFilter, TransactionStore

__all__ = [
    "AccountStore",
    "CategoryStore",
    "TransactionFilter",
    "TransactionStore",
]

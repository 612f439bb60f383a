"""
거래 원장 (Transaction Ledger)

계좌 잔고가 항상 해당 계좌 거래들의 잔고 효과 합계와 일치하도록
거래 생성/수정/삭제를 원자적으로 적용.

사용 예시:
```python
from core.ledger.engine import LedgerEngine
from core.ledger import NewTransaction

engine = LedgerEngine(db)

tx = await engine.create_transaction(
    user_id,
    NewTransaction(account_id=acc_id, type="expense", amount=2500, date=now_epoch()),
)

check = await engine.verify_account(user_id, acc_id)
assert check.is_consistent
```

주의: LedgerEngine은 core.storage에 의존하므로 여기서 재노출하지 않음.
"""

from core.ledger.errors import (
    InvalidArgumentError,
    LedgerError,
    LedgerInconsistentError,
    NotFoundError,
    StorageFailureError,
)
from core.ledger.models import (
    Account,
    BalanceCheck,
    Category,
    DeleteResult,
    NewTransaction,
    Transaction,
    TransactionChanges,
    TransactionDetail,
)
from core.ledger.tags import decode_tags, encode_tags, normalize_tags
from core.ledger.types import DEFAULT_CATEGORIES, UNSET

__all__ = [
    # 예외
    "LedgerError",
    "NotFoundError",
    "InvalidArgumentError",
    "StorageFailureError",
    "LedgerInconsistentError",
    # 모델
    "Account",
    "Category",
    "Transaction",
    "TransactionDetail",
    "NewTransaction",
    "TransactionChanges",
    "BalanceCheck",
    "DeleteResult",
    # 태그
    "normalize_tags",
    "encode_tags",
    "decode_tags",
    # 상수
    "DEFAULT_CATEGORIES",
    "UNSET",
]

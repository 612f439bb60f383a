"""
Ledger 타입 정의

기본 카테고리 목록 등 Ledger 시스템에서 사용하는 상수 정의
"""

from typing import Final


class _Unset:
    """부분 업데이트에서 "필드 없음"을 나타내는 센티넬

    None은 "null로 설정"을 의미하므로 별도 값이 필요.
    """

    _instance: "_Unset | None" = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Final = _Unset()


# 기본 카테고리 목록 (POST /api/money/init 에서 사용)
# (name, type, color, icon)
DEFAULT_CATEGORIES: list[tuple[str, str, str, str]] = [
    # expense
    ("Food & Dining", "expense", "#EF4444", "utensils"),
    ("Transportation", "expense", "#6B7280", "car"),
    ("Shopping", "expense", "#DC2626", "shopping-bag"),
    ("Entertainment", "expense", "#9CA3AF", "film"),
    ("Bills & Utilities", "expense", "#10B981", "receipt"),
    ("Healthcare", "expense", "#EF4444", "heart"),
    ("Education", "expense", "#6B7280", "book"),
    ("Travel", "expense", "#10B981", "plane"),
    ("Home & Garden", "expense", "#16A34A", "home"),
    ("Personal Care", "expense", "#DC2626", "user"),
    ("Insurance", "expense", "#6B7280", "shield"),
    ("Taxes", "expense", "#DC2626", "calculator"),
    ("Gifts & Donations", "expense", "#EF4444", "gift"),
    ("Other Expenses", "expense", "#64748B", "more-horizontal"),

    # income
    ("Salary", "income", "#16A34A", "briefcase"),
    ("Freelance", "income", "#10B981", "laptop"),
    ("Business", "income", "#6B7280", "building"),
    ("Investments", "income", "#DC2626", "trending-up"),
    ("Rental Income", "income", "#9CA3AF", "home"),
    ("Side Hustle", "income", "#22C55E", "zap"),
    ("Gifts Received", "income", "#EF4444", "gift"),
    ("Refunds", "income", "#6B7280", "refresh-cw"),
    ("Other Income", "income", "#16A34A", "plus"),
]

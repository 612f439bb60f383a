"""
타입 정의 모듈

Enum 등 핵심 타입 정의
모든 Enum은 str을 상속하여 문자열 직렬화 가능
"""

from enum import Enum


class Environment(str, Enum):
    """실행 환경 (운영 / 개발)"""

    PRODUCTION = "production"
    DEVELOPMENT = "development"


class AccountType(str, Enum):
    """계좌 유형"""

    CHECKING = "checking"
    SAVINGS = "savings"
    CREDIT = "credit"
    INVESTMENT = "investment"
    CASH = "cash"


class TransactionType(str, Enum):
    """거래 유형

    잔고 효과는 core.ledger.validation.effect_of 참고.
    """

    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"  # 라벨 전용, 잔고 효과 없음


class CategoryType(str, Enum):
    """카테고리 유형"""

    INCOME = "income"
    EXPENSE = "expense"


class RecurringFrequency(str, Enum):
    """반복 주기 (정보용, 엔진에서 전개하지 않음)"""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

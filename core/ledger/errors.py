"""
Ledger 예외 정의

- NotFoundError: 참조 대상 없음 또는 소유자 불일치
- InvalidArgumentError: 입력 검증 실패 (쓰기 이전에 발생)
- StorageFailureError: 저장소 오류 (롤백 완료, 재시도 가능)
- LedgerInconsistentError: 잔고 불변식 위반 감지
"""


class LedgerError(Exception):
    """Ledger 예외 최상위 클래스"""

    pass


class NotFoundError(LedgerError):
    """참조 대상 없음

    존재하지 않거나, 다른 소유자의 것이거나, 비활성 상태인 경우.
    """

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")


class InvalidArgumentError(LedgerError):
    """입력 검증 실패

    Args:
        field: 문제가 된 필드명
        message: 사람이 읽을 수 있는 설명
    """

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class StorageFailureError(LedgerError):
    """저장소 오류

    트랜잭션은 롤백된 상태이므로 동일 파라미터로 재시도 가능.
    """

    def __init__(self, message: str, retryable: bool = True):
        self.retryable = retryable
        super().__init__(message)


class LedgerInconsistentError(LedgerError):
    """저장된 잔고와 거래 합계가 다름"""

    def __init__(self, account_id: str, stored: int, expected: int):
        self.account_id = account_id
        self.stored = stored
        self.expected = expected
        super().__init__(
            f"Ledger inconsistent for account {account_id}: "
            f"stored={stored}, expected={expected}"
        )

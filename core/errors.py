"""
지갑 예외 정의

모든 도메인 예외는 WalletError를 상속.
CLI는 WalletError를 메시지로 표시하고 프로세스를 종료하지 않는다.

- InvalidArgumentError: 잘못된 입력 (저장소 변경 전에 검사)
- NotFoundError: 참조한 사용자/계좌/거래 없음
- InsufficientFundsError: 잔액 부족
- StoreError: 저장소 실패 (원인 예외 포함)
"""

from decimal import Decimal


class WalletError(Exception):
    """지갑 예외 베이스"""

    pass


class InvalidArgumentError(WalletError):
    """잘못된 입력 (음수 금액, 동일 계좌 이체 등)"""

    pass


class DuplicateEmailError(InvalidArgumentError):
    """이미 등록된 이메일"""

    def __init__(self, email: str):
        super().__init__(f"A user with email {email} already exists")
        self.email = email


class NotFoundError(WalletError):
    """참조한 엔티티 없음"""

    def __init__(self, entity: str, entity_id: object):
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class InsufficientFundsError(WalletError):
    """잔액 부족"""

    def __init__(self, account_id: int, balance: Decimal, requested: Decimal):
        super().__init__(
            f"Insufficient funds in account {account_id}: "
            f"balance {balance}, requested {requested}"
        )
        self.account_id = account_id
        self.balance = balance
        self.requested = requested


class StoreError(WalletError):
    """저장소 작업 실패

    연결 없음, 제약조건 위반, 잘못된 SQL 등을 하나의 유형으로 표면화.
    원인 예외는 cause 속성과 __cause__로 보존된다.
    """

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause


class ConcurrentUpdateError(StoreError):
    """잔액이 읽은 이후 다른 세션에서 변경됨 (compare-and-swap 실패)"""

    pass

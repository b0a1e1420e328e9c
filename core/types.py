"""
타입 정의 모듈

지갑 도메인에서 사용하는 Enum 정의
모든 Enum은 str을 상속하여 문자열 직렬화 가능

DB에서 읽은 값은 parse()로 엄격하게 변환한다.
알 수 없는 값을 기본값으로 대체하지 않고 ValueError를 발생시킨다.
"""

from enum import Enum


class _StrictEnum(str, Enum):
    """대소문자 무시 엄격 파싱을 제공하는 Enum 베이스"""

    @classmethod
    def parse(cls, value: str) -> "_StrictEnum":
        """문자열에서 Enum 생성

        Args:
            value: Enum 이름 (대소문자 무시)

        Returns:
            해당 Enum 멤버

        Raises:
            ValueError: 알 수 없는 값인 경우
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalized = value.strip().upper()
            for member in cls:
                if member.value == normalized:
                    return member
        valid = [m.value for m in cls]
        raise ValueError(f"Unknown {cls.__name__}: {value!r}. Valid values: {valid}")


class UserType(_StrictEnum):
    """사용자 유형"""

    CUSTOMER = "CUSTOMER"
    ADMIN = "ADMIN"


class TransactionType(_StrictEnum):
    """거래 유형"""

    TRANSFER = "TRANSFER"
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    PAYMENT = "PAYMENT"  # 정의만 존재 (기록 경로 없음)


class TransactionStatus(_StrictEnum):
    """거래 상태

    전이 규칙:
    - PENDING → COMPLETED: 잔액 변경 성공
    - PENDING → FAILED: 잔액 변경 실패
    - CANCELLED: 정의만 존재 (도달 경로 없음)
    """

    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        """종결 상태 여부"""
        return self is not TransactionStatus.PENDING

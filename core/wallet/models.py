"""
지갑 엔티티

User / Account / Transaction 데이터 클래스와 검증 함수.
DB 행(aiosqlite.Row 또는 dict)에서 from_row()로 생성한다.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Mapping

from core.constants import Defaults
from core.errors import StoreError
from core.types import TransactionStatus, TransactionType, UserType
from core.utils.money import format_money
from core.utils.timezone import from_db_timestamp

EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9+_.-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")
MIN_NAME_LENGTH = 3


def is_valid_email(email: str) -> bool:
    """이메일 형식 검증"""
    return bool(email) and EMAIL_PATTERN.match(email) is not None


def is_valid_full_name(full_name: str) -> bool:
    """이름 검증 (공백 제외 3자 이상)"""
    return bool(full_name) and len(full_name.strip()) >= MIN_NAME_LENGTH


def _parse_enum(enum_cls: Any, value: str, row_id: Any) -> Any:
    # 알 수 없는 값은 데이터 손상으로 간주
    try:
        return enum_cls.parse(value)
    except ValueError as e:
        raise StoreError(f"Corrupt row {row_id}: {e}", cause=e) from e


def _row_get(row: Mapping[str, Any], key: str) -> Any:
    return row[key] if key in row.keys() else None


@dataclass(frozen=True)
class User:
    """사용자

    Attributes:
        id: 사용자 ID
        full_name: 이름
        email: 이메일 (고유)
        password_hash: 비밀번호 해시
        user_type: CUSTOMER / ADMIN
        created_at: 생성 시각 (UTC)
    """

    id: int
    full_name: str
    email: str
    password_hash: str
    user_type: UserType = UserType.CUSTOMER
    created_at: datetime | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "User":
        """DB 행에서 생성"""
        return cls(
            id=row["id"],
            full_name=row["full_name"],
            email=row["email"],
            password_hash=row["password_hash"],
            user_type=_parse_enum(UserType, row["user_type"], row["id"]),
            created_at=from_db_timestamp(_row_get(row, "created_at")),
        )

    def __str__(self) -> str:
        return f"User(id={self.id}, name='{self.full_name}', email='{self.email}', type={self.user_type.value})"


@dataclass(frozen=True)
class Account:
    """계좌

    잔액은 항상 0 이상 (AccountLedger가 보장).

    Attributes:
        id: 계좌 ID
        user_id: 소유자 ID
        balance: 잔액 (Decimal)
        currency: 통화 코드
        created_at: 생성 시각 (UTC)
        updated_at: 수정 시각 (UTC)
    """

    id: int
    user_id: int
    balance: Decimal
    currency: str = Defaults.CURRENCY
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Account":
        """DB 행에서 생성"""
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            balance=Decimal(str(row["balance"])),
            currency=row["currency"],
            created_at=from_db_timestamp(_row_get(row, "created_at")),
            updated_at=from_db_timestamp(_row_get(row, "updated_at")),
        )

    def has_sufficient_funds(self, amount: Decimal) -> bool:
        """amount만큼 출금 가능한지 확인"""
        return amount > 0 and self.balance >= amount

    def formatted_balance(self) -> str:
        return format_money(self.balance, self.currency)

    def __str__(self) -> str:
        return f"Account(id={self.id}, user_id={self.user_id}, balance={self.formatted_balance()})"


@dataclass(frozen=True)
class Transaction:
    """거래 기록

    유형별 규칙:
    - TRANSFER: sender, receiver 모두 존재 (서로 다름)
    - DEPOSIT: receiver만 존재
    - WITHDRAWAL: sender만 존재

    Attributes:
        id: 거래 ID
        sender_account_id: 출금 계좌 ID
        receiver_account_id: 입금 계좌 ID
        amount: 금액 (> 0)
        currency: 통화 코드
        type: 거래 유형
        description: 설명
        status: 거래 상태
        created_at: 생성 시각 (UTC)
    """

    id: int
    sender_account_id: int | None
    receiver_account_id: int | None
    amount: Decimal
    type: TransactionType
    currency: str = Defaults.CURRENCY
    description: str | None = None
    status: TransactionStatus = TransactionStatus.PENDING
    created_at: datetime | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Transaction":
        """DB 행에서 생성"""
        return cls(
            id=row["id"],
            sender_account_id=row["sender_account_id"],
            receiver_account_id=row["receiver_account_id"],
            amount=Decimal(str(row["amount"])),
            currency=row["currency"],
            type=_parse_enum(TransactionType, row["type"], row["id"]),
            description=row["description"],
            status=_parse_enum(TransactionStatus, row["status"], row["id"]),
            created_at=from_db_timestamp(_row_get(row, "created_at")),
        )

    def is_transfer(self) -> bool:
        return (
            self.type == TransactionType.TRANSFER
            and self.sender_account_id is not None
            and self.receiver_account_id is not None
            and self.sender_account_id != self.receiver_account_id
        )

    def is_deposit(self) -> bool:
        return (
            self.type == TransactionType.DEPOSIT
            and self.receiver_account_id is not None
            and self.sender_account_id is None
        )

    def is_withdrawal(self) -> bool:
        return (
            self.type == TransactionType.WITHDRAWAL
            and self.sender_account_id is not None
            and self.receiver_account_id is None
        )

    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def formatted_amount(self) -> str:
        return format_money(self.amount, self.currency)

    def __str__(self) -> str:
        return (
            f"Transaction(id={self.id}, type={self.type.value}, "
            f"amount={self.formatted_amount()}, status={self.status.value})"
        )

"""
core/wallet/models.py 테스트

DB 행 변환과 엔티티 검증 헬퍼
"""

from decimal import Decimal

import pytest

from core.errors import StoreError
from core.types import TransactionStatus, TransactionType
from core.wallet.models import Account, Transaction, is_valid_email, is_valid_full_name


def transaction_row(**overrides: object) -> dict[str, object]:
    row: dict[str, object] = {
        "id": 1,
        "sender_account_id": 1,
        "receiver_account_id": 2,
        "amount": "10.00",
        "currency": "ARS",
        "type": "TRANSFER",
        "description": None,
        "status": "COMPLETED",
        "created_at": "2026-02-21T01:00:00.000000+00:00",
    }
    row.update(overrides)
    return row


class TestValidators:
    @pytest.mark.parametrize("email", ["juan@test.com", "a.b+c@mail.example.org"])
    def test_valid_email(self, email: str) -> None:
        assert is_valid_email(email) is True

    @pytest.mark.parametrize("email", ["", "juan", "juan@", "@test.com", "juan@test"])
    def test_invalid_email(self, email: str) -> None:
        assert is_valid_email(email) is False

    def test_full_name(self) -> None:
        assert is_valid_full_name("Ana") is True
        assert is_valid_full_name("  Al  ") is False


class TestAccount:
    """Account 테스트"""

    def test_from_row(self) -> None:
        account = Account.from_row(
            {"id": 1, "user_id": 2, "balance": "99.90", "currency": "ARS",
             "created_at": None, "updated_at": None}
        )

        assert account.balance == Decimal("99.90")
        assert account.formatted_balance() == "$ 99.90 ARS"

    def test_sufficient_funds(self) -> None:
        account = Account(id=1, user_id=1, balance=Decimal("10.00"))

        assert account.has_sufficient_funds(Decimal("10.00")) is True
        assert account.has_sufficient_funds(Decimal("10.01")) is False
        assert account.has_sufficient_funds(Decimal("0")) is False


class TestTransaction:
    """Transaction 테스트"""

    def test_from_row(self) -> None:
        tx = Transaction.from_row(transaction_row())

        assert tx.type == TransactionType.TRANSFER
        assert tx.status == TransactionStatus.COMPLETED
        assert tx.is_transfer() is True
        assert tx.is_terminal() is True
        assert tx.created_at is not None

    def test_kind_predicates(self) -> None:
        deposit = Transaction.from_row(transaction_row(type="DEPOSIT", sender_account_id=None))
        withdrawal = Transaction.from_row(transaction_row(type="WITHDRAWAL", receiver_account_id=None))

        assert deposit.is_deposit() and not deposit.is_transfer()
        assert withdrawal.is_withdrawal() and not withdrawal.is_deposit()

    @pytest.mark.parametrize("column, value", [("status", "LOST"), ("type", "REFUND")])
    def test_corrupt_enum_raises(self, column: str, value: str) -> None:
        """알 수 없는 값은 기본값으로 대체하지 않고 오류"""
        with pytest.raises(StoreError):
            Transaction.from_row(transaction_row(**{column: value}))

"""
core/types.py 테스트

모든 Enum이 문자열 직렬화 가능하고, parse()가 엄격하게 동작하는지 확인
"""

import pytest

from core.types import TransactionStatus, TransactionType, UserType


class TestUserType:
    """UserType 테스트"""

    def test_values(self) -> None:
        """값 확인"""
        assert UserType.CUSTOMER.value == "CUSTOMER"
        assert UserType.ADMIN.value == "ADMIN"

    def test_string_comparison(self) -> None:
        """str 상속으로 문자열과 비교 가능"""
        assert UserType.ADMIN == "ADMIN"

    def test_parse_case_insensitive(self) -> None:
        """대소문자 무시 파싱"""
        assert UserType.parse("customer") is UserType.CUSTOMER
        assert UserType.parse(" Admin ") is UserType.ADMIN

    def test_parse_member(self) -> None:
        """멤버는 그대로 반환"""
        assert UserType.parse(UserType.ADMIN) is UserType.ADMIN

    def test_parse_unknown_raises(self) -> None:
        """알 수 없는 값은 기본값으로 대체하지 않음"""
        with pytest.raises(ValueError):
            UserType.parse("SUPERUSER")


class TestTransactionType:
    """TransactionType 테스트"""

    def test_values(self) -> None:
        """값 확인"""
        assert {t.value for t in TransactionType} == {
            "TRANSFER",
            "DEPOSIT",
            "WITHDRAWAL",
            "PAYMENT",
        }

    def test_parse_unknown_raises(self) -> None:
        with pytest.raises(ValueError):
            TransactionType.parse("REFUND")

    def test_parse_non_string_raises(self) -> None:
        with pytest.raises(ValueError):
            TransactionType.parse(None)  # type: ignore[arg-type]


class TestTransactionStatus:
    """TransactionStatus 테스트"""

    def test_pending_not_terminal(self) -> None:
        assert TransactionStatus.PENDING.is_terminal is False

    @pytest.mark.parametrize(
        "status",
        [TransactionStatus.COMPLETED, TransactionStatus.FAILED, TransactionStatus.CANCELLED],
    )
    def test_terminal_statuses(self, status: TransactionStatus) -> None:
        """PENDING 외 상태는 종결 상태"""
        assert status.is_terminal is True

    def test_parse(self) -> None:
        assert TransactionStatus.parse("completed") is TransactionStatus.COMPLETED

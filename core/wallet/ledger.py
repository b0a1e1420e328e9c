"""
계좌 원장 (Account Ledger)

계좌 생성과 잔액 변경(입금/출금/이체)을 담당.
잔액 >= 0 불변식을 보장한다.

잔액 변경 방식:
- BEGIN IMMEDIATE 그룹 안에서 현재 잔액 조회 → 검증 → 갱신
- 갱신은 읽은 잔액을 조건으로 하는 compare-and-swap
  (UPDATE ... WHERE id = ? AND balance = ?old)
- 영향받은 행이 없으면 ConcurrentUpdateError, 그룹 전체 롤백
"""

import logging
import re
from decimal import Decimal

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.constants import Defaults
from core.errors import (
    ConcurrentUpdateError,
    InsufficientFundsError,
    InvalidArgumentError,
    NotFoundError,
)
from core.utils.money import MONEY_MAX, to_money
from core.utils.timezone import now_utc, to_db_timestamp
from core.wallet.models import Account

logger = logging.getLogger(__name__)

CURRENCY_PATTERN = re.compile(r"^[A-Z]{3}$")

Amount = Decimal | int | float | str


def validate_amount(amount: Amount) -> Decimal:
    """금액 검증 및 정규화

    Returns:
        소수점 2자리 Decimal (> 0)

    Raises:
        InvalidArgumentError: 숫자가 아니거나, 0 이하이거나, 1센트 미만 단위가 있거나,
            MONEY_MAX를 넘는 경우
    """
    try:
        value = to_money(amount, exact=True)
    except ValueError as e:
        raise InvalidArgumentError(str(e)) from e

    if value <= 0:
        raise InvalidArgumentError(f"Amount must be greater than 0: {amount}")
    return value


def normalize_currency(currency: str) -> str:
    """통화 코드 정규화 (ISO 4217 형식 3자리 대문자)"""
    code = (currency or "").strip().upper()
    if not CURRENCY_PATTERN.match(code):
        raise InvalidArgumentError(f"Invalid currency code: {currency!r}")
    return code


class AccountLedger:
    """계좌 원장

    Args:
        db: SQLite 어댑터
        default_currency: 통화 미지정 시 사용할 통화
    """

    def __init__(self, db: SQLiteAdapter, default_currency: str = Defaults.CURRENCY):
        self.db = db
        self.default_currency = normalize_currency(default_currency)

    # =========================================================================
    # 계좌
    # =========================================================================

    async def create_account(
        self,
        owner_id: int,
        initial_balance: Amount = 0,
        currency: str | None = None,
    ) -> int:
        """계좌 생성

        Args:
            owner_id: 소유자 사용자 ID
            initial_balance: 초기 잔액 (>= 0)
            currency: 통화 코드 (None이면 기본 통화)

        Returns:
            생성된 계좌 ID

        Raises:
            InvalidArgumentError: 초기 잔액 음수, 통화 코드 오류, 소유자 없음
        """
        try:
            balance = to_money(initial_balance, exact=True)
        except ValueError as e:
            raise InvalidArgumentError(str(e)) from e

        if balance < 0:
            raise InvalidArgumentError("Initial balance cannot be negative")

        code = normalize_currency(currency or self.default_currency)

        if not await self.db.exists("users", "id = ?", (owner_id,)):
            raise InvalidArgumentError(f"Owner does not exist: {owner_id}")

        now = to_db_timestamp(now_utc())
        account_id = await self.db.execute_insert(
            """
            INSERT INTO accounts (user_id, balance, currency, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (owner_id, str(balance), code, now, now),
        )

        logger.info(
            "Account created",
            extra={"account_id": account_id, "user_id": owner_id, "currency": code},
        )
        return account_id

    async def find_account(self, account_id: int) -> Account | None:
        """계좌 조회 (없으면 None)"""
        row = await self.db.query_one("SELECT * FROM accounts WHERE id = ?", (account_id,))
        return Account.from_row(row) if row else None

    async def get_account(self, account_id: int) -> Account:
        """계좌 조회

        Raises:
            NotFoundError: 계좌가 없는 경우
        """
        account = await self.find_account(account_id)
        if account is None:
            raise NotFoundError("Account", account_id)
        return account

    async def list_accounts(self, user_id: int) -> list[Account]:
        """사용자의 전체 계좌 (ID 순)"""
        rows = await self.db.query(
            "SELECT * FROM accounts WHERE user_id = ? ORDER BY id",
            (user_id,),
        )
        return [Account.from_row(row) for row in rows]

    async def total_balance(self, user_id: int, currency: str | None = None) -> Decimal:
        """사용자 계좌 잔액 합계 (지정 통화)"""
        code = normalize_currency(currency or self.default_currency)
        accounts = await self.list_accounts(user_id)
        return sum(
            (a.balance for a in accounts if a.currency == code),
            Decimal("0.00"),
        )

    async def get_balance(self, account_id: int) -> Decimal:
        """잔액 조회

        Raises:
            NotFoundError: 계좌가 없는 경우
        """
        return (await self.get_account(account_id)).balance

    # =========================================================================
    # 잔액 변경
    # =========================================================================

    async def deposit(self, account_id: int, amount: Amount) -> Decimal:
        """입금

        Returns:
            입금 후 잔액

        Raises:
            InvalidArgumentError: 금액 <= 0, 잔액 한도(MONEY_MAX) 초과
            NotFoundError: 계좌 없음
        """
        value = validate_amount(amount)

        async with self.db.transaction():
            account = await self.get_account(account_id)
            new_balance = await self._apply_balance(account, account.balance + value)

        logger.info("Deposit applied", extra={"account_id": account_id, "amount": str(value)})
        return new_balance

    async def withdraw(self, account_id: int, amount: Amount) -> Decimal:
        """출금

        Returns:
            출금 후 잔액

        Raises:
            InvalidArgumentError: 금액 <= 0
            NotFoundError: 계좌 없음
            InsufficientFundsError: 잔액 < 금액
        """
        value = validate_amount(amount)

        async with self.db.transaction():
            account = await self.get_account(account_id)
            if not account.has_sufficient_funds(value):
                raise InsufficientFundsError(account_id, account.balance, value)
            new_balance = await self._apply_balance(account, account.balance - value)

        logger.info("Withdrawal applied", extra={"account_id": account_id, "amount": str(value)})
        return new_balance

    async def transfer(self, from_id: int, to_id: int, amount: Amount) -> None:
        """계좌 간 이체

        출금 계좌 차감과 입금 계좌 증가를 하나의 트랜잭션 그룹으로 실행.
        차감만 되고 증가되지 않은 상태는 외부에서 관찰할 수 없다.

        Raises:
            InvalidArgumentError: 금액 <= 0, 동일 계좌, 통화 불일치
            NotFoundError: 계좌 없음
            InsufficientFundsError: 출금 계좌 잔액 부족
        """
        value = validate_amount(amount)
        if from_id == to_id:
            raise InvalidArgumentError("Cannot transfer to the same account")

        async with self.db.transaction():
            source = await self.get_account(from_id)
            destination = await self.get_account(to_id)

            if source.currency != destination.currency:
                raise InvalidArgumentError(
                    f"Currency mismatch: {source.currency} -> {destination.currency}"
                )
            if not source.has_sufficient_funds(value):
                raise InsufficientFundsError(from_id, source.balance, value)

            await self._apply_balance(source, source.balance - value)
            await self._apply_balance(destination, destination.balance + value)

        logger.info(
            "Transfer applied",
            extra={"from_account": from_id, "to_account": to_id, "amount": str(value)},
        )

    async def _apply_balance(self, account: Account, new_balance: Decimal) -> Decimal:
        """잔액 compare-and-swap 갱신 (트랜잭션 그룹 내부에서만 호출)"""
        if new_balance < 0:
            raise InsufficientFundsError(account.id, account.balance, account.balance - new_balance)
        if new_balance > MONEY_MAX:
            raise InvalidArgumentError(f"Balance limit exceeded for account {account.id} (max {MONEY_MAX})")

        affected = await self.db.execute_mutation(
            """
            UPDATE accounts SET balance = ?, updated_at = ?
            WHERE id = ? AND balance = ?
            """,
            (str(new_balance), to_db_timestamp(now_utc()), account.id, str(account.balance)),
        )
        if affected != 1:
            raise ConcurrentUpdateError(f"Balance of account {account.id} changed concurrently")
        return new_balance

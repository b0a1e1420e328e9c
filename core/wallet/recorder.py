"""
거래 기록기 (Transaction Recorder)

거래 기록 → 잔액 변경 → 상태 확정 프로토콜:
1. 입력 검증, 계좌 확인 (기록 생성 전)
2. PENDING 거래 기록 삽입 (단독 커밋)
3. 잔액 변경 + COMPLETED 갱신을 하나의 트랜잭션 그룹으로 실행
4. 실패 시 그룹 롤백 → FAILED 갱신 → 원래 예외 재발생

3단계가 원자적이므로 잔액이 변경된 거래가 PENDING으로 남을 수 없다.
프로세스가 2~3단계 사이에 종료되면 PENDING이 남지만 잔액은 변경되지 않았으므로
reconcile_stale_pending()이 FAILED로 정리한다.
"""

import logging
from datetime import timedelta
from decimal import Decimal
from typing import Any, Awaitable, Callable

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.constants import Defaults
from core.errors import InvalidArgumentError, StoreError
from core.types import TransactionStatus, TransactionType
from core.utils.timezone import now_utc, to_db_timestamp
from core.wallet.ledger import AccountLedger, Amount, validate_amount

logger = logging.getLogger(__name__)


class TransactionRecorder:
    """거래 기록기

    Args:
        db: SQLite 어댑터
        ledger: 계좌 원장
    """

    def __init__(self, db: SQLiteAdapter, ledger: AccountLedger):
        self.db = db
        self.ledger = ledger

    async def record_transfer(
        self,
        from_id: int,
        to_id: int,
        amount: Amount,
        description: str | None = None,
    ) -> int:
        """이체 기록 및 실행

        Returns:
            거래 ID

        Raises:
            InvalidArgumentError: 금액 <= 0, 동일 계좌 (기록 생성 전)
            NotFoundError: 계좌 없음 (기록 생성 전)
            InsufficientFundsError: 잔액 부족 (FAILED 기록 후)
            StoreError: 저장소 실패 (FAILED 기록 후)
        """
        value = validate_amount(amount)
        if from_id == to_id:
            raise InvalidArgumentError("Cannot transfer to the same account")

        source = await self.ledger.get_account(from_id)
        await self.ledger.get_account(to_id)

        tx_id = await self._insert_pending(
            TransactionType.TRANSFER,
            sender_id=from_id,
            receiver_id=to_id,
            amount=value,
            currency=source.currency,
            description=description or Defaults.TRANSFER_DESCRIPTION,
        )
        await self._complete(tx_id, lambda: self.ledger.transfer(from_id, to_id, value))
        return tx_id

    async def record_deposit(
        self,
        account_id: int,
        amount: Amount,
        description: str | None = None,
    ) -> int:
        """입금 기록 및 실행

        Returns:
            거래 ID
        """
        value = validate_amount(amount)
        account = await self.ledger.get_account(account_id)

        tx_id = await self._insert_pending(
            TransactionType.DEPOSIT,
            sender_id=None,
            receiver_id=account_id,
            amount=value,
            currency=account.currency,
            description=description or Defaults.DEPOSIT_DESCRIPTION,
        )
        await self._complete(tx_id, lambda: self.ledger.deposit(account_id, value))
        return tx_id

    async def record_withdrawal(
        self,
        account_id: int,
        amount: Amount,
        description: str | None = None,
    ) -> int:
        """출금 기록 및 실행

        Returns:
            거래 ID
        """
        value = validate_amount(amount)
        account = await self.ledger.get_account(account_id)

        tx_id = await self._insert_pending(
            TransactionType.WITHDRAWAL,
            sender_id=account_id,
            receiver_id=None,
            amount=value,
            currency=account.currency,
            description=description or Defaults.WITHDRAWAL_DESCRIPTION,
        )
        await self._complete(tx_id, lambda: self.ledger.withdraw(account_id, value))
        return tx_id

    async def reconcile_stale_pending(
        self,
        older_than: timedelta = timedelta(minutes=Defaults.PENDING_MAX_AGE_MINUTES),
    ) -> list[int]:
        """오래된 PENDING 거래를 FAILED로 정리

        Args:
            older_than: 생성 후 경과 시간 기준

        Returns:
            FAILED로 변경된 거래 ID 목록
        """
        cutoff = to_db_timestamp(now_utc() - older_than)

        async with self.db.transaction():
            rows = await self.db.query(
                """
                SELECT id FROM transactions
                WHERE status = ? AND created_at < ?
                ORDER BY id
                """,
                (TransactionStatus.PENDING.value, cutoff),
            )
            stale_ids = [row["id"] for row in rows]
            for tx_id in stale_ids:
                await self.db.execute_mutation(
                    "UPDATE transactions SET status = ? WHERE id = ? AND status = ?",
                    (TransactionStatus.FAILED.value, tx_id, TransactionStatus.PENDING.value),
                )

        for tx_id in stale_ids:
            logger.warning("Stale pending transaction marked FAILED", extra={"transaction_id": tx_id})

        return stale_ids

    # =========================================================================
    # 내부
    # =========================================================================

    async def _insert_pending(
        self,
        tx_type: TransactionType,
        sender_id: int | None,
        receiver_id: int | None,
        amount: Decimal,
        currency: str,
        description: str,
    ) -> int:
        if self.db.in_transaction:
            raise RuntimeError("Transactions must be recorded outside an open transaction group")

        tx_id = await self.db.execute_insert(
            """
            INSERT INTO transactions (
                sender_account_id, receiver_account_id, amount, currency,
                type, description, status, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                sender_id,
                receiver_id,
                str(amount),
                currency,
                tx_type.value,
                description,
                TransactionStatus.PENDING.value,
                to_db_timestamp(now_utc()),
            ),
        )
        logger.debug(
            "Pending transaction recorded",
            extra={"transaction_id": tx_id, "type": tx_type.value, "amount": str(amount)},
        )
        return tx_id

    async def _complete(self, tx_id: int, mutation: Callable[[], Awaitable[Any]]) -> None:
        """잔액 변경과 COMPLETED 갱신을 한 그룹으로 실행, 실패 시 FAILED 기록"""
        try:
            async with self.db.transaction():
                await mutation()
                await self._set_status(tx_id, TransactionStatus.COMPLETED)
        except Exception as e:
            await self._mark_failed(tx_id, e)
            raise

        logger.info("Transaction completed", extra={"transaction_id": tx_id})

    async def _set_status(self, tx_id: int, status: TransactionStatus) -> None:
        # PENDING에서만 한 번 전이
        affected = await self.db.execute_mutation(
            "UPDATE transactions SET status = ? WHERE id = ? AND status = ?",
            (status.value, tx_id, TransactionStatus.PENDING.value),
        )
        if affected != 1:
            raise StoreError(f"Transaction {tx_id} is no longer PENDING")

    async def _mark_failed(self, tx_id: int, error: Exception) -> None:
        """FAILED 기록 (이 기록의 실패는 원래 예외를 가리지 않도록 로그만 남김)"""
        try:
            await self._set_status(tx_id, TransactionStatus.FAILED)
        except Exception as status_error:
            logger.error(
                f"Could not mark transaction {tx_id} as FAILED",
                extra={"error": str(status_error), "original_error": str(error)},
            )
            return

        logger.info(
            "Transaction failed",
            extra={"transaction_id": tx_id, "error_type": type(error).__name__, "error": str(error)},
        )

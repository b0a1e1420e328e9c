"""TransactionRecorder 통합 테스트

기록 → 잔액 변경 → 상태 확정 프로토콜과 예시 시나리오 검증.
"""

import logging
from datetime import timedelta
from decimal import Decimal

import pytest

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.errors import (
    ConcurrentUpdateError,
    InsufficientFundsError,
    InvalidArgumentError,
    NotFoundError,
    StoreError,
)
from core.types import TransactionStatus, TransactionType
from core.utils.money import MONEY_MAX
from core.utils.timezone import now_utc, to_db_timestamp
from core.wallet import AccountLedger, HistoryQuery, TransactionRecorder, UserService


async def transaction_count(db: SQLiteAdapter) -> int:
    return await db.count_records("transactions")


class TestWalletScenarios:
    """대표 시나리오"""

    @pytest.mark.asyncio
    async def test_scenarios(
        self,
        users: UserService,
        ledger: AccountLedger,
        recorder: TransactionRecorder,
        history: HistoryQuery,
        db: SQLiteAdapter,
        maria_id: int,
    ) -> None:
        # 1. 사용자/계좌 생성 후 이체
        ana_id = await users.register("Ana", "ana@test.com", "ana12345")
        account_a = await ledger.create_account(ana_id, "1000")
        account_b = await ledger.create_account(maria_id, "500")

        transfer_id = await recorder.record_transfer(account_a, account_b, "100")

        assert await ledger.get_balance(account_a) == Decimal("900.00")
        assert await ledger.get_balance(account_b) == Decimal("600.00")
        transfer = await history.get_transaction(transfer_id)
        assert transfer.type == TransactionType.TRANSFER
        assert transfer.status == TransactionStatus.COMPLETED
        assert transfer.is_transfer()

        # 2. 잔액 초과 출금 → FAILED 기록, 잔액 불변
        with pytest.raises(InsufficientFundsError):
            await recorder.record_withdrawal(account_a, "2000")
        assert await ledger.get_balance(account_a) == Decimal("900.00")

        # 3. 음수 입금 → 기록 생성 전 거부
        before = await transaction_count(db)
        with pytest.raises(InvalidArgumentError):
            await recorder.record_deposit(account_b, "-5")
        assert await transaction_count(db) == before

        # 4. 동일 계좌 이체
        with pytest.raises(InvalidArgumentError):
            await recorder.record_transfer(account_a, account_a, "10")
        assert await transaction_count(db) == before

        # 5. 최신 1건은 실패한 출금
        latest = await history.history_for_account(account_a, 1)
        assert len(latest) == 1
        assert latest[0].type == TransactionType.WITHDRAWAL
        assert latest[0].status == TransactionStatus.FAILED


class TestRecordOperations:
    """기록 연산 테스트"""

    @pytest.mark.asyncio
    async def test_deposit_completed(
        self, recorder: TransactionRecorder, history: HistoryQuery, ledger: AccountLedger, account_a: int
    ) -> None:
        tx_id = await recorder.record_deposit(account_a, "50")

        tx = await history.get_transaction(tx_id)
        assert tx.is_deposit()
        assert tx.status == TransactionStatus.COMPLETED
        assert tx.amount == Decimal("50.00")
        assert tx.description == "Deposit"
        assert await ledger.get_balance(account_a) == Decimal("1050.00")

    @pytest.mark.asyncio
    async def test_withdrawal_completed(
        self, recorder: TransactionRecorder, history: HistoryQuery, account_a: int
    ) -> None:
        tx_id = await recorder.record_withdrawal(account_a, "1000", "rent")

        tx = await history.get_transaction(tx_id)
        assert tx.is_withdrawal()
        assert tx.status == TransactionStatus.COMPLETED
        assert tx.description == "rent"

    @pytest.mark.asyncio
    async def test_transfer_currency_recorded(
        self, recorder: TransactionRecorder, history: HistoryQuery, account_a: int, account_b: int
    ) -> None:
        tx_id = await recorder.record_transfer(account_a, account_b, "1")
        tx = await history.get_transaction(tx_id)

        assert tx.currency == "ARS"
        assert tx.sender_account_id == account_a
        assert tx.receiver_account_id == account_b

    @pytest.mark.asyncio
    async def test_missing_account_creates_no_record(
        self, recorder: TransactionRecorder, db: SQLiteAdapter, account_a: int
    ) -> None:
        """존재하지 않는 계좌는 기록 생성 전 거부"""
        with pytest.raises(NotFoundError):
            await recorder.record_transfer(account_a, 999, "10")
        with pytest.raises(NotFoundError):
            await recorder.record_deposit(999, "10")

        assert await transaction_count(db) == 0

    @pytest.mark.asyncio
    async def test_sub_cent_amount_creates_no_record(
        self,
        recorder: TransactionRecorder,
        ledger: AccountLedger,
        db: SQLiteAdapter,
        account_a: int,
        account_b: int,
    ) -> None:
        """1센트 미만 금액은 0.01로 기록되지 않고 거부"""
        with pytest.raises(InvalidArgumentError):
            await recorder.record_deposit(account_a, "0.005")
        with pytest.raises(InvalidArgumentError):
            await recorder.record_transfer(account_a, account_b, "1.001")

        assert await transaction_count(db) == 0
        assert await ledger.get_balance(account_a) == Decimal("1000.00")

    @pytest.mark.asyncio
    async def test_failed_transfer_recorded(
        self, recorder: TransactionRecorder, history: HistoryQuery, ledger: AccountLedger,
        account_a: int, account_b: int,
    ) -> None:
        """잔액 부족 이체는 FAILED로 남고 양쪽 잔액 불변"""
        with pytest.raises(InsufficientFundsError):
            await recorder.record_transfer(account_b, account_a, "600")

        failed = await history.list_by_status(TransactionStatus.FAILED)
        assert len(failed) == 1
        assert failed[0].type == TransactionType.TRANSFER
        assert await ledger.get_balance(account_a) == Decimal("1000.00")
        assert await ledger.get_balance(account_b) == Decimal("500.00")

    @pytest.mark.asyncio
    async def test_deposit_over_balance_limit_recorded_failed(
        self, recorder: TransactionRecorder, history: HistoryQuery, ledger: AccountLedger,
        account_a: int,
    ) -> None:
        """잔액 한도를 넘는 입금은 FAILED로 남고 잔액 불변"""
        with pytest.raises(InvalidArgumentError):
            await recorder.record_deposit(account_a, MONEY_MAX)

        failed = await history.list_by_status(TransactionStatus.FAILED)
        assert [tx.type for tx in failed] == [TransactionType.DEPOSIT]
        assert await ledger.get_balance(account_a) == Decimal("1000.00")

    @pytest.mark.asyncio
    async def test_store_failure_marks_failed(
        self,
        recorder: TransactionRecorder,
        ledger: AccountLedger,
        history: HistoryQuery,
        account_a: int,
        account_b: int,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """잔액 변경 중 저장소 실패 → 롤백 후 FAILED, 원래 예외 재발생"""

        async def conflicting_update(account, new_balance):
            raise ConcurrentUpdateError("simulated conflict")

        monkeypatch.setattr(ledger, "_apply_balance", conflicting_update)

        with pytest.raises(ConcurrentUpdateError):
            await recorder.record_transfer(account_a, account_b, "10")

        assert [tx.status for tx in await history.history_for_account(account_a)] == [
            TransactionStatus.FAILED
        ]

    @pytest.mark.asyncio
    async def test_no_pending_left_behind(
        self, recorder: TransactionRecorder, history: HistoryQuery, account_a: int, account_b: int
    ) -> None:
        """성공/실패 모두 PENDING이 남지 않음"""
        await recorder.record_transfer(account_a, account_b, "10")
        with pytest.raises(InsufficientFundsError):
            await recorder.record_withdrawal(account_b, "9999")

        assert await history.list_by_status(TransactionStatus.PENDING) == []

    @pytest.mark.asyncio
    async def test_recording_inside_open_group_rejected(
        self, recorder: TransactionRecorder, db: SQLiteAdapter, account_a: int
    ) -> None:
        """PENDING 기록은 단독 커밋이 필요하므로 열린 그룹 안에서 호출 불가"""
        with pytest.raises(RuntimeError):
            async with db.transaction():
                await recorder.record_deposit(account_a, "10")

        assert await transaction_count(db) == 0


class TestStatusTransitions:
    """상태 전이 테스트"""

    @pytest.mark.asyncio
    async def test_terminal_status_is_final(
        self, recorder: TransactionRecorder, history: HistoryQuery, account_a: int
    ) -> None:
        """종결 상태에서는 다시 전이하지 않음"""
        tx_id = await recorder.record_deposit(account_a, "1")

        with pytest.raises(StoreError):
            await recorder._set_status(tx_id, TransactionStatus.FAILED)

        assert (await history.get_transaction(tx_id)).status == TransactionStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_failed_status_write_failure_is_logged(
        self,
        recorder: TransactionRecorder,
        history: HistoryQuery,
        account_b: int,
        monkeypatch: pytest.MonkeyPatch,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """FAILED 기록 실패는 로그로 남고 원래 예외가 전달됨"""
        original = recorder._set_status

        async def failing_failed_write(tx_id, status):
            if status == TransactionStatus.FAILED:
                raise StoreError("disk full")
            return await original(tx_id, status)

        monkeypatch.setattr(recorder, "_set_status", failing_failed_write)

        with caplog.at_level(logging.ERROR, logger="core.wallet.recorder"):
            with pytest.raises(InsufficientFundsError):
                await recorder.record_withdrawal(account_b, "501")

        assert any("FAILED" in record.getMessage() for record in caplog.records)
        # 잔액 변경은 롤백되었으므로 PENDING으로 남은 기록은 정리 대상
        pending = await history.list_by_status(TransactionStatus.PENDING)
        assert len(pending) == 1


class TestReconcileStalePending:
    """오래된 PENDING 정리 테스트"""

    async def insert_pending(self, db: SQLiteAdapter, account_id: int, age: timedelta) -> int:
        return await db.execute_insert(
            """
            INSERT INTO transactions (
                sender_account_id, receiver_account_id, amount, currency,
                type, description, status, created_at
            ) VALUES (NULL, ?, '10.00', 'ARS', 'DEPOSIT', 'Deposit', 'PENDING', ?)
            """,
            (account_id, to_db_timestamp(now_utc() - age)),
        )

    @pytest.mark.asyncio
    async def test_marks_old_pending_failed(
        self,
        recorder: TransactionRecorder,
        history: HistoryQuery,
        ledger: AccountLedger,
        db: SQLiteAdapter,
        account_a: int,
    ) -> None:
        old_id = await self.insert_pending(db, account_a, timedelta(hours=1))
        recent_id = await self.insert_pending(db, account_a, timedelta(seconds=0))

        reconciled = await recorder.reconcile_stale_pending(timedelta(minutes=5))

        assert reconciled == [old_id]
        assert (await history.get_transaction(old_id)).status == TransactionStatus.FAILED
        assert (await history.get_transaction(recent_id)).status == TransactionStatus.PENDING
        # 잔액은 변경하지 않음
        assert await ledger.get_balance(account_a) == Decimal("1000.00")

    @pytest.mark.asyncio
    async def test_nothing_to_reconcile(self, recorder: TransactionRecorder) -> None:
        assert await recorder.reconcile_stale_pending() == []

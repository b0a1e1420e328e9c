"""
콘솔 입출력

입력은 주입 가능한 비동기 reader로 받는다 (테스트에서 스크립트 입력 사용).
출력은 writer(기본 print)로 보낸다.
"""

import asyncio
from decimal import Decimal
from typing import Awaitable, Callable, Iterable

from core.utils.money import to_money
from core.utils.timezone import format_local
from core.wallet.models import Account, Transaction

Reader = Callable[[str], Awaitable[str]]
Writer = Callable[[str], None]

SEPARATOR_WIDTH = 50


async def stdin_reader(prompt: str) -> str:
    """표준 입력 reader (EOF 시 EOFError)"""
    return await asyncio.to_thread(input, prompt)


class Console:
    """메뉴용 콘솔

    Args:
        reader: 프롬프트를 받아 한 줄을 반환하는 비동기 함수
        writer: 한 줄 출력 함수
    """

    def __init__(self, reader: Reader = stdin_reader, writer: Writer = print):
        self._reader = reader
        self._writer = writer

    # -------------------------------------------------------------------------
    # 입력
    # -------------------------------------------------------------------------

    async def read_text(self, prompt: str) -> str:
        return (await self._reader(f"{prompt}: ")).strip()

    async def read_int(self, prompt: str) -> int | None:
        """정수 입력 (잘못된 입력이면 오류 표시 후 None)"""
        raw = await self.read_text(prompt)
        try:
            return int(raw)
        except ValueError:
            self.error("Please enter a valid number")
            return None

    async def read_optional_int(self, prompt: str) -> tuple[bool, int | None]:
        """빈 입력 허용 정수 입력

        Returns:
            (유효 여부, 값) - 빈 입력은 (True, None)
        """
        raw = await self.read_text(prompt)
        if not raw:
            return True, None
        try:
            return True, int(raw)
        except ValueError:
            self.error("Please enter a valid number")
            return False, None

    async def read_amount(self, prompt: str, allow_empty: bool = False) -> Decimal | None:
        """금액 입력 (부호 검증은 코어에서 수행)"""
        raw = await self.read_text(prompt)
        if not raw and allow_empty:
            return Decimal("0.00")
        try:
            # 소수점 쉼표 허용 (1000,50)
            if "." not in raw:
                raw = raw.replace(",", ".")
            return to_money(raw, exact=True)
        except ValueError:
            self.error("Please enter a valid amount")
            return None

    async def confirm(self, prompt: str) -> bool:
        answer = await self.read_text(f"{prompt} (y/n)")
        return answer.lower() in ("y", "yes", "s", "si")

    # -------------------------------------------------------------------------
    # 출력
    # -------------------------------------------------------------------------

    def write(self, text: str = "") -> None:
        self._writer(text)

    def success(self, message: str) -> None:
        self.write(f"\n[OK] {message}\n")

    def error(self, message: str) -> None:
        self.write(f"\n[ERROR] {message}\n")

    def warning(self, message: str) -> None:
        self.write(f"\n[WARN] {message}\n")

    def info(self, message: str) -> None:
        self.write(f"\n{message}\n")

    def title(self, title: str) -> None:
        border = "=" * (len(title) + 4)
        self.write(f"\n{border}\n  {title}\n{border}")

    def separator(self) -> None:
        self.write("-" * SEPARATOR_WIDTH)

    def show_accounts(self, accounts: Iterable[Account]) -> None:
        accounts = list(accounts)
        if not accounts:
            self.info("You have no accounts yet")
            return
        for account in accounts:
            self.write(f"  #{account.id:<6} {account.formatted_balance()}")

    def show_transactions(self, transactions: Iterable[Transaction]) -> None:
        transactions = list(transactions)
        if not transactions:
            self.info("No transactions found")
            return

        self.write(f"{'ID':<6} {'DATE':<19} {'TYPE':<11} {'FROM':>6} {'TO':>6} {'AMOUNT':>18} STATUS")
        self.separator()
        for tx in transactions:
            date = format_local(tx.created_at) if tx.created_at else "-"
            sender = tx.sender_account_id if tx.sender_account_id is not None else "-"
            receiver = tx.receiver_account_id if tx.receiver_account_id is not None else "-"
            self.write(
                f"{tx.id:<6} {date:<19} {tx.type.value:<11} {sender!s:>6} {receiver!s:>6} "
                f"{tx.formatted_amount():>18} {tx.status.value}"
            )

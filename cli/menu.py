"""
메인 메뉴

번호 메뉴 텍스트 UI. 코어 서비스만 호출하고,
WalletError는 메시지로 표시하며 프로세스를 종료하지 않는다.
"""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from cli.console import Console
from core.errors import NotFoundError, StoreError, WalletError
from core.utils.money import format_money
from core.wallet import (
    Account,
    AccountLedger,
    HistoryQuery,
    TransactionRecorder,
    User,
    UserService,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WalletServices:
    """메뉴가 사용하는 코어 서비스 묶음"""

    users: UserService
    ledger: AccountLedger
    recorder: TransactionRecorder
    history: HistoryQuery


class MainMenu:
    """메인 메뉴

    Args:
        services: 코어 서비스
        console: 콘솔 입출력
    """

    def __init__(self, services: WalletServices, console: Console):
        self.services = services
        self.console = console
        self.current_user: User | None = None
        self._running = False

        self._signed_out_actions: dict[str, Callable[[], Awaitable[None]]] = {
            "1": self.sign_in,
            "2": self.register,
            "3": self.exit,
        }
        self._signed_in_actions: dict[str, Callable[[], Awaitable[None]]] = {
            "1": self.create_account,
            "2": self.check_balance,
            "3": self.send_money,
            "4": self.view_history,
            "5": self.deposit,
            "6": self.withdraw,
            "7": self.list_accounts,
            "8": self.sign_out,
            "9": self.exit,
        }

    async def run(self) -> None:
        """메뉴 루프 (종료 선택 또는 입력 종료까지)"""
        self._running = True
        self.console.title("VIRTUAL WALLET")

        try:
            while self._running:
                if self.current_user is None:
                    await self._dispatch(self._show_signed_out_menu(), self._signed_out_actions)
                else:
                    await self._dispatch(self._show_signed_in_menu(), self._signed_in_actions)
        except (EOFError, KeyboardInterrupt):
            self._running = False

        self.console.info("Thanks for using the Virtual Wallet")

    def _show_signed_out_menu(self) -> str:
        self.console.write("\n=== MAIN MENU ===")
        self.console.write("1. Sign in")
        self.console.write("2. Register")
        self.console.write("3. Exit")
        return "Choose an option"

    def _show_signed_in_menu(self) -> str:
        assert self.current_user is not None
        self.console.write("\n=== MAIN MENU ===")
        self.console.write(f"User: {self.current_user.full_name}")
        self.console.separator()
        self.console.write("1. Create account")
        self.console.write("2. Check balance")
        self.console.write("3. Send money")
        self.console.write("4. View history")
        self.console.write("5. Deposit")
        self.console.write("6. Withdraw")
        self.console.write("7. List my accounts")
        self.console.write("8. Sign out")
        self.console.write("9. Exit")
        return "Choose an option"

    async def _dispatch(self, prompt: str, actions: dict[str, Callable[[], Awaitable[None]]]) -> None:
        choice = await self.console.read_text(prompt)
        action = actions.get(choice)
        if action is None:
            self.console.error("Invalid option")
            return

        try:
            await action()
        except StoreError as e:
            logger.error("Store failure during menu action", extra={"error": str(e)})
            self.console.error(f"Operation failed, please try again later ({e})")
        except WalletError as e:
            self.console.error(str(e))

    # =========================================================================
    # 로그인 전
    # =========================================================================

    async def sign_in(self) -> None:
        self.console.title("SIGN IN")
        email = await self.console.read_text("Email")
        password = await self.console.read_text("Password")

        user = await self.services.users.authenticate(email, password)
        if user is None:
            self.console.error("Invalid email or password")
            return

        self.current_user = user
        self.console.success(f"Welcome, {user.full_name}")

    async def register(self) -> None:
        self.console.title("REGISTER")
        full_name = await self.console.read_text("Full name")
        email = await self.console.read_text("Email")
        password = await self.console.read_text("Password")

        user_id = await self.services.users.register(full_name, email, password)
        self.console.success(f"User registered with ID {user_id}. You can sign in now")

    async def exit(self) -> None:
        self._running = False

    # =========================================================================
    # 로그인 후
    # =========================================================================

    async def create_account(self) -> None:
        user = self._require_user()
        self.console.title("CREATE ACCOUNT")
        initial = await self.console.read_amount("Initial balance (empty for 0)", allow_empty=True)
        if initial is None:
            return

        account_id = await self.services.ledger.create_account(user.id, initial)
        account = await self.services.ledger.get_account(account_id)
        self.console.success(f"Account #{account.id} created with balance {account.formatted_balance()}")

    async def check_balance(self) -> None:
        self.console.title("CHECK BALANCE")
        account = await self._choose_own_account("Account ID")
        if account is None:
            return
        self.console.info(f"Balance of account #{account.id}: {account.formatted_balance()}")

    async def send_money(self) -> None:
        self.console.title("SEND MONEY")
        source = await self._choose_own_account("Source account ID")
        if source is None:
            return

        destination_id = await self.console.read_int("Destination account ID")
        if destination_id is None:
            return
        amount = await self.console.read_amount("Amount")
        if amount is None:
            return
        description = await self.console.read_text("Description (optional)")

        self.console.write("\nSummary:")
        self.console.write(f"From: account #{source.id} ({source.formatted_balance()})")
        self.console.write(f"To: account #{destination_id}")
        self.console.write(f"Amount: {format_money(amount, source.currency)}")
        if not await self.console.confirm("Confirm transfer?"):
            self.console.info("Transfer cancelled")
            return

        tx_id = await self.services.recorder.record_transfer(
            source.id, destination_id, amount, description or None
        )
        updated = await self.services.ledger.get_account(source.id)
        self.console.success(f"Transfer #{tx_id} completed. New balance: {updated.formatted_balance()}")

    async def view_history(self) -> None:
        user = self._require_user()
        self.console.title("TRANSACTION HISTORY")
        self.console.show_accounts(await self.services.ledger.list_accounts(user.id))

        valid, account_id = await self.console.read_optional_int("Account ID (empty for all accounts)")
        if not valid:
            return

        if account_id is None:
            transactions = await self.services.history.history_for_user(user.id)
        else:
            await self._own_account(account_id)
            transactions = await self.services.history.history_for_account(account_id)
        self.console.show_transactions(transactions)

    async def deposit(self) -> None:
        self.console.title("DEPOSIT")
        account = await self._choose_own_account("Account ID")
        if account is None:
            return
        amount = await self.console.read_amount("Amount")
        if amount is None:
            return

        tx_id = await self.services.recorder.record_deposit(account.id, amount)
        updated = await self.services.ledger.get_account(account.id)
        self.console.success(f"Deposit #{tx_id} completed. New balance: {updated.formatted_balance()}")

    async def withdraw(self) -> None:
        self.console.title("WITHDRAW")
        account = await self._choose_own_account("Account ID")
        if account is None:
            return
        self.console.info(f"Current balance: {account.formatted_balance()}")
        amount = await self.console.read_amount("Amount")
        if amount is None:
            return

        tx_id = await self.services.recorder.record_withdrawal(account.id, amount)
        updated = await self.services.ledger.get_account(account.id)
        self.console.success(f"Withdrawal #{tx_id} completed. New balance: {updated.formatted_balance()}")

    async def list_accounts(self) -> None:
        user = self._require_user()
        self.console.title("MY ACCOUNTS")
        accounts = await self.services.ledger.list_accounts(user.id)
        self.console.show_accounts(accounts)
        if accounts:
            ledger = self.services.ledger
            total = await ledger.total_balance(user.id)
            self.console.info(f"Total balance: {format_money(total, ledger.default_currency)}")

    async def sign_out(self) -> None:
        self.current_user = None
        self.console.success("Signed out")

    # =========================================================================
    # 내부
    # =========================================================================

    def _require_user(self) -> User:
        if self.current_user is None:
            raise WalletError("You must sign in first")
        return self.current_user

    async def _own_account(self, account_id: int) -> Account:
        """로그인 사용자의 계좌만 허용 (타인 계좌는 없는 계좌로 취급)"""
        user = self._require_user()
        account = await self.services.ledger.get_account(account_id)
        if account.user_id != user.id:
            raise NotFoundError("Account", account_id)
        return account

    async def _choose_own_account(self, prompt: str) -> Account | None:
        user = self._require_user()
        accounts = await self.services.ledger.list_accounts(user.id)
        if not accounts:
            self.console.warning("You have no accounts. Create one first")
            return None

        self.console.write("\nYour accounts:")
        self.console.show_accounts(accounts)
        account_id = await self.console.read_int(prompt)
        if account_id is None:
            return None
        return await self._own_account(account_id)

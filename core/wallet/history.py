"""
거래 이력 조회 (History Query)

읽기 전용. 최신 거래 우선 (created_at DESC, 동시각은 id DESC).
일치하는 거래가 없으면 빈 목록을 반환한다.
"""

import logging

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.constants import Defaults
from core.errors import InvalidArgumentError, NotFoundError
from core.types import TransactionStatus
from core.wallet.models import Transaction

logger = logging.getLogger(__name__)


class HistoryQuery:
    """거래 이력 조회

    Args:
        db: SQLite 어댑터
        default_limit: 계좌 이력 기본 개수 (limit <= 0일 때도 사용)
        user_default_limit: 사용자 이력 기본 개수
        max_limit: 조회 개수 상한
    """

    def __init__(
        self,
        db: SQLiteAdapter,
        default_limit: int = Defaults.HISTORY_LIMIT,
        user_default_limit: int = Defaults.USER_HISTORY_LIMIT,
        max_limit: int = Defaults.HISTORY_MAX_LIMIT,
    ):
        self.db = db
        self.default_limit = default_limit
        self.user_default_limit = user_default_limit
        self.max_limit = max_limit

    def _clamp_limit(self, limit: int | None, default: int) -> int:
        if limit is None:
            return min(default, self.max_limit)
        if limit <= 0:
            logger.warning(
                "Non-positive history limit clamped to default",
                extra={"requested": limit, "applied": default},
            )
            return min(default, self.max_limit)
        return min(limit, self.max_limit)

    async def history_for_account(self, account_id: int, limit: int | None = None) -> list[Transaction]:
        """계좌 거래 이력 (출금/입금 모두 포함)

        Args:
            account_id: 계좌 ID
            limit: 최대 개수 (None 또는 0 이하이면 기본값)

        Returns:
            최신순 거래 목록
        """
        applied = self._clamp_limit(limit, self.default_limit)
        rows = await self.db.query(
            """
            SELECT * FROM transactions
            WHERE sender_account_id = ? OR receiver_account_id = ?
            ORDER BY created_at DESC, id DESC
            LIMIT ?
            """,
            (account_id, account_id, applied),
        )
        return [Transaction.from_row(row) for row in rows]

    async def history_for_user(self, user_id: int, limit: int | None = None) -> list[Transaction]:
        """사용자의 전체 계좌 거래 이력

        같은 사용자의 두 계좌 간 이체는 한 번만 포함된다.

        Args:
            user_id: 사용자 ID
            limit: 최대 개수 (None 또는 0 이하이면 기본값)

        Returns:
            최신순 거래 목록
        """
        applied = self._clamp_limit(limit, self.user_default_limit)
        rows = await self.db.query(
            """
            SELECT DISTINCT t.* FROM transactions t
            INNER JOIN accounts a
                ON (t.sender_account_id = a.id OR t.receiver_account_id = a.id)
            WHERE a.user_id = ?
            ORDER BY t.created_at DESC, t.id DESC
            LIMIT ?
            """,
            (user_id, applied),
        )
        return [Transaction.from_row(row) for row in rows]

    async def get_transaction(self, transaction_id: int) -> Transaction:
        """거래 단건 조회

        Raises:
            NotFoundError: 거래가 없는 경우
        """
        row = await self.db.query_one("SELECT * FROM transactions WHERE id = ?", (transaction_id,))
        if row is None:
            raise NotFoundError("Transaction", transaction_id)
        return Transaction.from_row(row)

    async def list_by_status(
        self,
        status: TransactionStatus | str,
        limit: int | None = None,
    ) -> list[Transaction]:
        """상태별 거래 목록 (운영 점검용)"""
        try:
            status = TransactionStatus.parse(status)
        except ValueError as e:
            raise InvalidArgumentError(str(e)) from e
        applied = self._clamp_limit(limit, self.default_limit)
        rows = await self.db.query(
            """
            SELECT * FROM transactions
            WHERE status = ?
            ORDER BY created_at DESC, id DESC
            LIMIT ?
            """,
            (status.value, applied),
        )
        return [Transaction.from_row(row) for row in rows]

"""
운영 유틸리티

헬스 체크, 테이블 통계, DB 요약, 데모 데이터 생성/삭제.
헬스 체크와 통계는 예외를 발생시키지 않고 오류 값을 보고한다.
"""

import logging
from datetime import datetime

from pydantic import BaseModel, Field

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.constants import Defaults, WALLET_TABLES
from core.errors import StoreError
from core.types import UserType
from core.utils.timezone import now_utc, to_db_timestamp
from core.wallet.users import hash_password

logger = logging.getLogger(__name__)

# 통계 조회 실패 표시값
STAT_ERROR = -1

# (full_name, email, password, initial_balance)
DEMO_USERS: list[tuple[str, str, str, str]] = [
    ("Juan Perez", "juan@test.com", "juan1234", "1000.00"),
    ("Maria Garcia", "maria@test.com", "maria1234", "500.00"),
]


class TableHealth(BaseModel):
    """테이블 상태"""

    table: str = Field(..., description="테이블 이름")
    ok: bool = Field(..., description="접근 가능 여부")
    error: str | None = Field(default=None, description="오류 메시지")


class HealthReport(BaseModel):
    """헬스 체크 결과"""

    status: str = Field(..., description="ok / error")
    connected: bool = Field(..., description="연결 상태")
    tables: list[TableHealth] = Field(default_factory=list, description="테이블별 상태")
    checked_at: datetime = Field(..., description="점검 시각 (UTC)")

    @property
    def healthy(self) -> bool:
        return self.status == "ok"


class DatabaseSummary(BaseModel):
    """DB 요약"""

    db_path: str = Field(..., description="DB 파일 경로")
    connected: bool = Field(..., description="연결 상태")
    stats: dict[str, int] = Field(default_factory=dict, description="테이블별 행 수 (-1: 오류)")
    total_records: int = Field(..., description="오류 테이블을 제외한 행 수 합계")
    pending_transactions: int = Field(..., description="PENDING 거래 수 (-1: 오류)")


async def check_health(db: SQLiteAdapter) -> HealthReport:
    """필수 테이블 접근 가능 여부 점검"""
    tables: list[TableHealth] = []

    for table in WALLET_TABLES:
        try:
            if not await db.table_exists(table):
                tables.append(TableHealth(table=table, ok=False, error="missing"))
                continue
            await db.count_records(table)
            tables.append(TableHealth(table=table, ok=True))
        except StoreError as e:
            tables.append(TableHealth(table=table, ok=False, error=str(e)))

    healthy = db.is_connected and all(t.ok for t in tables)
    report = HealthReport(
        status="ok" if healthy else "error",
        connected=db.is_connected,
        tables=tables,
        checked_at=now_utc(),
    )

    if not healthy:
        logger.warning(
            "Database health check failed",
            extra={"failed_tables": [t.table for t in tables if not t.ok]},
        )
    return report


async def get_stats(db: SQLiteAdapter) -> dict[str, int]:
    """테이블별 행 수 (조회 실패 시 -1)"""
    stats: dict[str, int] = {}
    for table in WALLET_TABLES:
        try:
            stats[table] = await db.count_records(table)
        except StoreError as e:
            logger.warning(f"Cannot count {table}", extra={"error": str(e)})
            stats[table] = STAT_ERROR
    return stats


async def database_summary(db: SQLiteAdapter) -> DatabaseSummary:
    """DB 요약 (통계 + 연결 상태 + PENDING 거래 수)"""
    stats = await get_stats(db)

    try:
        pending = await db.count_records("transactions", "status = ?", ("PENDING",))
    except StoreError:
        pending = STAT_ERROR

    return DatabaseSummary(
        db_path=str(db.db_path),
        connected=db.is_connected,
        stats=stats,
        total_records=sum(count for count in stats.values() if count >= 0),
        pending_transactions=pending,
    )


async def seed_demo_data(db: SQLiteAdapter, currency: str = Defaults.CURRENCY) -> bool:
    """데모 사용자/계좌 생성 (users 테이블이 비어 있을 때만)

    Returns:
        생성했으면 True, 이미 데이터가 있으면 False
    """
    if await db.count_records("users") > 0:
        logger.info("Demo data skipped: users already exist")
        return False

    now = to_db_timestamp(now_utc())
    async with db.transaction():
        for full_name, email, password, balance in DEMO_USERS:
            user_id = await db.execute_insert(
                """
                INSERT INTO users (full_name, email, password_hash, user_type, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (full_name, email, hash_password(password), UserType.CUSTOMER.value, now),
            )
            await db.execute_insert(
                """
                INSERT INTO accounts (user_id, balance, currency, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (user_id, balance, currency, now, now),
            )

    logger.info("Demo data inserted", extra={"users": len(DEMO_USERS)})
    return True


async def clear_all_data(db: SQLiteAdapter) -> None:
    """전체 데이터 삭제 (외래 키 순서: transactions → accounts → users)

    주의: 모든 데이터가 삭제된다.
    """
    await db.execute_transaction([
        ("DELETE FROM transactions", ()),
        ("DELETE FROM accounts", ()),
        ("DELETE FROM users", ()),
    ])
    logger.warning("All wallet data deleted")

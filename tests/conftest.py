"""
pytest 공통 fixture 정의

임시 DB(스키마 초기화 완료)와 지갑 서비스, 테스트 사용자/계좌 fixture.
"""

import tempfile
from decimal import Decimal
from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio

from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from core.config.loader import Settings
from core.wallet import AccountLedger, HistoryQuery, TransactionRecorder, UserService


@pytest.fixture
def temp_dir() -> Path:
    """OS 독립적인 임시 디렉토리 생성"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def reset_settings() -> None:
    """Settings 싱글턴 초기화 (테스트 간 격리)"""
    Settings.reset()
    yield
    Settings.reset()


@pytest_asyncio.fixture
async def db(tmp_path: Path) -> AsyncGenerator[SQLiteAdapter, None]:
    """스키마가 초기화된 임시 DB"""
    adapter = SQLiteAdapter(tmp_path / "wallet_test.db")
    await adapter.connect()
    await init_schema(adapter)
    yield adapter
    await adapter.close()


@pytest.fixture
def users(db: SQLiteAdapter) -> UserService:
    return UserService(db)


@pytest.fixture
def ledger(db: SQLiteAdapter) -> AccountLedger:
    return AccountLedger(db, "ARS")


@pytest.fixture
def recorder(db: SQLiteAdapter, ledger: AccountLedger) -> TransactionRecorder:
    return TransactionRecorder(db, ledger)


@pytest.fixture
def history(db: SQLiteAdapter) -> HistoryQuery:
    return HistoryQuery(db, default_limit=10, user_default_limit=20, max_limit=500)


@pytest_asyncio.fixture
async def juan_id(users: UserService) -> int:
    """테스트 사용자 (Juan)"""
    return await users.register("Juan Perez", "juan@test.com", "juan1234")


@pytest_asyncio.fixture
async def maria_id(users: UserService) -> int:
    """테스트 사용자 (Maria)"""
    return await users.register("Maria Garcia", "maria@test.com", "maria1234")


@pytest_asyncio.fixture
async def account_a(ledger: AccountLedger, juan_id: int) -> int:
    """Juan 계좌 (잔액 1000.00)"""
    return await ledger.create_account(juan_id, Decimal("1000.00"))


@pytest_asyncio.fixture
async def account_b(ledger: AccountLedger, maria_id: int) -> int:
    """Maria 계좌 (잔액 500.00)"""
    return await ledger.create_account(maria_id, Decimal("500.00"))

"""
SQLite 어댑터

WAL 모드로 SQLite 연결 관리.
프로세스 시작 시 생성하여 각 서비스에 주입하고, 종료 시 닫는다.

- 그룹 밖의 변경(execute_mutation / execute_insert)은 즉시 커밋 (auto-commit)
- transaction() 그룹 안의 변경은 그룹 종료 시 한 번에 커밋 또는 롤백
- 모든 SQLite 오류는 StoreError로 감싸서 전달 (원인 예외 보존)
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Iterable, Sequence

import aiosqlite

from core.errors import StoreError

logger = logging.getLogger(__name__)

# (sql, parameters) 쌍
Statement = tuple[str, Sequence[Any]]


async def create_connection(
    db_path: Path | str,
    readonly: bool = False,
) -> aiosqlite.Connection:
    """SQLite 연결 생성 (WAL 모드)

    Args:
        db_path: DB 파일 경로
        readonly: 읽기 전용 여부

    Returns:
        aiosqlite 연결 객체
    """
    # pathlib.Path를 문자열로 변환
    db_path_str = str(db_path)

    # 디렉토리가 없으면 생성
    db_dir = Path(db_path).parent
    db_dir.mkdir(parents=True, exist_ok=True)

    # 연결 생성
    if readonly:
        # 읽기 전용 모드
        conn = await aiosqlite.connect(f"file:{db_path_str}?mode=ro", uri=True)
    else:
        conn = await aiosqlite.connect(db_path_str)

    # 컬럼 이름으로도 접근 가능한 Row
    conn.row_factory = aiosqlite.Row

    # WAL 모드 설정 (읽기 전용 연결은 저널 모드 변경 불가)
    if not readonly:
        await conn.execute("PRAGMA journal_mode=WAL")

    # 동시 접근 설정
    await conn.execute("PRAGMA busy_timeout=30000")  # 30초 대기

    # 외래 키 제약 활성화
    await conn.execute("PRAGMA foreign_keys=ON")

    logger.info(
        "SQLite connection opened",
        extra={"db_path": db_path_str, "readonly": readonly},
    )

    return conn


class SQLiteAdapter:
    """SQLite 어댑터 (Store Gateway)

    단일 공유 연결을 소유하며 파라미터 바인딩 쿼리와
    트랜잭션 그룹(전부 적용 또는 전부 롤백)을 제공.

    Args:
        db_path: DB 파일 경로
        readonly: 읽기 전용 여부 (점검 스크립트용)

    사용 예시:
    ```python
    adapter = SQLiteAdapter(db_path)
    await adapter.connect()

    async with adapter.transaction():
        await adapter.execute_mutation("UPDATE ...", (...))
        await adapter.execute_mutation("UPDATE ...", (...))

    await adapter.close()
    ```
    """

    def __init__(self, db_path: Path | str, readonly: bool = False):
        self.db_path = Path(db_path)
        self.readonly = readonly
        self._conn: aiosqlite.Connection | None = None
        self._tx_depth = 0

    @property
    def is_connected(self) -> bool:
        """연결 상태 확인"""
        return self._conn is not None

    @property
    def in_transaction(self) -> bool:
        """트랜잭션 그룹 내부 여부"""
        return self._tx_depth > 0

    async def connect(self) -> None:
        """연결 생성"""
        if self._conn is not None:
            return

        try:
            self._conn = await create_connection(self.db_path, self.readonly)
        except aiosqlite.Error as e:
            raise StoreError(f"Cannot open database {self.db_path}: {e}", cause=e) from e

    async def close(self) -> None:
        """연결 종료"""
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
            self._tx_depth = 0
            logger.info("SQLite connection closed")

    def _require_connection(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise StoreError("Not connected to database")
        return self._conn

    # -------------------------------------------------------------------------
    # 기본 실행
    # -------------------------------------------------------------------------

    async def execute(
        self,
        sql: str,
        parameters: Sequence[Any] | None = None,
    ) -> aiosqlite.Cursor:
        """SQL 실행 (커밋하지 않음)"""
        conn = self._require_connection()

        try:
            if parameters:
                return await conn.execute(sql, tuple(parameters))
            return await conn.execute(sql)
        except aiosqlite.Error as e:
            raise StoreError(f"Store operation failed: {e}", cause=e) from e

    async def fetchone(
        self,
        sql: str,
        parameters: Sequence[Any] | None = None,
    ) -> aiosqlite.Row | None:
        """단일 행 조회"""
        cursor = await self.execute(sql, parameters)
        try:
            return await cursor.fetchone()
        except aiosqlite.Error as e:
            raise StoreError(f"Store operation failed: {e}", cause=e) from e
        finally:
            await cursor.close()

    async def fetchall(
        self,
        sql: str,
        parameters: Sequence[Any] | None = None,
    ) -> list[aiosqlite.Row]:
        """전체 행 조회"""
        cursor = await self.execute(sql, parameters)
        try:
            return list(await cursor.fetchall())
        except aiosqlite.Error as e:
            raise StoreError(f"Store operation failed: {e}", cause=e) from e
        finally:
            await cursor.close()

    async def commit(self) -> None:
        """커밋"""
        if self._conn is not None:
            try:
                await self._conn.commit()
            except aiosqlite.Error as e:
                raise StoreError(f"Commit failed: {e}", cause=e) from e

    async def rollback(self) -> None:
        """롤백"""
        if self._conn is not None:
            try:
                await self._conn.rollback()
            except aiosqlite.Error as e:
                raise StoreError(f"Rollback failed: {e}", cause=e) from e

    # -------------------------------------------------------------------------
    # Store Gateway 계약
    # -------------------------------------------------------------------------

    async def query(
        self,
        sql: str,
        parameters: Sequence[Any] | None = None,
    ) -> list[aiosqlite.Row]:
        """읽기 쿼리 실행"""
        return await self.fetchall(sql, parameters)

    async def query_one(
        self,
        sql: str,
        parameters: Sequence[Any] | None = None,
    ) -> aiosqlite.Row | None:
        """단일 행 읽기 쿼리 실행"""
        return await self.fetchone(sql, parameters)

    async def execute_mutation(
        self,
        sql: str,
        parameters: Sequence[Any] | None = None,
    ) -> int:
        """UPDATE/DELETE 실행

        그룹 밖에서는 즉시 커밋한다.

        Returns:
            영향받은 행 수
        """
        cursor = await self.execute(sql, parameters)
        affected = cursor.rowcount
        await cursor.close()
        await self._commit_outside_group()
        return affected

    async def execute_insert(
        self,
        sql: str,
        parameters: Sequence[Any] | None = None,
    ) -> int:
        """INSERT 실행

        그룹 밖에서는 즉시 커밋한다.

        Returns:
            생성된 행 ID

        Raises:
            StoreError: 삽입된 행이 없거나 ID를 얻지 못한 경우
        """
        cursor = await self.execute(sql, parameters)
        affected = cursor.rowcount
        new_id = cursor.lastrowid
        await cursor.close()

        if affected == 0 or new_id is None:
            raise StoreError(f"Insert produced no row: {sql.strip().splitlines()[0]}")

        await self._commit_outside_group()
        return new_id

    async def execute_transaction(self, statements: Iterable[Statement]) -> bool:
        """여러 변경문을 하나의 트랜잭션 그룹으로 실행

        하나라도 실패하면 그룹 전체를 롤백하고 StoreError 발생.

        Args:
            statements: (sql, parameters) 목록

        Returns:
            True (성공 시)
        """
        statements = list(statements)
        async with self.transaction():
            for sql, parameters in statements:
                await self.execute(sql, parameters)

        logger.debug(
            "Transaction group committed",
            extra={"statements": len(statements)},
        )
        return True

    async def _commit_outside_group(self) -> None:
        if self._tx_depth == 0:
            await self.commit()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """트랜잭션 컨텍스트 매니저

        BEGIN IMMEDIATE로 시작하여 그룹 시작 시점에 쓰기 잠금을 확보한다.
        성공 시 자동 커밋, 예외 시 자동 롤백 후 재발생.
        SQLite 오류는 StoreError로 감싸고, 도메인 예외는 그대로 전달한다.
        중첩 호출은 바깥 그룹에 합류한다.

        사용 예시:
        ```python
        async with adapter.transaction() as conn:
            await conn.execute("UPDATE ...")
            # 성공 시 자동 커밋
        ```
        """
        conn = self._require_connection()

        if self._tx_depth > 0:
            # 바깥 그룹에 합류 (커밋/롤백은 바깥 그룹이 담당)
            self._tx_depth += 1
            try:
                yield conn
            finally:
                self._tx_depth -= 1
            return

        if conn.in_transaction:
            # 그룹 밖에서 열린 암묵적 트랜잭션 정리
            await self.commit()

        try:
            await conn.execute("BEGIN IMMEDIATE")
        except aiosqlite.Error as e:
            raise StoreError(f"Cannot begin transaction: {e}", cause=e) from e

        self._tx_depth = 1
        try:
            yield conn
        except BaseException as e:
            self._tx_depth = 0
            await self._rollback_quietly()
            if isinstance(e, aiosqlite.Error):
                raise StoreError(f"Transaction rolled back: {e}", cause=e) from e
            raise

        self._tx_depth = 0
        try:
            await conn.commit()
        except aiosqlite.Error as e:
            await self._rollback_quietly()
            raise StoreError(f"Commit failed, transaction rolled back: {e}", cause=e) from e

    async def _rollback_quietly(self) -> None:
        """롤백 (롤백 자체의 실패는 로그만 남김)"""
        if self._conn is None:
            return
        try:
            await self._conn.rollback()
        except aiosqlite.Error as e:
            logger.error("Rollback failed", extra={"error": str(e)})

    # -------------------------------------------------------------------------
    # 조회 헬퍼
    # -------------------------------------------------------------------------

    async def table_exists(self, table_name: str) -> bool:
        """테이블 존재 여부 확인"""
        result = await self.fetchone(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
            (table_name,),
        )
        return result is not None

    async def count_records(
        self,
        table_name: str,
        where: str | None = None,
        parameters: Sequence[Any] | None = None,
    ) -> int:
        """레코드 수 조회

        Args:
            table_name: 테이블 이름 (내부 상수만 전달할 것)
            where: WHERE 절 ('WHERE' 제외)
            parameters: WHERE 절 파라미터
        """
        sql = f"SELECT COUNT(*) FROM {table_name}"
        if where:
            sql += f" WHERE {where}"
        row = await self.fetchone(sql, parameters)
        return int(row[0]) if row else 0

    async def exists(
        self,
        table_name: str,
        where: str,
        parameters: Sequence[Any] | None = None,
    ) -> bool:
        """조건을 만족하는 레코드 존재 여부"""
        return await self.count_records(table_name, where, parameters) > 0

    # -------------------------------------------------------------------------
    # 컨텍스트 매니저
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> "SQLiteAdapter":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


async def init_schema(adapter: SQLiteAdapter) -> None:
    """스키마 초기화 (테이블 생성)

    CREATE IF NOT EXISTS 패턴으로 여러 번 호출해도 안전.

    Args:
        adapter: 연결된 SQLiteAdapter
    """
    # users
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id               INTEGER PRIMARY KEY AUTOINCREMENT,
            full_name        TEXT NOT NULL,
            email            TEXT NOT NULL UNIQUE,
            password_hash    TEXT NOT NULL,
            user_type        TEXT NOT NULL DEFAULT 'CUSTOMER'
                             CHECK (user_type IN ('CUSTOMER', 'ADMIN')),
            created_at       TEXT NOT NULL
        )
    """)

    # accounts (balance는 Decimal 문자열로 저장)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS accounts (
            id               INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id          INTEGER NOT NULL REFERENCES users(id),
            balance          TEXT NOT NULL DEFAULT '0.00'
                             CHECK (CAST(balance AS NUMERIC) >= 0),
            currency         TEXT NOT NULL DEFAULT 'ARS',
            created_at       TEXT NOT NULL,
            updated_at       TEXT NOT NULL
        )
    """)

    # transactions
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS transactions (
            id                   INTEGER PRIMARY KEY AUTOINCREMENT,
            sender_account_id    INTEGER REFERENCES accounts(id),
            receiver_account_id  INTEGER REFERENCES accounts(id),
            amount               TEXT NOT NULL
                                 CHECK (CAST(amount AS NUMERIC) > 0),
            currency             TEXT NOT NULL DEFAULT 'ARS',
            type                 TEXT NOT NULL
                                 CHECK (type IN ('TRANSFER', 'DEPOSIT', 'WITHDRAWAL', 'PAYMENT')),
            description          TEXT,
            status               TEXT NOT NULL DEFAULT 'PENDING'
                                 CHECK (status IN ('PENDING', 'COMPLETED', 'FAILED', 'CANCELLED')),
            created_at           TEXT NOT NULL,
            CHECK (
                sender_account_id IS NULL
                OR receiver_account_id IS NULL
                OR sender_account_id <> receiver_account_id
            )
        )
    """)

    # 인덱스 생성
    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_accounts_user
        ON accounts(user_id)
    """)

    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_transactions_sender
        ON transactions(sender_account_id, created_at)
    """)

    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_transactions_receiver
        ON transactions(receiver_account_id, created_at)
    """)

    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_transactions_status
        ON transactions(status, created_at)
    """)

    await adapter.commit()

    logger.info("Wallet schema initialized")

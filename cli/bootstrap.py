"""
CLI Bootstrap

설정 로드, 로깅 설정, DB 연결, 의존성 주입, 메뉴 실행.

시작 순서:
1. 로깅 설정 (콘솔은 WARNING, 파일은 INFO)
2. 설정 로드 (wallet.yaml, 없으면 기본값)
3. DB 연결 및 스키마 초기화
4. 헬스 체크 (실패 시 종료 코드 1)
5. 오래된 PENDING 거래 정리
6. 데모 데이터 생성 (설정 시)
7. 메뉴 실행
"""

import asyncio
import logging
import sys
from datetime import timedelta

from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from cli.console import Console
from cli.menu import MainMenu, WalletServices
from core.config.loader import ConfigLoadError, WalletConfig, get_settings
from core.errors import StoreError
from core.logging import setup_logging
from core.wallet import AccountLedger, HistoryQuery, TransactionRecorder, UserService
from core.wallet.maintenance import check_health, seed_demo_data

logger = logging.getLogger("cli")


def build_services(db: SQLiteAdapter, config: WalletConfig) -> WalletServices:
    """코어 서비스 생성 (동일 어댑터 공유)"""
    ledger = AccountLedger(db, config.default_currency)
    return WalletServices(
        users=UserService(db),
        ledger=ledger,
        recorder=TransactionRecorder(db, ledger),
        history=HistoryQuery(
            db,
            default_limit=config.history.default_limit,
            user_default_limit=config.history.user_default_limit,
            max_limit=config.history.max_limit,
        ),
    )


async def prepare_database(db: SQLiteAdapter, config: WalletConfig, services: WalletServices) -> bool:
    """스키마 초기화, 헬스 체크, PENDING 정리, 데모 데이터

    Returns:
        사용 가능하면 True
    """
    await init_schema(db)

    report = await check_health(db)
    if not report.healthy:
        logger.error("Database is not healthy", extra={"report": report.model_dump(mode="json")})
        return False

    stale = await services.recorder.reconcile_stale_pending(
        timedelta(minutes=config.pending_max_age_minutes)
    )
    if stale:
        logger.warning(f"Reconciled {len(stale)} stale pending transactions")

    if config.seed_demo_data:
        await seed_demo_data(db, config.default_currency)

    return True


async def main(console: Console | None = None) -> int:
    """CLI 메인 함수

    Returns:
        종료 코드 (0: 정상, 1: 시작 실패)
    """
    # 1. 설정 로드 (파일 로그 레벨이 설정에 따르므로 로깅보다 먼저)
    try:
        config = get_settings().config
    except ConfigLoadError as e:
        setup_logging("cli", console_level=logging.WARNING)
        logger.error(f"설정 로드 실패: {e}")
        return 1

    setup_logging("cli", console_level=logging.WARNING, file_level=config.log_level_value)
    logger.info(f"DB: {config.db_path}")

    # 2. DB 연결
    db = SQLiteAdapter(config.db_path)
    try:
        await db.connect()
    except StoreError as e:
        logger.error(f"DB 연결 실패: {e}")
        return 1

    try:
        services = build_services(db, config)
        try:
            ready = await prepare_database(db, config, services)
        except StoreError as e:
            logger.error(f"DB 초기화 실패: {e}")
            ready = False
        if not ready:
            return 1

        # 3. 메뉴 실행
        menu = MainMenu(services, console or Console())
        await menu.run()
    finally:
        await db.close()

    logger.info("CLI 정상 종료")
    return 0


def run() -> None:
    """콘솔 스크립트 진입점"""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()

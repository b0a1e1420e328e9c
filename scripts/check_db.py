#!/usr/bin/env python3
"""DB 상태 확인 스크립트

사용법:
    python scripts/check_db.py            # 요약 + PENDING 거래
    python scripts/check_db.py --seed     # 비어 있으면 데모 데이터 생성
    python scripts/check_db.py --clear    # 전체 데이터 삭제 (확인 필요)
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from core.config.loader import ConfigLoadError, get_settings
from core.logging import setup_logging
from core.types import TransactionStatus
from core.wallet import HistoryQuery
from core.wallet.maintenance import check_health, clear_all_data, database_summary, seed_demo_data

logger = logging.getLogger("check_db")


async def main(args: argparse.Namespace) -> int:
    setup_logging("check_db", console_level=logging.WARNING)

    try:
        config = get_settings().config
    except ConfigLoadError as e:
        print(f"설정 로드 실패: {e}")
        return 1

    async with SQLiteAdapter(config.db_path) as db:
        await init_schema(db)

        if args.clear:
            answer = input("Delete ALL wallet data? (yes/no): ").strip().lower()
            if answer == "yes":
                await clear_all_data(db)
                print("All data deleted")

        if args.seed:
            created = await seed_demo_data(db, config.default_currency)
            print("Demo data inserted" if created else "Demo data skipped (users exist)")

        health = await check_health(db)
        summary = await database_summary(db)

        print(f"DB Path: {summary.db_path}")
        print(f"Health: {health.status}")
        for table in health.tables:
            print(f"  - {table.table}: {'ok' if table.ok else table.error}")

        print("\nRecords:")
        for table, count in summary.stats.items():
            print(f"  - {table}: {count if count >= 0 else 'error'}")
        print(f"  total: {summary.total_records}")

        # PENDING 거래 (정상 상태에서는 0건)
        history = HistoryQuery(db, max_limit=config.history.max_limit)
        pending = await history.list_by_status(TransactionStatus.PENDING, limit=args.limit)
        print(f"\nPending transactions ({summary.pending_transactions}):")
        for tx in pending:
            print(f"  - {tx}")

    return 0 if health.healthy else 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Wallet DB status")
    parser.add_argument("--seed", action="store_true", help="insert demo data when empty")
    parser.add_argument("--clear", action="store_true", help="delete all data")
    parser.add_argument("--limit", type=int, default=20, help="max pending transactions to list")
    sys.exit(asyncio.run(main(parser.parse_args())))

"""
유틸리티 패키지

금액 정규화, 타임존 처리 등 공통 유틸리티
"""

from core.utils.money import MONEY_MAX, MONEY_QUANTUM, format_money, to_money
from core.utils.timezone import (
    ART,
    format_local,
    from_db_timestamp,
    now_utc,
    to_db_timestamp,
    to_local,
)

__all__ = [
    "MONEY_MAX",
    "MONEY_QUANTUM",
    "format_money",
    "to_money",
    "ART",
    "format_local",
    "from_db_timestamp",
    "now_utc",
    "to_db_timestamp",
    "to_local",
]

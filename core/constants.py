"""
하드코딩 상수 - 변경될 일이 거의 없는 고정값

중요: 경로는 반드시 pathlib.Path 사용 (Windows/Linux 크로스 플랫폼)
"""

from pathlib import Path


# 프로젝트 루트 (이 파일 기준 2단계 상위: core/constants.py → 프로젝트 루트)
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent


class Defaults:
    """기본값 상수"""

    CURRENCY: str = "ARS"

    # 이력 조회 개수
    HISTORY_LIMIT: int = 10
    USER_HISTORY_LIMIT: int = 20
    HISTORY_MAX_LIMIT: int = 500

    # PENDING 상태로 남은 거래를 FAILED로 정리하는 기준 (분)
    PENDING_MAX_AGE_MINUTES: int = 5

    LOG_LEVEL: str = "INFO"

    # 거래 설명 기본값
    TRANSFER_DESCRIPTION: str = "Transfer"
    DEPOSIT_DESCRIPTION: str = "Deposit"
    WITHDRAWAL_DESCRIPTION: str = "Withdrawal"


class Paths:
    """프로젝트 경로 상수 (pathlib 사용 - OS 독립적)"""

    # 디렉토리
    CONFIG_DIR: Path = PROJECT_ROOT / "config"
    DATA_DIR: Path = PROJECT_ROOT / "data"
    LOGS_DIR: Path = PROJECT_ROOT / "logs"
    CLI_LOGS_DIR: Path = LOGS_DIR / "cli"

    # 설정 파일
    CONFIG_FILE: Path = CONFIG_DIR / "wallet.yaml"

    # DB 파일
    WALLET_DB: Path = DATA_DIR / "wallet.db"


# 지갑 핵심 테이블 (헬스 체크 / 통계 대상)
WALLET_TABLES: tuple[str, ...] = ("users", "accounts", "transactions")

"""
설정 로더

wallet.yaml 로드 및 지갑 설정 생성.
파일이 없으면 기본값을 사용하고, 형식 오류는 ConfigLoadError로 보고한다.

wallet.yaml 예시:
```yaml
db_path: data/wallet.db
default_currency: ARS
log_level: INFO
seed_demo_data: false
history:
  default_limit: 10
  user_default_limit: 20
  max_limit: 500
reconcile:
  pending_max_age_minutes: 5
```
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from core.constants import Defaults, PROJECT_ROOT, Paths

# 설정 파일 경로 환경 변수
CONFIG_ENV_VAR = "WALLET_CONFIG"


@dataclass(frozen=True)
class HistoryConfig:
    """이력 조회 설정"""

    default_limit: int = Defaults.HISTORY_LIMIT
    user_default_limit: int = Defaults.USER_HISTORY_LIMIT
    max_limit: int = Defaults.HISTORY_MAX_LIMIT


@dataclass(frozen=True)
class WalletConfig:
    """지갑 설정 (wallet.yaml에서 로드)

    불변 데이터 구조로 설정 변경 방지
    """

    db_path: Path = Paths.WALLET_DB
    default_currency: str = Defaults.CURRENCY
    log_level: str = Defaults.LOG_LEVEL
    seed_demo_data: bool = False
    pending_max_age_minutes: int = Defaults.PENDING_MAX_AGE_MINUTES
    history: HistoryConfig = HistoryConfig()

    @property
    def log_level_value(self) -> int:
        """logging 모듈 레벨 값"""
        return logging.getLevelName(self.log_level)


class ConfigLoadError(Exception):
    """설정 로드 실패 예외"""

    pass


def _positive_int(section: dict[str, Any], key: str, default: int, where: str) -> int:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigLoadError(f"{where}.{key} must be a positive integer, got {value!r}")
    return value


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    section = data.get(key) or {}
    if not isinstance(section, dict):
        raise ConfigLoadError(f"'{key}' must be a mapping")
    return section


def resolve_config_path(path: Path | None = None) -> Path:
    """설정 파일 경로 결정 (인자 > 환경 변수 > 기본 경로)"""
    if path is not None:
        return path
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return Paths.CONFIG_FILE


def load_config(path: Path | None = None) -> WalletConfig:
    """wallet.yaml 파일 로드

    Args:
        path: wallet.yaml 경로 (None이면 환경 변수 또는 기본 경로)

    Returns:
        WalletConfig 인스턴스

    Raises:
        ConfigLoadError: 형식이 잘못되었거나 값이 유효하지 않은 경우
    """
    path = resolve_config_path(path)

    if not path.exists():
        return WalletConfig()

    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"wallet.yaml 파싱 실패: {e}") from e

    if data is None:
        return WalletConfig()
    if not isinstance(data, dict):
        raise ConfigLoadError("wallet.yaml 최상위는 mapping이어야 합니다")

    # db_path: 상대 경로는 프로젝트 루트 기준
    db_path = Path(data.get("db_path") or Paths.WALLET_DB)
    if not db_path.is_absolute():
        db_path = PROJECT_ROOT / db_path

    currency = str(data.get("default_currency", Defaults.CURRENCY)).strip().upper()
    if len(currency) != 3 or not currency.isalpha():
        raise ConfigLoadError(f"유효하지 않은 default_currency입니다: '{currency}'")

    log_level = str(data.get("log_level", Defaults.LOG_LEVEL)).upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigLoadError(f"유효하지 않은 log_level입니다: '{log_level}'")

    seed_demo_data = data.get("seed_demo_data", False)
    if not isinstance(seed_demo_data, bool):
        raise ConfigLoadError("seed_demo_data는 true/false여야 합니다")

    history_data = _section(data, "history")
    history = HistoryConfig(
        default_limit=_positive_int(history_data, "default_limit", Defaults.HISTORY_LIMIT, "history"),
        user_default_limit=_positive_int(
            history_data, "user_default_limit", Defaults.USER_HISTORY_LIMIT, "history"
        ),
        max_limit=_positive_int(history_data, "max_limit", Defaults.HISTORY_MAX_LIMIT, "history"),
    )

    reconcile_data = _section(data, "reconcile")
    pending_max_age = _positive_int(
        reconcile_data, "pending_max_age_minutes", Defaults.PENDING_MAX_AGE_MINUTES, "reconcile"
    )

    return WalletConfig(
        db_path=db_path,
        default_currency=currency,
        log_level=log_level,
        seed_demo_data=seed_demo_data,
        pending_max_age_minutes=pending_max_age,
        history=history,
    )


class Settings:
    """애플리케이션 설정 (싱글턴 패턴)

    wallet.yaml을 로드하고 관련 설정을 제공
    """

    _instance: "Settings | None" = None
    _config: WalletConfig | None = None

    def __new__(cls, config_path: Path | None = None) -> "Settings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, config_path: Path | None = None) -> None:
        if self._config is None:
            type(self)._config = load_config(config_path)

    @property
    def config(self) -> WalletConfig:
        """로드된 설정"""
        assert self._config is not None
        return self._config

    @property
    def db_path(self) -> Path:
        """DB 경로"""
        return self.config.db_path

    @property
    def default_currency(self) -> str:
        """기본 통화"""
        return self.config.default_currency

    @classmethod
    def reset(cls) -> None:
        """싱글턴 인스턴스 초기화 (테스트용)"""
        cls._instance = None
        cls._config = None


def get_settings(config_path: Path | None = None) -> Settings:
    """Settings 인스턴스 반환

    Args:
        config_path: wallet.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        Settings 싱글턴 인스턴스
    """
    return Settings(config_path)

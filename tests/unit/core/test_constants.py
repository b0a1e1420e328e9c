"""
core/constants.py 테스트

모든 경로가 pathlib.Path 타입이고, 상수가 정상적으로 접근 가능한지 확인
"""

from pathlib import Path

from core.constants import PROJECT_ROOT, WALLET_TABLES, Defaults, Paths


class TestProjectRoot:
    """PROJECT_ROOT 테스트"""

    def test_project_root_is_absolute(self) -> None:
        """PROJECT_ROOT가 절대 경로인지 확인"""
        assert isinstance(PROJECT_ROOT, Path)
        assert PROJECT_ROOT.is_absolute()

    def test_project_root_contains_core_directory(self) -> None:
        """PROJECT_ROOT에 core 디렉토리가 있는지 확인"""
        assert (PROJECT_ROOT / "core").exists()


class TestPaths:
    """Paths 테스트"""

    def test_paths_under_project_root(self) -> None:
        """경로가 프로젝트 루트 하위인지 확인"""
        for path in (Paths.CONFIG_FILE, Paths.WALLET_DB, Paths.CLI_LOGS_DIR):
            assert isinstance(path, Path)
            assert PROJECT_ROOT in path.parents

    def test_config_file_name(self) -> None:
        assert Paths.CONFIG_FILE.name == "wallet.yaml"


class TestDefaults:
    """Defaults 테스트"""

    def test_history_limits(self) -> None:
        """이력 기본 개수"""
        assert Defaults.HISTORY_LIMIT == 10
        assert Defaults.USER_HISTORY_LIMIT == 20
        assert Defaults.HISTORY_LIMIT <= Defaults.HISTORY_MAX_LIMIT

    def test_currency(self) -> None:
        assert Defaults.CURRENCY == "ARS"

    def test_wallet_tables(self) -> None:
        assert WALLET_TABLES == ("users", "accounts", "transactions")

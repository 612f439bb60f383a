"""
설정 로더

settings.yaml 로드 및 애플리케이션 설정 생성
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from core.constants import Defaults, Paths
from core.types import Environment


@dataclass(frozen=True)
class LedgerSettings:
    """Ledger 정합성 관련 설정

    verify_on_read: 계좌 상세 조회 시 잔고 불변식 검증
    repair_on_startup: 시작 시 불일치 계좌 잔고 재계산
    """

    verify_on_read: bool = True
    repair_on_startup: bool = False


@dataclass(frozen=True)
class AppConfig:
    """애플리케이션 설정 (settings.yaml에서 로드)

    불변 데이터 구조로 설정 변경 방지
    """

    environment: Environment = Environment.DEVELOPMENT
    user_id: str = Defaults.USER_ID
    currency: str = Defaults.CURRENCY
    db_path: Path | None = None
    ledger: LedgerSettings = field(default_factory=LedgerSettings)


class SettingsLoadError(Exception):
    """Settings 로드 실패 예외"""

    pass


def _parse_bool(section: dict[str, Any], key: str, default: bool) -> bool:
    value = section.get(key, default)
    if not isinstance(value, bool):
        raise SettingsLoadError(f"settings.yaml의 '{key}'는 true/false여야 합니다: {value!r}")
    return value


def load_config(path: Path | None = None) -> AppConfig:
    """settings.yaml 파일 로드

    파일이 없으면 기본값으로 동작.

    Args:
        path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        AppConfig 인스턴스

    Raises:
        SettingsLoadError: 형식이 잘못된 경우
        ValueError: 유효하지 않은 environment인 경우
    """
    if path is None:
        path = Paths.SETTINGS_FILE

    if not path.exists():
        return AppConfig()

    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise SettingsLoadError(f"settings.yaml 파싱 실패: {e}") from e

    if data is None:
        return AppConfig()

    if not isinstance(data, dict):
        raise SettingsLoadError("settings.yaml 최상위는 매핑이어야 합니다")

    # environment 검증
    env_str = data.get("environment", Environment.DEVELOPMENT.value)
    try:
        environment = Environment(env_str)
    except ValueError as e:
        valid = [env.value for env in Environment]
        raise ValueError(
            f"유효하지 않은 environment입니다: '{env_str}'. "
            f"유효한 값: {valid}"
        ) from e

    user_id = data.get("user_id", Defaults.USER_ID)
    if not user_id:
        raise SettingsLoadError("settings.yaml의 'user_id'가 비어 있습니다")

    currency = str(data.get("currency", Defaults.CURRENCY)).upper()
    if len(currency) != 3:
        raise SettingsLoadError(f"settings.yaml의 'currency'는 3자리 통화 코드여야 합니다: {currency}")

    db_path_value = data.get("db_path")
    db_path = Path(db_path_value) if db_path_value else None

    ledger_section = data.get("ledger") or {}
    if not isinstance(ledger_section, dict):
        raise SettingsLoadError("settings.yaml의 'ledger' 섹션은 매핑이어야 합니다")

    ledger = LedgerSettings(
        verify_on_read=_parse_bool(ledger_section, "verify_on_read", True),
        repair_on_startup=_parse_bool(ledger_section, "repair_on_startup", False),
    )

    return AppConfig(
        environment=environment,
        user_id=str(user_id),
        currency=currency,
        db_path=db_path,
        ledger=ledger,
    )


def get_db_path(config: AppConfig) -> Path:
    """환경에 따른 DB 경로 반환

    db_path가 명시되어 있으면 그 경로를 우선 사용.

    Args:
        config: AppConfig 인스턴스

    Returns:
        DB 파일 경로 (Path 타입)
    """
    if config.db_path is not None:
        return config.db_path
    if config.environment == Environment.PRODUCTION:
        return Paths.PROD_DB
    return Paths.DEV_DB


class Settings:
    """애플리케이션 설정 (싱글턴 패턴)

    settings.yaml을 로드하고 관련 설정을 제공
    """

    _instance: "Settings | None" = None
    _config: AppConfig | None = None

    def __new__(cls, settings_path: Path | None = None) -> "Settings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, settings_path: Path | None = None) -> None:
        if self._config is None:
            self._config = load_config(settings_path)

    @property
    def environment(self) -> Environment:
        """현재 실행 환경"""
        assert self._config is not None
        return self._config.environment

    @property
    def user_id(self) -> str:
        """요청 소유자 ID"""
        assert self._config is not None
        return self._config.user_id

    @property
    def currency(self) -> str:
        """신규 계좌 기본 통화"""
        assert self._config is not None
        return self._config.currency

    @property
    def ledger(self) -> LedgerSettings:
        """Ledger 정합성 설정"""
        assert self._config is not None
        return self._config.ledger

    @property
    def db_path(self) -> Path:
        """현재 환경의 DB 경로"""
        assert self._config is not None
        return get_db_path(self._config)

    @classmethod
    def reset(cls) -> None:
        """싱글턴 인스턴스 초기화 (테스트용)"""
        cls._instance = None
        cls._config = None


def get_settings(settings_path: Path | None = None) -> Settings:
    """Settings 인스턴스 반환

    Args:
        settings_path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        Settings 싱글턴 인스턴스
    """
    return Settings(settings_path)

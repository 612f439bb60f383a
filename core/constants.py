"""
하드코딩 상수 - 변경될 일이 거의 없는 고정값

중요: 경로는 반드시 pathlib.Path 사용 (Windows/Linux 크로스 플랫폼)
"""

from pathlib import Path


# 프로젝트 루트 (이 파일 기준 2단계 상위: core/constants.py → moneyledger/)
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent


class Defaults:
    """기본값 상수"""

    # 인증은 외부 책임. 인증 연동 전까지 사용하는 소유자 ID
    USER_ID: str = "demo-user-123"
    CURRENCY: str = "USD"

    CATEGORY_COLOR: str = "#6B7280"
    CATEGORY_ICON: str = "folder"

    WEB_HOST: str = "127.0.0.1"
    WEB_PORT: int = 8000

    LOG_LEVEL: str = "INFO"


class Paths:
    """프로젝트 경로 상수 (pathlib 사용 - OS 독립적)"""

    # 디렉토리
    CONFIG_DIR: Path = PROJECT_ROOT / "config"
    DATA_DIR: Path = PROJECT_ROOT / "data"
    LOGS_DIR: Path = PROJECT_ROOT / "logs"
    WEB_LOGS_DIR: Path = LOGS_DIR / "web"

    # 설정 파일
    SETTINGS_FILE: Path = CONFIG_DIR / "settings.yaml"

    # DB 파일
    PROD_DB: Path = DATA_DIR / "moneyledger_prod.db"
    DEV_DB: Path = DATA_DIR / "moneyledger_dev.db"


class Money:
    """금액 표현 상수

    잔고/금액은 최소 단위 정수(센트)로 저장.
    """

    MINOR_UNIT_DIGITS: int = 2
    MINOR_UNITS_PER_MAJOR: int = 10 ** MINOR_UNIT_DIGITS


class Limits:
    """조회/입력 제한"""

    LIST_DEFAULT: int = 50
    LIST_MAX: int = 200
    # 거래 1건 금액 상한 (최소 단위, 10조)
    AMOUNT_MAX: int = 10 ** 15
    TAG_MAX_LENGTH: int = 50
    TAGS_MAX_COUNT: int = 20

"""
유틸리티 패키지

타임존 처리, 금액 변환 등 공통 유틸리티
"""

from core.utils.money import format_minor_units, to_minor_units
from core.utils.timezone import (
    now_epoch,
    now_utc,
    to_epoch_seconds,
    utc_from_epoch,
)

__all__ = [
    "format_minor_units",
    "to_minor_units",
    "now_epoch",
    "now_utc",
    "to_epoch_seconds",
    "utc_from_epoch",
]

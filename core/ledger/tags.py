"""
태그 직렬화

저장 형식 (버전 1):
    {"v": 1, "tags": ["food", "weekly"]}

호환 형식 (버전 0, 이전 데이터):
    ["food", "weekly"]

NULL / 빈 문자열은 빈 목록으로 해석. 순서는 보존.
"""

import json
from typing import Any

from core.constants import Limits

TAGS_FORMAT_VERSION = 1


class TagsFormatError(ValueError):
    """태그 형식 오류"""

    pass


def normalize_tags(tags: Any) -> list[str]:
    """입력 태그 검증 및 정규화

    앞뒤 공백 제거, 순서 보존. 빈 문자열/비문자열은 거부.

    Raises:
        TagsFormatError: 형식 오류
    """
    if tags is None:
        return []
    if isinstance(tags, str) or not isinstance(tags, (list, tuple)):
        raise TagsFormatError("tags must be a list of strings")
    if len(tags) > Limits.TAGS_MAX_COUNT:
        raise TagsFormatError(f"at most {Limits.TAGS_MAX_COUNT} tags are allowed")

    normalized = []
    for tag in tags:
        if not isinstance(tag, str):
            raise TagsFormatError(f"tag must be a string: {tag!r}")
        tag = tag.strip()
        if not tag:
            raise TagsFormatError("empty tags are not allowed")
        if len(tag) > Limits.TAG_MAX_LENGTH:
            raise TagsFormatError(f"tag is longer than {Limits.TAG_MAX_LENGTH} characters: {tag}")
        normalized.append(tag)
    return normalized


def encode_tags(tags: list[str]) -> str:
    """태그 목록을 저장 형식으로 직렬화"""
    return json.dumps(
        {"v": TAGS_FORMAT_VERSION, "tags": list(tags)},
        ensure_ascii=False,
        separators=(",", ":"),
    )


def decode_tags(raw: str | None) -> list[str]:
    """저장된 태그 역직렬화

    Raises:
        TagsFormatError: 알 수 없는 버전 또는 손상된 값
    """
    if raw is None or raw == "":
        return []

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise TagsFormatError(f"stored tags are not JSON: {raw!r}") from e

    # 버전 0: bare 배열
    if isinstance(data, list):
        return [str(tag) for tag in data]

    if not isinstance(data, dict):
        raise TagsFormatError(f"unknown tags format: {raw!r}")

    version = data.get("v")
    if version != TAGS_FORMAT_VERSION:
        raise TagsFormatError(f"unsupported tags version: {version!r}")

    tags = data.get("tags")
    if not isinstance(tags, list):
        raise TagsFormatError(f"tags list is missing: {raw!r}")
    return [str(tag) for tag in tags]

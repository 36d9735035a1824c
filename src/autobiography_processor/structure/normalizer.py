"""저장된 content 필드 정규화

Story 레코드의 content는 두 가지 형식으로 저장되어 있다.
- 평문 (AI 생성 결과, 예전 데이터) → 구조 파서
- JSON {"chapters": [...]} (구조화 편집기) → 그대로 역직렬화

어느 쪽이든 같은 Chapter 트리로 바꿔서 네비게이션에 넘긴다.
"""

import json
from typing import Any, List, Optional

import chardet

from autobiography_processor.config.loader import ParserConfig
from autobiography_processor.structure.errors import StructureFormatError
from autobiography_processor.structure.model import Chapter, chapters_from_dict, deep_copy_chapters
from autobiography_processor.structure.parser import StructureParser
from autobiography_processor.utils.logger import get_logger

logger = get_logger(__name__)


def decode_bytes(data: bytes, default_encoding: str = "utf-8") -> str:
    """바이트 content 디코딩 (UTF-8 실패 시 chardet으로 인코딩 감지)"""
    try:
        return data.decode(default_encoding)
    except UnicodeDecodeError:
        pass

    result = chardet.detect(data)
    encoding = result.get("encoding")
    confidence = result.get("confidence", 0) or 0
    logger.debug(f"Encoding detected: {encoding} ({confidence:.2f})")
    if not encoding:
        logger.warning("⚠️  Encoding detection failed, decoding with replacement characters")
        return data.decode(default_encoding, errors="replace")
    return data.decode(encoding, errors="replace")


def _looks_like_json(text: str) -> bool:
    stripped = text.lstrip()
    return stripped.startswith("{")


def load_chapters(content: Any, config: Optional[ParserConfig] = None) -> List[Chapter]:
    """content 필드를 Chapter 트리로 정규화

    Args:
        content: 평문 str, JSON str, {"chapters": [...]} dict, bytes, Chapter 리스트 또는 None
        config: 파서 설정

    Returns:
        새로 만든 Chapter 리스트 (입력과 인스턴스를 공유하지 않음)

    Raises:
        StructureFormatError: chapters 구조가 잘못된 경우
        TypeError: 지원하지 않는 content 타입
    """
    if content is None:
        return []

    if isinstance(content, bytes):
        content = decode_bytes(content)

    if isinstance(content, list):
        if all(isinstance(item, Chapter) for item in content):
            return deep_copy_chapters(content)
        raise StructureFormatError("A list content must contain Chapter objects")

    if isinstance(content, dict):
        if "chapters" not in content:
            raise StructureFormatError("Structured content has no 'chapters' key")
        return chapters_from_dict(content)

    if not isinstance(content, str):
        raise TypeError(f"Unsupported content type: {type(content).__name__}")

    if _looks_like_json(content):
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            logger.debug(f"Content looks like JSON but is not ({e}), parsing as text")
        else:
            if isinstance(data, dict) and "chapters" in data:
                chapters = chapters_from_dict(data)
                logger.debug(f"Structured content loaded: {len(chapters)} chapters")
                return chapters
            logger.debug("JSON content without 'chapters', parsing as text")

    return StructureParser(config).parse(content)

"""트리 → 유사 마크다운 변환, 읽기 시간 추정"""

import math
import re
from typing import List, Sequence, Union

from autobiography_processor.structure.model import Chapter, Content, to_plain_text

# 의미 없는 기본 섹션 제목은 "##" 제목으로 내보내지 않음
GENERIC_SECTION_TITLES = {"시작", "새 섹션", "내용", ""}

WORDS_PER_MINUTE = 200

_EXTRA_NEWLINES_RE = re.compile(r"\n{3,}")


def to_markdown(chapters: Sequence[Chapter]) -> str:
    """챕터 트리를 파서가 읽을 수 있는 텍스트로 변환

    Example:
        >>> from autobiography_processor.structure.parser import parse
        >>> text = to_markdown(parse("# 1장: 시작\\n\\n본문"))
        >>> text
        '# 1장: 시작\\n\\n본문\\n'
    """
    parts: List[str] = []
    for chapter in chapters:
        parts.append(f"# {chapter.title}\n\n")
        for section in chapter.sections:
            plain = to_plain_text(section.content).strip()
            if section.is_quote:
                # 인용구는 한 줄이어야 다시 파싱해도 한 섹션으로 남는다
                quoted = " ".join(line.strip() for line in plain.splitlines() if line.strip())
                if quoted:
                    parts.append(f"> {quoted}\n\n")
                continue

            if section.title not in GENERIC_SECTION_TITLES:
                parts.append(f"## {section.title}\n\n")
            if plain:
                parts.append(f"{plain}\n\n")
        parts.append("\n")

    markdown = _EXTRA_NEWLINES_RE.sub("\n\n", "".join(parts))
    return markdown.rstrip("\n") + "\n" if markdown.strip() else ""


def word_count(content: Union[str, Content, Sequence[Chapter], None]) -> int:
    """공백 기준 단어 수 (챕터 리스트, 본문, 문자열 모두 허용)"""
    if isinstance(content, (list, tuple)):
        return sum(
            word_count(section.content)
            for chapter in content
            for section in chapter.sections
        )
    return len(to_plain_text(content).split())


def estimate_reading_time(
    content: Union[str, Content, Sequence[Chapter], None],
    words_per_minute: int = WORDS_PER_MINUTE
) -> int:
    """읽는 시간(분) 추정: ceil(단어 수 / 분당 단어 수), 빈 글은 0

    Examples:
        >>> estimate_reading_time("하나 둘 셋")
        1
        >>> estimate_reading_time("")
        0
    """
    if words_per_minute <= 0:
        raise ValueError(f"words_per_minute must be positive, got {words_per_minute}")
    words = word_count(content)
    return math.ceil(words / words_per_minute)

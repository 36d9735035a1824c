"""구조 트리 데이터 모델

파서와 수동 편집기가 함께 만들어내는 Chapter → Section 트리,
섹션 본문의 두 가지 표현(평문 / 리치 텍스트), ID 규칙, JSON 직렬화
"""

import copy
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Union

from autobiography_processor.structure.errors import StructureFormatError

SECTION_ID_RE = re.compile(r"-section-(\d+)$")


@dataclass
class PlainText:
    """빈 줄로 구분된 문단들로 이루어진 평문 본문"""
    text: str = ""


@dataclass
class RichDoc:
    """수동 편집기가 만든 리치 텍스트 노드 트리

    nodes 예: [{"type": "paragraph", "children": [{"text": "..."}]}]
    """
    nodes: List[Dict[str, Any]] = field(default_factory=list)


Content = Union[PlainText, RichDoc]


def _node_text(node: Any) -> str:
    if isinstance(node, dict):
        if isinstance(node.get("text"), str):
            return node["text"]
        children = node.get("children")
        if isinstance(children, list):
            return "".join(_node_text(child) for child in children)
        if isinstance(children, dict):
            return _node_text(children)
    return ""


def to_plain_text(content: Union[Content, str, None]) -> str:
    """본문 표현과 관계없이 평문 추출

    리치 텍스트는 최상위 블록마다 한 줄로 이어 붙인다.

    Examples:
        >>> to_plain_text(PlainText("안녕"))
        '안녕'
        >>> to_plain_text(RichDoc([{"type": "paragraph", "children": [{"text": "가"}, {"text": "나"}]}]))
        '가나'
    """
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, PlainText):
        return content.text
    if isinstance(content, RichDoc):
        return "\n".join(_node_text(node) for node in content.nodes)
    raise TypeError(f"Unsupported content type: {type(content).__name__}")


def coerce_content(value: Any) -> Content:
    """저장 형식(str 또는 노드 리스트)을 Content로 변환"""
    if isinstance(value, (PlainText, RichDoc)):
        return value
    if value is None:
        return PlainText("")
    if isinstance(value, str):
        return PlainText(value)
    if isinstance(value, list):
        return RichDoc(list(value))
    raise StructureFormatError(f"Unsupported section content: {type(value).__name__}")


def empty_rich_doc() -> RichDoc:
    return RichDoc([{"type": "paragraph", "children": [{"text": ""}]}])


@dataclass
class Section:
    """챕터의 하위 단위

    Attributes:
        id: "<chapterId>-section-<k>"
        title: 표시 제목 (빈 문자열이면 제목 없이 렌더링)
        content: 평문 또는 리치 텍스트 본문
        is_quote: 인용구 섹션 여부 (본문 한 덩어리, 제목 미표시)
    """
    id: str
    title: str = ""
    content: Content = field(default_factory=PlainText)
    is_quote: bool = False

    @property
    def plain_text(self) -> str:
        return to_plain_text(self.content)

    def is_blank(self) -> bool:
        return not self.plain_text.strip()

    def __repr__(self):
        kind = "quote" if self.is_quote else "section"
        return f"<Section {self.id} ({kind}): {self.title!r} ({len(self.plain_text)} chars)>"


@dataclass
class Chapter:
    """자서전의 최상위 단위 ("# N장: 제목")

    Attributes:
        id: "chapter-<n>" (충돌 시 "-1", "-2" 접미사)
        title: "<n>장: <제목>"
        sections: 문서 순서를 유지하는 섹션 목록
    """
    id: str
    title: str
    sections: List[Section] = field(default_factory=list)

    def find_section(self, section_id: str) -> Optional[Section]:
        for section in self.sections:
            if section.id == section_id:
                return section
        return None

    def copy(self) -> "Chapter":
        return copy.deepcopy(self)

    def __repr__(self):
        return f"<Chapter {self.id}: {self.title} ({len(self.sections)} sections)>"


# ============================================
# ID 규칙
# ============================================

def chapter_id_for(number: Union[int, str]) -> str:
    return f"chapter-{number}"


def unique_chapter_id(candidate: str, taken: Iterable[str]) -> str:
    """이미 사용된 ID와 겹치면 "-1", "-2", ... 접미사로 구분

    Examples:
        >>> unique_chapter_id("chapter-1", {"chapter-1"})
        'chapter-1-1'
    """
    taken = set(taken)
    if candidate not in taken:
        return candidate
    suffix = 1
    while f"{candidate}-{suffix}" in taken:
        suffix += 1
    return f"{candidate}-{suffix}"


def section_id_for(chapter_id: str, index: int) -> str:
    return f"{chapter_id}-section-{index}"


def next_section_index(chapter: Chapter) -> int:
    """기존 섹션 ID의 최대 번호 + 1 (삭제된 번호는 재사용하지 않음)"""
    highest = -1
    for section in chapter.sections:
        match = SECTION_ID_RE.search(section.id)
        if match:
            highest = max(highest, int(match.group(1)))
    return highest + 1


# ============================================
# 직렬화 ({"chapters": [...]})
# ============================================

def _content_to_wire(content: Content) -> Union[str, List[Dict[str, Any]]]:
    if isinstance(content, RichDoc):
        return copy.deepcopy(content.nodes)
    return content.text


def chapters_to_dict(chapters: List[Chapter]) -> Dict[str, Any]:
    """저장용 {"chapters": [...]} 구조로 변환"""
    return {
        "chapters": [
            {
                "id": chapter.id,
                "title": chapter.title,
                "sections": [
                    {
                        "id": section.id,
                        "title": section.title,
                        "content": _content_to_wire(section.content),
                        "isQuote": section.is_quote
                    }
                    for section in chapter.sections
                ]
            }
            for chapter in chapters
        ]
    }


def chapters_from_dict(data: Dict[str, Any]) -> List[Chapter]:
    """{"chapters": [...]} 구조를 트리로 변환

    Raises:
        StructureFormatError: 필수 필드 누락 또는 타입 불일치
    """
    raw_chapters = data.get("chapters") if isinstance(data, dict) else None
    if not isinstance(raw_chapters, list):
        raise StructureFormatError("'chapters' must be a list")

    chapters: List[Chapter] = []
    for ci, raw in enumerate(raw_chapters):
        if not isinstance(raw, dict) or not isinstance(raw.get("id"), str):
            raise StructureFormatError(f"Chapter {ci} is missing a string 'id'")
        raw_sections = raw.get("sections", [])
        if not isinstance(raw_sections, list):
            raise StructureFormatError(f"Chapter {raw['id']} 'sections' must be a list")

        sections = []
        for si, raw_section in enumerate(raw_sections):
            if not isinstance(raw_section, dict) or not isinstance(raw_section.get("id"), str):
                raise StructureFormatError(f"Section {si} of {raw['id']} is missing a string 'id'")
            sections.append(Section(
                id=raw_section["id"],
                title=raw_section.get("title") or "",
                content=coerce_content(raw_section.get("content")),
                is_quote=bool(raw_section.get("isQuote", False))
            ))

        chapters.append(Chapter(id=raw["id"], title=raw.get("title") or "", sections=sections))
    return chapters


def deep_copy_chapters(chapters: List[Chapter]) -> List[Chapter]:
    """뷰마다 독립된 트리 인스턴스를 갖도록 깊은 복사"""
    return [chapter.copy() for chapter in chapters]

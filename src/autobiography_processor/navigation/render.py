"""렌더링용 페이지 시퀀스

트리에는 편집 중인 빈 섹션이 남아 있을 수 있지만, 독자에게는 본문이 있는
섹션만 페이지로 보여준다. 스크롤 관찰 대상도 같은 기준을 따른다.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

from autobiography_processor.structure.model import Chapter, Section


class PageKind(Enum):
    CHAPTER_TITLE = "chapter_title"
    SECTION = "section"


@dataclass
class Page:
    """렌더링되는 한 페이지

    Attributes:
        kind: 챕터 제목 페이지 또는 섹션 페이지
        chapter_id: 소속 챕터 ID
        section: 섹션 페이지일 때의 섹션
        index: 챕터 내 표시 순번 (섹션 페이지만, 0부터)
    """
    kind: PageKind
    chapter_id: str
    section: Optional[Section] = None
    index: int = 0

    @property
    def anchor_id(self) -> str:
        """스크롤 대상 요소 ID"""
        return self.section.id if self.section is not None else self.chapter_id

    @property
    def show_title(self) -> bool:
        """인용구와 제목 없는 섹션은 제목을 그리지 않음"""
        return self.section is not None and not self.section.is_quote and bool(self.section.title)


def visible_sections(chapter: Chapter) -> List[Section]:
    """본문이 비어 있지 않은 섹션만 (문서 순서 유지)"""
    return [section for section in chapter.sections if not section.is_blank()]


def build_pages(chapters: Sequence[Chapter]) -> List[Page]:
    """챕터 제목 페이지 + 보이는 섹션 페이지 순서로 나열"""
    pages: List[Page] = []
    for chapter in chapters:
        pages.append(Page(kind=PageKind.CHAPTER_TITLE, chapter_id=chapter.id))
        for index, section in enumerate(visible_sections(chapter)):
            pages.append(Page(kind=PageKind.SECTION, chapter_id=chapter.id, section=section, index=index))
    return pages


def observable_ids(chapters: Sequence[Chapter]) -> List[str]:
    """스크롤 관찰 대상 ID (챕터 제목 페이지 포함, 문서 순서)"""
    return [page.anchor_id for page in build_pages(chapters)]

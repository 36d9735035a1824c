"""구조화 수동 편집기

파서를 거치지 않고 Chapter 트리를 직접 만들고 고친다.
- 챕터/섹션 추가, 삭제, 이름 변경, 본문 수정
- 드래그로 섹션 순서 변경
- 목차 펼침 상태 관리

구조 규칙(챕터 최소 1개, 챕터당 섹션 최소 1개)을 어기는 요청은
EditorValidationError로 거부하고 트리는 그대로 둔다.
"""

import re
from typing import Dict, List, Optional

from autobiography_processor.config.loader import EditorConfig, get_config
from autobiography_processor.structure.errors import EditorValidationError, UnknownNodeError
from autobiography_processor.structure.model import (
    Chapter,
    Content,
    Section,
    chapter_id_for,
    chapters_to_dict,
    coerce_content,
    deep_copy_chapters,
    empty_rich_doc,
    next_section_index,
    section_id_for,
)
from autobiography_processor.utils.logger import get_logger

logger = get_logger(__name__)

MIN_CHAPTERS_MESSAGE = "최소 하나의 챕터가 필요합니다."
MIN_SECTIONS_MESSAGE = "챕터당 최소 하나의 섹션이 필요합니다."
NO_CONTENT_MESSAGE = "최소한 하나의 섹션에 내용을 입력해주세요."

DEFAULT_CHAPTER_TITLE = "1장: 나의 이야기"
DEFAULT_SECTION_TITLE = "시작"


class StoryEditor:
    """Chapter 트리 편집기

    편집기는 자신만의 트리 사본을 가진다. 미리보기 등 다른 뷰에는
    snapshot()으로 만든 사본을 넘긴다.
    """

    def __init__(self, chapters: Optional[List[Chapter]] = None, config: Optional[EditorConfig] = None):
        """
        Args:
            chapters: 시작 트리 (없으면 기본 챕터 하나 생성)
            config: 편집기 설정
        """
        self.config = config or get_config().editor
        self.chapters: List[Chapter] = deep_copy_chapters(chapters) if chapters else [self._default_chapter()]
        self.expanded_chapters: Dict[str, bool] = {chapter.id: True for chapter in self.chapters}
        # 챕터별 다음 섹션 번호 (삭제된 번호는 다시 쓰지 않음)
        self._section_counters: Dict[str, int] = {
            chapter.id: next_section_index(chapter) for chapter in self.chapters
        }

    @staticmethod
    def _default_chapter() -> Chapter:
        chapter_id = chapter_id_for(1)
        return Chapter(
            id=chapter_id,
            title=DEFAULT_CHAPTER_TITLE,
            sections=[Section(id=section_id_for(chapter_id, 0), title=DEFAULT_SECTION_TITLE, content=empty_rich_doc())]
        )

    # ============================================
    # 조회
    # ============================================

    def get_chapter(self, chapter_id: str) -> Chapter:
        for chapter in self.chapters:
            if chapter.id == chapter_id:
                return chapter
        raise UnknownNodeError(f"Unknown chapter: {chapter_id}")

    def get_section(self, chapter_id: str, section_id: str) -> Section:
        section = self.get_chapter(chapter_id).find_section(section_id)
        if section is None:
            raise UnknownNodeError(f"Unknown section: {section_id} (chapter {chapter_id})")
        return section

    def snapshot(self) -> List[Chapter]:
        """다른 뷰에 넘길 독립 사본"""
        return deep_copy_chapters(self.chapters)

    def to_dict(self) -> dict:
        return chapters_to_dict(self.chapters)

    def has_content(self) -> bool:
        """본문이 있는 섹션이 하나라도 있는지 (발행 전 검사)"""
        return any(not section.is_blank() for chapter in self.chapters for section in chapter.sections)

    def validate_for_publish(self) -> None:
        if not self.has_content():
            logger.warning(f"⚠️  Publish rejected: {NO_CONTENT_MESSAGE}")
            raise EditorValidationError(NO_CONTENT_MESSAGE)

    # ============================================
    # 챕터
    # ============================================

    def add_chapter(self, title: Optional[str] = None) -> Chapter:
        """새 챕터 추가 (빈 섹션 하나 포함)"""
        number = len(self.chapters) + 1
        taken = {chapter.id for chapter in self.chapters}
        while chapter_id_for(number) in taken:
            number += 1
        chapter_id = chapter_id_for(number)

        chapter = Chapter(
            id=chapter_id,
            title=title or f"{number}장: {self.config.new_chapter_title}",
            sections=[Section(
                id=section_id_for(chapter_id, 0),
                title=self.config.new_section_title,
                content=empty_rich_doc()
            )]
        )
        self.chapters.append(chapter)
        self._section_counters[chapter_id] = 1
        self.expanded_chapters[chapter_id] = True
        logger.debug(f"Chapter added: {chapter_id}")
        return chapter

    def delete_chapter(self, chapter_id: str) -> None:
        chapter = self.get_chapter(chapter_id)
        if len(self.chapters) <= 1:
            logger.warning(f"⚠️  Delete rejected for {chapter_id}: {MIN_CHAPTERS_MESSAGE}")
            raise EditorValidationError(MIN_CHAPTERS_MESSAGE)

        self.chapters.remove(chapter)
        self.expanded_chapters.pop(chapter_id, None)
        logger.debug(f"Chapter deleted: {chapter_id}")

    def rename_chapter(self, chapter_id: str, title: str) -> None:
        self.get_chapter(chapter_id).title = title

    # ============================================
    # 섹션
    # ============================================

    def _next_section_title(self, chapter: Chapter) -> str:
        prefix = self.config.section_title_prefix
        pattern = re.compile(rf"^{re.escape(prefix)}\s+(\d+)$")
        highest = 0
        for section in chapter.sections:
            match = pattern.match(section.title)
            if match:
                highest = max(highest, int(match.group(1)))
        return f"{prefix} {highest + 1}"

    def add_section(self, chapter_id: str, title: Optional[str] = None) -> Section:
        """챕터 끝에 빈 섹션 추가"""
        chapter = self.get_chapter(chapter_id)
        index = max(self._section_counters.get(chapter_id, 0), next_section_index(chapter))
        self._section_counters[chapter_id] = index + 1

        section = Section(
            id=section_id_for(chapter_id, index),
            title=title if title is not None else self._next_section_title(chapter),
            content=empty_rich_doc()
        )
        chapter.sections.append(section)
        logger.debug(f"Section added: {section.id}")
        return section

    def delete_section(self, chapter_id: str, section_id: str) -> None:
        chapter = self.get_chapter(chapter_id)
        section = self.get_section(chapter_id, section_id)
        if len(chapter.sections) <= 1:
            logger.warning(f"⚠️  Delete rejected for {section_id}: {MIN_SECTIONS_MESSAGE}")
            raise EditorValidationError(MIN_SECTIONS_MESSAGE)

        chapter.sections.remove(section)
        logger.debug(f"Section deleted: {section_id}")

    def move_section(self, chapter_id: str, from_index: int, to_index: int) -> None:
        """드래그 앤 드롭 순서 변경"""
        sections = self.get_chapter(chapter_id).sections
        if not (0 <= from_index < len(sections)) or not (0 <= to_index < len(sections)):
            raise IndexError(f"Section index out of range: {from_index} -> {to_index} ({len(sections)} sections)")

        moved = sections.pop(from_index)
        sections.insert(to_index, moved)

    def rename_section(self, chapter_id: str, section_id: str, title: str) -> None:
        self.get_section(chapter_id, section_id).title = title

    def update_section_content(self, chapter_id: str, section_id: str, content: Content) -> None:
        self.get_section(chapter_id, section_id).content = coerce_content(content)

    # ============================================
    # 목차 펼침 상태
    # ============================================

    def toggle_chapter(self, chapter_id: str) -> bool:
        self.get_chapter(chapter_id)
        self.expanded_chapters[chapter_id] = not self.expanded_chapters.get(chapter_id, False)
        return self.expanded_chapters[chapter_id]

    def expand_all(self) -> None:
        self.expanded_chapters = {chapter.id: True for chapter in self.chapters}

    def collapse_all(self) -> None:
        self.expanded_chapters = {chapter.id: False for chapter in self.chapters}

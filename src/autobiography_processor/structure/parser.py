"""자서전 텍스트 구조 파서

AI 생성 결과나 예전에 저장된 평문(유사 마크다운)을 Chapter → Section 트리로 변환한다.

지원하는 줄 형식:
    # 1장: 제목 / # 제1장 제목   → 새 챕터 (뒤따르는 본문용 무제 섹션을 함께 연다)
    ## 소제목                    → 새 섹션
    > 인용문                     → 인용구 섹션 (한 줄)
    빈 줄                        → 문단 구분 (연속된 빈 줄은 하나로)
    그 외                        → 현재 섹션 본문

한 번의 순방향 패스로 줄을 분류(classify_line)하고, ParserContext 위에서
step()으로 상태를 전이시킨 뒤 finish()로 마지막 섹션을 정리한다.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set

from autobiography_processor.config.loader import ParserConfig, get_config
from autobiography_processor.structure.model import (
    Chapter,
    PlainText,
    Section,
    chapter_id_for,
    section_id_for,
    unique_chapter_id,
)
from autobiography_processor.utils.logger import get_logger

logger = get_logger(__name__)

CHAPTER_RE = re.compile(r"^#\s+(제)?(\d+)장:?\s+(.+)$")
SECTION_RE = re.compile(r"^##\s+(.+)$")
QUOTE_RE = re.compile(r"^>\s+(.+)$")
LINE_SPLIT_RE = re.compile(r"\r?\n")


class LineKind(Enum):
    CHAPTER = "chapter"
    SECTION = "section"
    QUOTE = "quote"
    BLANK = "blank"
    TEXT = "text"


class ParserState(Enum):
    """파서 상태

    NONE: 아직 챕터가 열리지 않음 (본문은 버려짐)
    IN_CHAPTER: 챕터 제목 또는 인용구 뒤의 무제 섹션에 본문을 모으는 중
    IN_SECTION: "##" 제목으로 연 섹션에 본문을 모으는 중
    """
    NONE = "none"
    IN_CHAPTER = "in_chapter"
    IN_SECTION = "in_section"


class QuoteFollowPolicy(Enum):
    """인용구 직후 "##" 없이 이어지는 본문 섹션의 제목 처리

    BLANK: 제목 없이 둔다 (뷰어 동작)
    PLACEHOLDER: 첫 본문 줄이 들어올 때 기본 제목을 붙인다 (편집 페이지 동작)
    """
    BLANK = "blank"
    PLACEHOLDER = "placeholder"


@dataclass
class Token:
    """분류된 한 줄"""
    kind: LineKind
    line: str
    number: str = ""
    text: str = ""


def classify_line(line: str) -> Token:
    """한 줄을 분류 (이전 줄과 무관)"""
    match = CHAPTER_RE.match(line)
    if match:
        return Token(LineKind.CHAPTER, line, number=match.group(2), text=match.group(3).rstrip())

    match = SECTION_RE.match(line)
    if match:
        return Token(LineKind.SECTION, line, text=match.group(1).rstrip())

    match = QUOTE_RE.match(line)
    if match:
        return Token(LineKind.QUOTE, line, text=match.group(1))

    if not line.strip():
        return Token(LineKind.BLANK, line)
    return Token(LineKind.TEXT, line)


@dataclass
class ParserContext:
    """한 번의 파싱 패스 동안 유지되는 상태

    Attributes:
        config: 파서 설정
        chapters: 지금까지 만들어진 챕터 (문서 순서)
        state: 현재 ParserState
        chapter: 현재 열린 챕터
        section_id: 현재 열린 섹션 ID (아직 트리에 추가되지 않음)
        section_title: 현재 열린 섹션 제목
        buffer: 현재 섹션 본문 줄
        section_counters: 챕터별 다음 섹션 번호
        used_chapter_ids: 이미 사용한 챕터 ID
        after_quote: 인용구 이후 아직 본문 줄이 들어오지 않음
        prev_blank: 직전 줄이 빈 줄
        dropped_lines: 챕터가 열리기 전에 버려진 줄 수
    """
    config: ParserConfig = field(default_factory=ParserConfig)
    chapters: List[Chapter] = field(default_factory=list)
    state: ParserState = ParserState.NONE
    chapter: Optional[Chapter] = None
    section_id: Optional[str] = None
    section_title: str = ""
    buffer: List[str] = field(default_factory=list)
    section_counters: Dict[str, int] = field(default_factory=dict)
    used_chapter_ids: Set[str] = field(default_factory=set)
    after_quote: bool = False
    prev_blank: bool = False
    dropped_lines: int = 0

    @property
    def policy(self) -> QuoteFollowPolicy:
        return QuoteFollowPolicy(self.config.quote_follow_policy)

    def allocate_section_id(self) -> str:
        chapter_id = self.chapter.id
        index = self.section_counters.get(chapter_id, 0)
        self.section_counters[chapter_id] = index + 1
        return section_id_for(chapter_id, index)


def trim_blank_lines(lines: List[str]) -> List[str]:
    """앞뒤 빈 줄 제거"""
    start, end = 0, len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return lines[start:end]


def flush_section(ctx: ParserContext) -> Optional[Section]:
    """열린 섹션을 트리에 확정 (본문이 비어 있으면 버림)"""
    if ctx.chapter is None or ctx.section_id is None:
        return None

    lines = trim_blank_lines(ctx.buffer)
    section = None
    if lines:
        section = Section(
            id=ctx.section_id,
            title=ctx.section_title,
            content=PlainText("\n".join(lines)),
            is_quote=False
        )
        ctx.chapter.sections.append(section)
    else:
        logger.debug(f"Empty section discarded: {ctx.section_id}")

    ctx.section_id = None
    ctx.section_title = ""
    ctx.buffer = []
    return section


def _open_section(ctx: ParserContext, title: str, state: ParserState) -> None:
    ctx.section_id = ctx.allocate_section_id()
    ctx.section_title = title
    ctx.buffer = []
    ctx.state = state


def _start_chapter(ctx: ParserContext, token: Token) -> None:
    flush_section(ctx)

    chapter_id = unique_chapter_id(chapter_id_for(token.number), ctx.used_chapter_ids)
    if chapter_id != chapter_id_for(token.number):
        logger.debug(f"Duplicate chapter number {token.number}, using id {chapter_id}")
    ctx.used_chapter_ids.add(chapter_id)
    ctx.section_counters[chapter_id] = 0

    ctx.chapter = Chapter(id=chapter_id, title=f"{token.number}장: {token.text}")
    ctx.chapters.append(ctx.chapter)
    ctx.after_quote = False
    _open_section(ctx, "", ParserState.IN_CHAPTER)


def _start_section(ctx: ParserContext, token: Token) -> None:
    flush_section(ctx)
    ctx.after_quote = False
    _open_section(ctx, token.text, ParserState.IN_SECTION)


def _emit_quote(ctx: ParserContext, token: Token) -> None:
    flush_section(ctx)
    ctx.chapter.sections.append(Section(
        id=ctx.allocate_section_id(),
        title=ctx.config.quote_title,
        content=PlainText(token.text),
        is_quote=True
    ))
    ctx.after_quote = True
    _open_section(ctx, "", ParserState.IN_CHAPTER)


def _append_line(ctx: ParserContext, token: Token) -> None:
    ctx.buffer.append(token.line)
    if token.kind is LineKind.TEXT and ctx.after_quote:
        if ctx.policy is QuoteFollowPolicy.PLACEHOLDER and not ctx.section_title:
            ctx.section_title = ctx.config.placeholder_section_title
        ctx.after_quote = False


def step(ctx: ParserContext, line: str) -> ParserContext:
    """한 줄을 처리하여 컨텍스트를 전이"""
    token = classify_line(line)

    if token.kind is LineKind.BLANK:
        if ctx.prev_blank and ctx.config.collapse_blank_lines:
            return ctx
        ctx.prev_blank = True
    else:
        ctx.prev_blank = False

    if token.kind is LineKind.CHAPTER:
        _start_chapter(ctx, token)
        return ctx

    if ctx.state is ParserState.NONE:
        # "##", ">", 본문 모두 붙일 챕터가 없음
        if token.kind is not LineKind.BLANK:
            ctx.dropped_lines += 1
        return ctx

    if token.kind is LineKind.SECTION:
        _start_section(ctx, token)
    elif token.kind is LineKind.QUOTE:
        _emit_quote(ctx, token)
    else:
        _append_line(ctx, token)
    return ctx


def finish(ctx: ParserContext, raw_text: str) -> List[Chapter]:
    """마지막 섹션을 확정하고 빈 챕터 제거, 필요 시 전체 내용 대체 챕터 생성"""
    flush_section(ctx)
    ctx.state = ParserState.NONE

    chapters = []
    for chapter in ctx.chapters:
        if chapter.sections:
            chapters.append(chapter)
        else:
            logger.debug(f"Chapter without content dropped: {chapter.id}")

    if ctx.dropped_lines and ctx.chapters:
        logger.debug(f"{ctx.dropped_lines} line(s) before the first chapter were ignored")

    if not chapters and raw_text.strip():
        chapter_id = chapter_id_for(1)
        chapters = [Chapter(
            id=chapter_id,
            title=ctx.config.fallback_chapter_title,
            sections=[Section(
                id=section_id_for(chapter_id, 0),
                title=ctx.config.fallback_section_title,
                content=PlainText(raw_text),
                is_quote=False
            )]
        )]
    return chapters


class StructureParser:
    """자서전 평문을 챕터/섹션 트리로 변환

    같은 입력에는 항상 같은 트리(ID 포함)를 돌려준다.
    """

    def __init__(self, config: Optional[ParserConfig] = None):
        """
        Args:
            config: 파서 설정 (없으면 전역 설정 사용)
        """
        self.config = config or get_config().parser

    def parse(self, raw_text: Optional[str]) -> List[Chapter]:
        if not raw_text:
            return []

        ctx = ParserContext(config=self.config)
        for line in LINE_SPLIT_RE.split(raw_text):
            step(ctx, line)
        chapters = finish(ctx, raw_text)

        section_count = sum(len(c.sections) for c in chapters)
        logger.debug(f"Parsed structure: {len(chapters)} chapters, {section_count} sections")
        for chapter in chapters:
            logger.debug(f"  {chapter.id}: {chapter.title}")
            for section in chapter.sections:
                marker = "quote" if section.is_quote else "section"
                logger.debug(f"    {section.id} [{marker}] {section.title!r}")
        return chapters


def parse(raw_text: Optional[str], config: Optional[ParserConfig] = None) -> List[Chapter]:
    """평문 → Chapter 트리

    Example:
        >>> chapters = parse("# 1장: 시작\\n\\n본문 첫줄.")
        >>> chapters[0].id, chapters[0].title
        ('chapter-1', '1장: 시작')
    """
    return StructureParser(config).parse(raw_text)

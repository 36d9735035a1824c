"""목차 ↔ 스크롤 위치 동기화

(현재 챕터, 현재 섹션) 한 쌍을 유일한 상태로 두고
- 목차 클릭 → 상태 변경 + 해당 섹션으로 스크롤 (능동 전이)
- 스크롤 관찰 → 상태만 변경, 스크롤하지 않음 (수동 전이)
두 방향을 모두 처리한다. 파서 결과와 편집기 트리를 똑같이 받는다.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Set, Tuple

from autobiography_processor.config.loader import NavigationConfig, get_config
from autobiography_processor.navigation.render import observable_ids, visible_sections
from autobiography_processor.navigation.viewport import Scheduler, Scroller, ViewportReporter
from autobiography_processor.structure.model import Chapter, deep_copy_chapters
from autobiography_processor.structure.normalizer import load_chapters
from autobiography_processor.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class NavigationState:
    """목차 UI에 넘기는 상태 스냅샷"""
    current_chapter_id: Optional[str]
    current_section_id: Optional[str]
    expanded_chapters: Dict[str, bool] = field(default_factory=dict)


StateListener = Callable[[NavigationState], None]


class NavigationCoordinator:
    """현재 챕터/섹션 상태와 목차 펼침 상태를 관리

    뷰마다 하나씩 만들며, 트리는 생성 시 깊은 복사하여 다른 뷰와 공유하지 않는다.
    """

    def __init__(
        self,
        chapters: Sequence[Chapter],
        scroller: Optional[Scroller] = None,
        reporter: Optional[ViewportReporter] = None,
        scheduler: Optional[Scheduler] = None,
        config: Optional[NavigationConfig] = None
    ):
        """
        Args:
            chapters: 파서 또는 편집기가 만든 트리
            scroller: 스크롤 실행기 (없으면 스크롤 명령은 무시)
            reporter: 화면 중앙 섹션 알림원
            scheduler: 재시도 지연 실행기 (없으면 재시도하지 않음)
            config: 네비게이션 설정
        """
        self.config = config or get_config().navigation
        self.scroller = scroller
        self.scheduler = scheduler
        self.reporter: Optional[ViewportReporter] = None

        self.chapters: List[Chapter] = []
        self.current_chapter_id: Optional[str] = None
        self.current_section_id: Optional[str] = None
        self.expanded_chapters: Dict[str, bool] = {}

        self._chapter_by_id: Dict[str, Chapter] = {}
        self._visible_pairs: Set[Tuple[str, str]] = set()
        self._first_chapter_of_section: Dict[str, str] = {}
        self._listeners: List[StateListener] = []
        self._unsubscribe_reporter: Optional[Callable[[], None]] = None
        self._scroll_target: Optional[str] = None

        self.set_chapters(chapters)
        if reporter is not None:
            self.attach(reporter)

    @classmethod
    def from_content(cls, content: Any, **kwargs) -> "NavigationCoordinator":
        """저장된 content(평문 또는 JSON)에서 바로 생성"""
        return cls(load_chapters(content), **kwargs)

    # ============================================
    # 트리 / 구독
    # ============================================

    def set_chapters(self, chapters: Sequence[Chapter]) -> None:
        """트리 교체 후 첫 챕터의 첫 섹션으로 상태 초기화"""
        self.chapters = deep_copy_chapters(list(chapters))
        self._chapter_by_id = {chapter.id: chapter for chapter in self.chapters}
        # 섹션 ID는 챕터 안에서만 유일하므로 (챕터, 섹션) 쌍으로 찾는다
        self._visible_pairs = set()
        self._first_chapter_of_section = {}
        for chapter in self.chapters:
            for section in visible_sections(chapter):
                self._visible_pairs.add((chapter.id, section.id))
                self._first_chapter_of_section.setdefault(section.id, chapter.id)
        self._scroll_target = None

        self.current_chapter_id = None
        self.current_section_id = None
        self.expanded_chapters = {}
        if self.chapters:
            first = self.chapters[0]
            sections = visible_sections(first)
            self.current_chapter_id = first.id
            self.current_section_id = sections[0].id if sections else None
            self.expanded_chapters[first.id] = True

        self._sync_reporter_targets()
        logger.debug(f"Navigation initialized: {len(self.chapters)} chapters, current={self.current_section_id}")
        self._notify()

    def attach(self, reporter: ViewportReporter) -> None:
        """스크롤 관찰 알림 연결 (기존 연결은 해제)"""
        self.detach()
        self.reporter = reporter
        self._unsubscribe_reporter = reporter.on_visible_section_changed(self.on_scroll_observed)
        self._sync_reporter_targets()

    def detach(self) -> None:
        if self._unsubscribe_reporter is not None:
            self._unsubscribe_reporter()
        self._unsubscribe_reporter = None
        self.reporter = None

    def _sync_reporter_targets(self) -> None:
        set_observable = getattr(self.reporter, "set_observable", None)
        if callable(set_observable):
            set_observable(observable_ids(self.chapters))

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def state(self) -> NavigationState:
        return NavigationState(
            current_chapter_id=self.current_chapter_id,
            current_section_id=self.current_section_id,
            expanded_chapters=dict(self.expanded_chapters)
        )

    def _notify(self) -> None:
        snapshot = self.state
        for listener in list(self._listeners):
            listener(snapshot)

    def _set_current(self, chapter_id: str, section_id: Optional[str]) -> bool:
        changed = (chapter_id, section_id) != (self.current_chapter_id, self.current_section_id)
        self.current_chapter_id = chapter_id
        self.current_section_id = section_id
        if not self.expanded_chapters.get(chapter_id):
            self.expanded_chapters[chapter_id] = True
            changed = True
        return changed

    # ============================================
    # 전이
    # ============================================

    def select_chapter(self, chapter_id: str) -> None:
        """목차에서 챕터 선택: 첫 섹션으로 이동 (보이는 섹션이 없으면 스크롤 없음)"""
        chapter = self._chapter_by_id.get(chapter_id)
        if chapter is None:
            logger.warning(f"⚠️  Unknown chapter selected: {chapter_id}")
            return

        sections = visible_sections(chapter)
        first_id = sections[0].id if sections else None
        if self._set_current(chapter_id, first_id):
            self._notify()
        if first_id is not None:
            self.scroll_to_section(first_id)

    def select_section(self, chapter_id: str, section_id: str) -> None:
        """목차에서 섹션 선택"""
        if (chapter_id, section_id) not in self._visible_pairs:
            logger.warning(f"⚠️  Unknown section selected: {section_id} (chapter {chapter_id})")
            return

        if self._set_current(chapter_id, section_id):
            self._notify()
        self.scroll_to_section(section_id)

    def on_scroll_observed(self, visible_id: str) -> None:
        """스크롤/리사이즈 관찰 결과 반영 (스크롤은 일으키지 않음)

        Args:
            visible_id: 화면 중앙의 섹션 ID 또는 챕터 제목 페이지 ID
        """
        if visible_id in self._first_chapter_of_section:
            # 여러 챕터에 같은 ID가 있으면 문서 순서상 첫 챕터
            chapter_id, section_id = self._first_chapter_of_section[visible_id], visible_id
        elif visible_id in self._chapter_by_id:
            chapter_id, section_id = visible_id, None
        else:
            logger.debug(f"Ignoring scroll observation for unknown id: {visible_id}")
            return

        if (chapter_id, section_id) == (self.current_chapter_id, self.current_section_id):
            return
        self._set_current(chapter_id, section_id)
        self._notify()

    # ============================================
    # 스크롤
    # ============================================

    def header_offset(self) -> int:
        """모바일 폭에서는 고정 헤더 높이만큼 띄운다"""
        if self.scroller is None:
            return 0
        if self.scroller.viewport_width() < self.config.mobile_breakpoint:
            return self.config.mobile_header_offset
        return 0

    def scroll_to_section(self, section_id: str) -> None:
        """해당 섹션으로 스크롤 (마지막 요청이 우선)"""
        self._scroll_target = section_id
        self._attempt_scroll(section_id, 0)

    def _attempt_scroll(self, section_id: str, attempt: int) -> None:
        if self._scroll_target != section_id:
            logger.debug(f"Scroll to {section_id} superseded by {self._scroll_target}")
            return
        if self.scroller is None:
            logger.debug(f"No scroller attached, skipping scroll to {section_id}")
            self._scroll_target = None
            return

        try:
            top = self.scroller.element_top(section_id)
            if top is None:
                if self.scheduler is not None and attempt < self.config.max_scroll_retries:
                    logger.debug(f"Section {section_id} not rendered yet, retry {attempt + 1}")
                    self.scheduler.call_later(
                        self.config.scroll_retry_delay, self._attempt_scroll, section_id, attempt + 1
                    )
                    return
                logger.warning(f"⚠️  섹션을 찾을 수 없음: {section_id}")
                self._scroll_target = None
                return

            offset = self.header_offset()
            target = top + self.scroller.page_offset() - offset
            self.scroller.scroll_to(target, smooth=self.config.smooth_scroll)
            logger.debug(f"스크롤 이동: {section_id}, 오프셋: {offset}px")
        except Exception as e:
            logger.error(f"❌ Scroll to {section_id} failed: {e}")
        self._scroll_target = None

    # ============================================
    # 목차 펼침
    # ============================================

    def toggle_chapter(self, chapter_id: str) -> None:
        if chapter_id not in self._chapter_by_id:
            logger.warning(f"⚠️  Unknown chapter toggled: {chapter_id}")
            return
        self.expanded_chapters[chapter_id] = not self.expanded_chapters.get(chapter_id, False)
        self._notify()

    def expand_all(self) -> None:
        self.expanded_chapters = {chapter.id: True for chapter in self.chapters}
        self._notify()

    def collapse_all(self) -> None:
        self.expanded_chapters = {chapter.id: False for chapter in self.chapters}
        self._notify()

    def is_expanded(self, chapter_id: str) -> bool:
        return self.expanded_chapters.get(chapter_id, False)

    def current_label(self) -> str:
        """모바일 목차 버튼에 표시할 "챕터 › 섹션" 문구"""
        chapter = self._chapter_by_id.get(self.current_chapter_id) if self.current_chapter_id else None
        if chapter is None:
            return ""
        section = chapter.find_section(self.current_section_id) if self.current_section_id else None
        if section is not None and section.title and not section.is_quote:
            return f"{chapter.title} › {section.title}"
        return chapter.title

"""뷰포트 관련 인터페이스

브라우저 DOM 대신 주입받는 인터페이스로 스크롤 상태를 주고받는다.
- ViewportReporter: 화면 중앙에 보이는 섹션이 바뀌었음을 알림
- Scroller: 요소 위치 조회와 스크롤 실행
- Scheduler: 지연 실행 (asyncio 이벤트 루프의 call_later와 호환)
"""

from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional, Protocol, Sequence

from autobiography_processor.utils.logger import get_logger

logger = get_logger(__name__)

VisibleSectionCallback = Callable[[str], None]


@dataclass
class SectionRect:
    """렌더링된 섹션의 화면 좌표 (뷰포트 기준)"""
    section_id: str
    top: float
    bottom: float

    def contains(self, y: float) -> bool:
        return self.top <= y <= self.bottom


def find_section_at_midpoint(rects: Iterable[SectionRect], viewport_height: float) -> Optional[str]:
    """뷰포트 세로 중앙에 걸친 첫 번째 섹션 (문서 순서 우선)"""
    midpoint = viewport_height / 2
    for rect in rects:
        if rect.contains(midpoint):
            return rect.section_id
    return None


class ViewportReporter(Protocol):
    def on_visible_section_changed(self, callback: VisibleSectionCallback) -> Callable[[], None]:
        ...


class Scroller(Protocol):
    def viewport_width(self) -> float:
        ...

    def page_offset(self) -> float:
        ...

    def element_top(self, element_id: str) -> Optional[float]:
        """요소의 뷰포트 기준 top (아직 렌더링되지 않았으면 None)"""
        ...

    def scroll_to(self, top: float, smooth: bool = True) -> None:
        ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> Any:
        ...


class MidpointViewportReporter:
    """스크롤/리사이즈마다 측정값을 받아 중앙 섹션을 구독자에게 알린다

    관찰 대상 ID가 지정되면 그 밖의 요소(빈 섹션 등)는 무시한다.
    """

    def __init__(self, observable_ids: Optional[Iterable[str]] = None):
        self._callbacks: List[VisibleSectionCallback] = []
        self._observable = set(observable_ids) if observable_ids is not None else None

    def set_observable(self, observable_ids: Optional[Iterable[str]]) -> None:
        self._observable = set(observable_ids) if observable_ids is not None else None

    def on_visible_section_changed(self, callback: VisibleSectionCallback) -> Callable[[], None]:
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    def report(self, rects: Sequence[SectionRect], viewport_height: float) -> Optional[str]:
        """측정값 한 틱 처리

        Returns:
            중앙에 있는 섹션 ID (없으면 None, 알림도 없음)
        """
        if self._observable is not None:
            rects = [rect for rect in rects if rect.section_id in self._observable]

        section_id = find_section_at_midpoint(rects, viewport_height)
        if section_id is None:
            return None

        for callback in list(self._callbacks):
            callback(section_id)
        return section_id

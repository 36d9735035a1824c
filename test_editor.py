"""구조화 편집기 테스트

추가/삭제/순서 변경과 최소 구조 규칙 검증
"""

import pytest

from autobiography_processor.structure.editor import (
    MIN_CHAPTERS_MESSAGE,
    MIN_SECTIONS_MESSAGE,
    StoryEditor,
)
from autobiography_processor.structure.errors import EditorValidationError, UnknownNodeError
from autobiography_processor.structure.model import PlainText, chapters_to_dict
from autobiography_processor.structure.parser import parse


def test_default_tree():
    editor = StoryEditor()

    assert len(editor.chapters) == 1
    chapter = editor.chapters[0]
    assert chapter.id == "chapter-1"
    assert chapter.title == "1장: 나의 이야기"
    assert [s.id for s in chapter.sections] == ["chapter-1-section-0"]
    assert editor.expanded_chapters == {"chapter-1": True}
    assert not editor.has_content()


def test_add_chapter_and_sections():
    editor = StoryEditor()
    chapter = editor.add_chapter()

    assert chapter.id == "chapter-2"
    assert chapter.title == "2장: 새 챕터"
    assert chapter.sections[0].id == "chapter-2-section-0"
    assert chapter.sections[0].title == "새 섹션"
    assert editor.expanded_chapters["chapter-2"] is True

    first = editor.add_section("chapter-2")
    second = editor.add_section("chapter-2")
    assert first.id == "chapter-2-section-1"
    assert first.title == "섹션 1"
    assert second.id == "chapter-2-section-2"
    assert second.title == "섹션 2"


def test_add_chapter_skips_taken_ids():
    editor = StoryEditor(parse("# 2장: 둘\n가"))
    chapter = editor.add_chapter()

    assert chapter.id == "chapter-3"


def test_section_ids_are_never_reused():
    editor = StoryEditor()
    added = editor.add_section("chapter-1")
    editor.delete_section("chapter-1", added.id)

    again = editor.add_section("chapter-1")
    assert again.id != added.id
    assert again.id == "chapter-1-section-2"


def test_delete_last_chapter_rejected():
    editor = StoryEditor()
    before = chapters_to_dict(editor.chapters)

    with pytest.raises(EditorValidationError) as exc_info:
        editor.delete_chapter("chapter-1")

    assert exc_info.value.message == MIN_CHAPTERS_MESSAGE
    assert chapters_to_dict(editor.chapters) == before


def test_delete_last_section_rejected():
    editor = StoryEditor()
    before = chapters_to_dict(editor.chapters)

    with pytest.raises(EditorValidationError) as exc_info:
        editor.delete_section("chapter-1", "chapter-1-section-0")

    assert exc_info.value.message == MIN_SECTIONS_MESSAGE
    assert chapters_to_dict(editor.chapters) == before


def test_delete_chapter_keeps_ids():
    editor = StoryEditor()
    editor.add_chapter()
    editor.add_chapter()
    editor.delete_chapter("chapter-2")

    assert [c.id for c in editor.chapters] == ["chapter-1", "chapter-3"]
    assert "chapter-2" not in editor.expanded_chapters


def test_move_section_preserves_order():
    editor = StoryEditor(parse("# 1장: 시작\n가\n## 나\n나\n## 다\n다"))
    editor.move_section("chapter-1", 0, 2)

    assert [s.plain_text for s in editor.chapters[0].sections] == ["나", "다", "가"]

    with pytest.raises(IndexError):
        editor.move_section("chapter-1", 0, 5)


def test_unknown_ids():
    editor = StoryEditor()

    with pytest.raises(UnknownNodeError):
        editor.add_section("chapter-9")
    with pytest.raises(UnknownNodeError):
        editor.rename_section("chapter-1", "nope", "제목")


def test_edits_and_publish_validation():
    editor = StoryEditor()
    with pytest.raises(EditorValidationError):
        editor.validate_for_publish()

    editor.rename_chapter("chapter-1", "1장: 바뀐 제목")
    editor.rename_section("chapter-1", "chapter-1-section-0", "도입")
    editor.update_section_content("chapter-1", "chapter-1-section-0", "새 본문")

    section = editor.chapters[0].sections[0]
    assert editor.chapters[0].title == "1장: 바뀐 제목"
    assert section.title == "도입"
    assert section.content == PlainText("새 본문")
    editor.validate_for_publish()


def test_editor_owns_its_tree():
    source = parse("# 1장: 시작\n본문")
    editor = StoryEditor(source)
    editor.rename_chapter("chapter-1", "바뀜")
    snapshot = editor.snapshot()
    snapshot[0].title = "미리보기에서 바뀜"

    assert source[0].title == "1장: 시작"
    assert editor.chapters[0].title == "바뀜"


def test_expand_collapse():
    editor = StoryEditor()
    editor.add_chapter()

    assert editor.toggle_chapter("chapter-1") is False
    editor.expand_all()
    assert editor.expanded_chapters == {"chapter-1": True, "chapter-2": True}
    editor.collapse_all()
    assert editor.expanded_chapters == {"chapter-1": False, "chapter-2": False}

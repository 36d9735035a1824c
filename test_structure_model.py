"""데이터 모델 / 정규화 / 내보내기 테스트"""

import json

import pytest

from autobiography_processor.structure.errors import StructureFormatError
from autobiography_processor.structure.exporter import estimate_reading_time, to_markdown, word_count
from autobiography_processor.structure.model import (
    Chapter,
    PlainText,
    RichDoc,
    Section,
    chapters_from_dict,
    chapters_to_dict,
    next_section_index,
    to_plain_text,
    unique_chapter_id,
)
from autobiography_processor.structure.normalizer import decode_bytes, load_chapters
from autobiography_processor.structure.parser import parse


def _rich(*paragraphs):
    return RichDoc([{"type": "paragraph", "children": [{"text": p}]} for p in paragraphs])


def test_to_plain_text_variants():
    assert to_plain_text(PlainText("본문")) == "본문"
    assert to_plain_text("문자열") == "문자열"
    assert to_plain_text(None) == ""
    assert to_plain_text(_rich("첫 줄", "둘째 줄")) == "첫 줄\n둘째 줄"

    nested = RichDoc([{
        "type": "paragraph",
        "children": [{"text": "굵은 "}, {"type": "link", "children": [{"text": "링크"}]}]
    }])
    assert to_plain_text(nested) == "굵은 링크"


def test_blank_detection_for_both_content_types():
    assert Section(id="s", content=PlainText("  \n ")).is_blank()
    assert Section(id="s", content=_rich("")).is_blank()
    assert not Section(id="s", content=_rich("글")).is_blank()


def test_unique_chapter_id():
    assert unique_chapter_id("chapter-2", {"chapter-1"}) == "chapter-2"
    assert unique_chapter_id("chapter-1", {"chapter-1", "chapter-1-1"}) == "chapter-1-2"


def test_next_section_index_skips_to_highest():
    chapter = Chapter(id="chapter-1", title="1장: 가", sections=[
        Section(id="chapter-1-section-0"),
        Section(id="chapter-1-section-5"),
    ])
    assert next_section_index(chapter) == 6
    assert next_section_index(Chapter(id="chapter-2", title="")) == 0


def test_dict_round_trip_with_rich_content():
    chapters = [Chapter(id="chapter-1", title="1장: 나의 이야기", sections=[
        Section(id="chapter-1-section-0", title="시작", content=_rich("안녕")),
        Section(id="chapter-1-section-1", title="인용구", content=PlainText("명언"), is_quote=True),
    ])]

    data = chapters_to_dict(chapters)
    assert data["chapters"][0]["sections"][1]["isQuote"] is True
    assert isinstance(data["chapters"][0]["sections"][0]["content"], list)

    restored = chapters_from_dict(json.loads(json.dumps(data)))
    assert restored == chapters


def test_from_dict_defaults_and_errors():
    restored = chapters_from_dict({"chapters": [{"id": "chapter-1", "sections": [{"id": "a", "content": "x"}]}]})
    section = restored[0].sections[0]
    assert section.title == ""
    assert section.is_quote is False

    with pytest.raises(StructureFormatError):
        chapters_from_dict({"chapters": "nope"})
    with pytest.raises(StructureFormatError):
        chapters_from_dict({"chapters": [{"title": "id 없음"}]})
    with pytest.raises(StructureFormatError):
        chapters_from_dict({"chapters": [{"id": "c", "sections": [{"id": "s", "content": 3}]}]})


def test_load_chapters_plain_text_and_json_agree():
    """평문과 JSON 저장 형식이 같은 트리로 정규화"""
    text = "# 1장: 시작\n\n본문\n\n## 추억\n\n내용"
    from_text = load_chapters(text)
    from_json = load_chapters(json.dumps(chapters_to_dict(from_text), ensure_ascii=False))
    from_dict = load_chapters(chapters_to_dict(from_text))

    assert from_text == from_json == from_dict


def test_load_chapters_other_inputs():
    assert load_chapters(None) == []
    assert load_chapters("") == []

    # "chapters"가 없는 JSON, 깨진 JSON은 평문으로 파싱
    assert load_chapters('{"title": "x"}')[0].sections[0].plain_text == '{"title": "x"}'
    assert load_chapters("{깨진 JSON")[0].title == "자서전"

    with pytest.raises(StructureFormatError):
        load_chapters({"title": "chapters 없음"})
    with pytest.raises(TypeError):
        load_chapters(42)


def test_load_chapters_copies_prebuilt_trees():
    original = parse("# 1장: 시작\n본문")
    loaded = load_chapters(original)

    assert loaded == original
    loaded[0].sections[0].title = "바뀜"
    assert original[0].sections[0].title == ""


def test_decode_bytes():
    assert decode_bytes("# 1장: 시작".encode("utf-8")) == "# 1장: 시작"

    text = "# 1장: 어린 시절\n고향은 바닷가 마을이었다. 아버지는 어부였다.\n" * 20
    decoded = decode_bytes(text.encode("cp949"))
    assert isinstance(decoded, str)
    assert len(decoded) > 0


def test_to_markdown_round_trip():
    text = "# 1장: 시작\n\n도입 문단\n\n## 추억\n\n내용\n\n> 인생은 짧다\n\n이후 문단\n\n# 2장: 끝\n\n마지막"
    chapters = parse(text)
    markdown = to_markdown(chapters)

    assert markdown.startswith("# 1장: 시작\n\n도입 문단\n\n## 추억\n\n내용\n\n> 인생은 짧다\n")
    assert "\n\n\n" not in markdown
    assert chapters_to_dict(parse(markdown)) == chapters_to_dict(chapters)


def test_multiline_quote_exports_as_single_quote():
    """편집기에서 여러 줄로 고친 인용구도 다시 파싱하면 인용구 하나"""
    chapters = [Chapter(id="chapter-1", title="1장: 시작", sections=[
        Section(id="chapter-1-section-0", content=PlainText("도입")),
        Section(id="chapter-1-section-1", title="인용구", content=PlainText("첫 줄\n\n둘째 줄"), is_quote=True),
    ])]
    markdown = to_markdown(chapters)

    assert markdown == "# 1장: 시작\n\n도입\n\n> 첫 줄 둘째 줄\n"
    sections = parse(markdown)[0].sections
    assert [s.is_quote for s in sections] == [False, True]
    assert sections[1].plain_text == "첫 줄 둘째 줄"


def test_to_markdown_skips_generic_titles():
    chapters = [Chapter(id="chapter-1", title="1장: 나의 이야기", sections=[
        Section(id="chapter-1-section-0", title="시작", content=_rich("첫 글")),
        Section(id="chapter-1-section-1", title="새 섹션", content=_rich("")),
        Section(id="chapter-1-section-2", title="여행", content=_rich("둘째 글")),
    ])]

    assert to_markdown(chapters) == "# 1장: 나의 이야기\n\n첫 글\n\n## 여행\n\n둘째 글\n"
    assert to_markdown([]) == ""


def test_reading_time():
    assert estimate_reading_time("") == 0
    assert estimate_reading_time("단어 " * 200) == 1
    assert estimate_reading_time("단어 " * 201) == 2
    assert estimate_reading_time(_rich("하나 둘", "셋")) == 1

    chapters = parse("# 1장: 시작\n" + "글 " * 150 + "\n## 둘\n" + "글 " * 150)
    assert word_count(chapters) == 300
    assert estimate_reading_time(chapters) == 2

    with pytest.raises(ValueError):
        estimate_reading_time("글", words_per_minute=0)

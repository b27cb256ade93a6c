"""Tests for worksheetgen.render -- block layout and the three writers."""

import io

import docx
import pytest
from reportlab.platypus import PageBreak, Paragraph

from worksheetgen.config.models import Worksheet
from worksheetgen.render import build_blocks, build_story, plain_text, render_worksheet
from worksheetgen.render.blocks import HEADING1, PAGE_BREAK, TITLE
from worksheetgen.render.dispatcher import MIME_TYPES
from worksheetgen.render.pdf_writer import pdf_safe

SECTION_HEADINGS = [
    "1. 근거 기반 설계도",
    "학생용 학습지",
    "[A] 핵심 개념 정리",
    "[B] 개념 확인 활동",
    "[C] 적용·확장 활동",
    "[D] 형성평가",
    "교사용 자료 (정답 및 해설)",
    "✅ 검수 체크리스트",
]

FIELD_VALUES = [
    "광합성",
    "빛에너지를 화학에너지로 전환",
    "엽록소",
    "빛을 흡수하는 색소",
    "식물은 흙에서 양분을 먹는다",
    "엽록소가 반사하는 빛은?",
    "양분은 잎에서 만들어져요",
    "에너지 전환",
]


def _docx_text(data: bytes) -> str:
    document = docx.Document(io.BytesIO(data))
    return "\n".join(p.text for p in document.paragraphs)


def _rendered_text(ws: Worksheet, fmt: str) -> str:
    """Visible text of *ws* as the given writer lays it out."""
    if fmt == "docx":
        return _docx_text(render_worksheet(ws, "docx").data)
    if fmt == "pdf":
        story = build_story(build_blocks(ws))
        return "\n".join(f.getPlainText() for f in story if isinstance(f, Paragraph))
    return render_worksheet(ws, "html").data.decode("utf-8")


# ===================================================================
# Block layout
# ===================================================================

class TestBuildBlocks:

    def test_title_and_metadata_first(self, worksheet):
        blocks = build_blocks(worksheet)
        assert blocks[0].kind == TITLE
        assert blocks[0].text == "광합성 학습지"
        assert blocks[1].text == "대상: 중2 | 과목: 과학 | 시간: 45분 | 수준: 기본"

    def test_section_order(self, worksheet):
        text = plain_text(build_blocks(worksheet))
        positions = [text.index(h) for h in SECTION_HEADINGS]
        assert positions == sorted(positions)

    def test_page_breaks_before_student_and_teacher_parts(self, worksheet):
        blocks = build_blocks(worksheet)
        breaks = [i for i, b in enumerate(blocks) if b.kind == PAGE_BREAK]
        assert len(breaks) == 2
        after = [next(b.text for b in blocks[i:] if b.kind == TITLE) for i in breaks]
        assert after == ["학생용 학습지", "교사용 자료 (정답 및 해설)"]

    def test_assessment_numbering_is_continuous(self, worksheet):
        text = plain_text(build_blocks(worksheet))
        assert "1. 광합성의 산물은?" in text
        assert "2. 엽록소가 반사하는 빛은?" in text
        assert "3. 포도당의 저장 형태는?" in text
        assert "4. 광합성의 의의를 서술하시오" in text

    def test_options_numbered(self, worksheet):
        text = plain_text(build_blocks(worksheet))
        assert "1) 산소" in text
        assert "4) 헬륨" in text

    def test_page_citations(self, worksheet):
        blocks = build_blocks(worksheet)
        citations = [r.text for b in blocks for r in b.runs if r.citation]
        assert " (p.1)" in citations
        assert "근거: p.1" in citations

    def test_item_answers_in_teacher_part(self, worksheet):
        text = plain_text(build_blocks(worksheet))
        teacher = text[text.index("교사용 자료"):]
        assert "개념 1 확인 질문: 엽록체" in teacher
        assert "빈칸 1) 초록" in teacher
        assert "형성평가 2. 2) 초록" in teacher
        assert "형성평가 3. 녹말" in teacher
        assert "형성평가 4. 채점 요소: 에너지 전환" in teacher

    def test_answers_not_in_student_part(self, worksheet):
        text = plain_text(build_blocks(worksheet))
        student = text[text.index("학생용 학습지"):text.index("교사용 자료")]
        assert "엽록체" not in student
        assert "에너지 전환" not in student

    def test_mc_answer_given_as_digit_string(self):
        ws = Worksheet.model_validate({"student_worksheet": {"assessment": {
            "multiple_choice": [{"question": "q", "options": ["a", "b"], "answer": "2"}],
        }}})
        assert "형성평가 1. 2) b" in plain_text(build_blocks(ws))

    def test_mc_answer_out_of_range_kept_verbatim(self):
        ws = Worksheet.model_validate({"student_worksheet": {"assessment": {
            "multiple_choice": [{"question": "q", "options": ["a", "b"], "answer": "5"}],
        }}})
        assert "형성평가 1. 5" in plain_text(build_blocks(ws))

    def test_quality_marks(self, worksheet):
        text = plain_text(build_blocks(worksheet))
        assert "✓ PDF 외 내용 없음" in text
        assert "✗ 난이도 분포 충족" in text

    def test_only_title(self):
        blocks = build_blocks(Worksheet())
        assert [b.kind for b in blocks] == [TITLE]
        assert blocks[0].text == "학습자료"

    def test_absent_sections_emit_nothing(self, worksheet_data):
        del worksheet_data["design"]
        del worksheet_data["quality_check"]
        del worksheet_data["student_worksheet"]["activities"]
        text = plain_text(build_blocks(Worksheet.model_validate(worksheet_data)))
        assert "근거 기반 설계도" not in text
        assert "[B] 개념 확인 활동" not in text
        assert "검수 체크리스트" not in text
        assert "[A] 핵심 개념 정리" in text

    def test_empty_list_section_omitted(self, worksheet_data):
        worksheet_data["design"]["key_terms"] = []
        text = plain_text(build_blocks(Worksheet.model_validate(worksheet_data)))
        assert "필수 용어" not in text
        assert "핵심 개념 목록" in text

    def test_teacher_part_omitted_without_guide_or_answers(self):
        ws = Worksheet.model_validate({"student_worksheet": {"lesson_info": {"title": "x"}}})
        text = plain_text(build_blocks(ws))
        assert "교사용 자료" not in text

    def test_feedback_in_red(self, worksheet):
        blocks = build_blocks(worksheet)
        run = next(r for b in blocks for r in b.runs if r.text.startswith("[흙에서 양분]"))
        assert run.color == "CC0000"
        assert run.bold


# ===================================================================
# DOCX
# ===================================================================

class TestDocx:

    def test_contains_all_sections(self, worksheet):
        text = _docx_text(render_worksheet(worksheet, "docx").data)
        for heading in SECTION_HEADINGS:
            assert heading in text
        for value in FIELD_VALUES:
            assert value in text

    def test_minimal_document(self):
        text = _docx_text(render_worksheet(Worksheet(), "docx").data)
        assert "학습자료" in text
        assert "학생용 학습지" not in text

    def test_east_asian_font_set(self, worksheet):
        data = render_worksheet(worksheet, "docx").data
        document = docx.Document(io.BytesIO(data))
        rfonts = document.styles["Normal"].element.rPr.rFonts
        assert rfonts.get("{http://schemas.openxmlformats.org/wordprocessingml/2006/main}eastAsia") == "Malgun Gothic"


# ===================================================================
# HTML
# ===================================================================

class TestHtml:

    def test_contains_all_sections(self, worksheet):
        html = render_worksheet(worksheet, "html").data.decode("utf-8")
        for heading in SECTION_HEADINGS:
            assert heading in html
        for value in FIELD_VALUES:
            assert value in html
        assert '<meta charset="UTF-8">' in html
        assert '<span class="page-ref">' in html
        assert 'class="check-ok"' in html and 'class="check-fail"' in html
        assert '<div class="page-break"></div>' in html

    def test_text_is_escaped(self):
        ws = Worksheet.model_validate({"title": "<script>alert(1)</script>", "design": {"misconceptions": ["a & b"]}})
        html = render_worksheet(ws, "html").data.decode("utf-8")
        assert "<script>" not in html
        assert "&lt;script&gt;" in html
        assert "a &amp; b" in html

    def test_sections_wrapped(self, worksheet):
        html = render_worksheet(worksheet, "html").data.decode("utf-8")
        assert html.count('<div class="section">') == sum(
            1 for b in build_blocks(worksheet) if b.kind == HEADING1
        )
        assert html.count("<ul>") == html.count("</ul>")

    def test_minimal_document(self):
        html = render_worksheet(Worksheet(), "html").data.decode("utf-8")
        assert "<h1>학습자료</h1>" in html
        assert 'class="section"' not in html


# ===================================================================
# PDF
# ===================================================================

class TestPdf:

    def test_pdf_bytes(self, worksheet):
        doc = render_worksheet(worksheet, "pdf")
        assert doc.data.startswith(b"%PDF")
        assert doc.mime_type == "application/pdf"

    def test_story_has_page_breaks(self, worksheet):
        story = build_story(build_blocks(worksheet))
        assert sum(isinstance(f, PageBreak) for f in story) == 2

    def test_check_marks_replaced(self, worksheet):
        story = build_story(build_blocks(worksheet))
        texts = [f.getPlainText() for f in story if isinstance(f, Paragraph)]
        joined = "\n".join(texts)
        assert "✓" not in joined and "✗" not in joined
        assert "[O] PDF 외 내용 없음" in joined
        assert "[X] 난이도 분포 충족" in joined
        for value in FIELD_VALUES:
            assert value in joined

    def test_pdf_safe(self):
        assert pdf_safe("📌 핵심 개념") == " 핵심 개념"
        assert pdf_safe("✓ ok") == "[O] ok"
        assert pdf_safe("한글 그대로") == "한글 그대로"

    def test_minimal_document(self):
        assert render_worksheet(Worksheet(), "pdf").data.startswith(b"%PDF")


# ===================================================================
# Dispatcher
# ===================================================================

class TestAbsentSectionsPerFormat:

    @pytest.mark.parametrize("fmt", ["docx", "pdf", "html"])
    def test_absent_sections_emit_nothing(self, worksheet_data, fmt):
        del worksheet_data["design"]
        del worksheet_data["quality_check"]
        del worksheet_data["student_worksheet"]["activities"]
        text = _rendered_text(Worksheet.model_validate(worksheet_data), fmt)
        assert "근거 기반 설계도" not in text
        assert "개념 확인 활동" not in text
        assert "검수 체크리스트" not in text
        assert "핵심 개념 정리" in text
        assert "형성평가" in text

    @pytest.mark.parametrize("fmt", ["docx", "pdf", "html"])
    def test_teacher_part_absent(self, fmt):
        ws = Worksheet.model_validate({"student_worksheet": {"lesson_info": {"title": "수업"}}})
        text = _rendered_text(ws, fmt)
        assert "교사용 자료" not in text
        assert "학생용 학습지" in text


class TestRenderWorksheet:

    @pytest.mark.parametrize("fmt", ["docx", "pdf", "html"])
    def test_filename_and_mime(self, worksheet, fmt):
        doc = render_worksheet(worksheet, fmt)
        assert doc.filename == f"광합성 학습지.{fmt}"
        assert doc.mime_type == MIME_TYPES[fmt]
        assert doc.size == len(doc.data) > 0

    def test_format_case_insensitive(self, worksheet):
        assert render_worksheet(worksheet, "HTML").filename.endswith(".html")

    def test_unknown_format(self, worksheet):
        with pytest.raises(ValueError, match="Unsupported output format"):
            render_worksheet(worksheet, "xlsx")

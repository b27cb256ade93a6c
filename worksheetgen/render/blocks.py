"""Walk a :class:`Worksheet` into format-neutral blocks.

Every writer (docx, pdf, html) consumes the same block list, so the
section layout and the presence checks live in one place:

    title / metadata
    1. 근거 기반 설계도              (design)
    ── page break ── 학생용 학습지    (student_worksheet)
    ── page break ── 교사용 자료      (teacher_guide + per-item answers)
    검수 체크리스트                   (quality_check)

A section whose JSON field is missing or empty emits nothing at all.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from ..config.models import (
    Activities,
    ApplicationTask,
    Assessment,
    Design,
    LessonInfo,
    QualityCheck,
    StudentWorksheet,
    TeacherGuide,
    Worksheet,
)

# Block kinds
TITLE = "title"
HEADING1 = "heading1"
HEADING2 = "heading2"
HEADING3 = "heading3"
PARAGRAPH = "paragraph"
BULLET = "bullet"
OPTION = "option"
PAGE_BREAK = "page_break"
DIVIDER = "divider"

# Colours (RRGGBB)
GREY = "666666"
BLUE = "0066CC"
RED = "CC0000"
GREEN = "008000"


@dataclass
class Run:
    """A span of text with inline formatting."""
    text: str
    bold: bool = False
    italic: bool = False
    color: Optional[str] = None
    citation: bool = False  # page reference such as "(p.3)"


@dataclass
class Block:
    """One paragraph-level element."""
    kind: str
    runs: List[Run] = field(default_factory=list)
    center: bool = False
    role: str = ""  # styling hint for writers, e.g. "concept-item", "question"

    @property
    def text(self) -> str:
        return "".join(r.text for r in self.runs)


def _cite(page: str, template: str = " ({})") -> List[Run]:
    if not page:
        return []
    return [Run(template.format(page), italic=True, color=GREY, citation=True)]


def _para(*runs: Run, role: str = "") -> Block:
    return Block(PARAGRAPH, list(runs), role=role)


def _heading(kind: str, text: str) -> Block:
    return Block(kind, [Run(text)])


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------

def _header_blocks(ws: Worksheet) -> List[Block]:
    blocks = [Block(TITLE, [Run(ws.display_title)], center=True)]
    if ws.metadata is not None:
        m = ws.metadata
        line = f"대상: {m.grade} | 과목: {m.subject} | 시간: {m.duration} | 수준: {m.level}"
        blocks.append(Block(PARAGRAPH, [Run(line, bold=True)], center=True, role="metadata"))
    return blocks


def _design_blocks(design: Design) -> List[Block]:
    blocks = [Block(DIVIDER), _heading(HEADING1, "1. 근거 기반 설계도")]

    if design.core_concepts:
        blocks.append(_heading(HEADING2, "📌 핵심 개념 목록"))
        for c in design.core_concepts:
            blocks.append(Block(BULLET, [
                Run(f"{c.concept}: ", bold=True),
                Run(c.definition),
                *_cite(c.page),
            ], role="concept-item"))

    if design.key_terms:
        blocks.append(_heading(HEADING2, "📌 필수 용어"))
        for t in design.key_terms:
            blocks.append(Block(BULLET, [
                Run(f"{t.term}: ", bold=True),
                Run(t.definition),
                *_cite(t.page),
            ], role="term-item"))

    if design.misconceptions:
        blocks.append(_heading(HEADING2, "📌 학생이 헷갈리기 쉬운 지점"))
        blocks.extend(Block(BULLET, [Run(m)]) for m in design.misconceptions)

    return blocks


def _lesson_info_blocks(info: LessonInfo) -> List[Block]:
    blocks = [_heading(HEADING1, info.title or "수업 제목")]
    if info.objectives:
        blocks.append(_heading(HEADING2, "📚 학습 목표"))
        blocks.extend(Block(BULLET, [Run(o)]) for o in info.objectives)
    if info.keywords:
        blocks.append(_para(Run("🔑 핵심 키워드: ", bold=True), Run(", ".join(info.keywords))))
    return blocks


def _concept_blocks(sw: StudentWorksheet) -> List[Block]:
    blocks = [_heading(HEADING1, "[A] 핵심 개념 정리")]
    for idx, ce in enumerate(sw.concept_explanations, start=1):
        blocks.append(_heading(HEADING3, f"개념 {idx}. {ce.concept}"))
        blocks.append(_para(Run("[정의] ", bold=True), Run(ce.definition)))
        blocks.append(_para(Run("[설명] ", bold=True), Run(ce.explanation)))
        if ce.example:
            blocks.append(_para(Run("[사례] ", bold=True), Run(ce.example)))
        if ce.page:
            blocks.append(_para(*_cite(ce.page, "근거: {}")))
        if ce.check_question is not None and ce.check_question.question:
            blocks.append(_para(
                Run("✓ 확인 질문: ", bold=True, color=BLUE),
                Run(ce.check_question.question),
            ))
    return blocks


def _numbered_items(items, heading: str) -> List[Block]:
    blocks = [_heading(HEADING2, heading)]
    for idx, item in enumerate(items, start=1):
        blocks.append(_para(Run(f"{idx}) {item.question}"), *_cite(item.page)))
    return blocks


def _activity_blocks(act: Activities) -> List[Block]:
    blocks = [_heading(HEADING1, "[B] 개념 확인 활동")]
    if act.fill_blanks:
        blocks.extend(_numbered_items(act.fill_blanks, "1. 빈칸 채우기"))
    if act.ox_questions:
        blocks.extend(_numbered_items(act.ox_questions, "2. O/X 퀴즈"))
    if act.short_answers:
        blocks.extend(_numbered_items(act.short_answers, "3. 단답형"))
    if act.find_evidence is not None:
        fe = act.find_evidence
        blocks.append(_heading(HEADING2, "4. 근거 찾기"))
        blocks.append(_para(Run(fe.instruction), *_cite(fe.page)))
    return blocks


def _application_blocks(task: ApplicationTask) -> List[Block]:
    blocks = [_heading(HEADING1, "[C] 적용·확장 활동")]
    if task.description:
        blocks.append(_para(Run(task.description)))
    if task.output_format:
        blocks.append(_para(Run("산출물 형태: ", bold=True), Run(task.output_format)))
    if task.guidelines:
        blocks.append(_para(Run("주의할 점:", bold=True)))
        blocks.extend(Block(BULLET, [Run(g)]) for g in task.guidelines)
    return blocks


def _assessment_blocks(assessment: Assessment) -> List[Block]:
    blocks = [_heading(HEADING1, "[D] 형성평가")]
    number = 1  # numbering runs across all three question types

    if assessment.multiple_choice:
        blocks.append(_heading(HEADING2, "객관식"))
        for mc in assessment.multiple_choice:
            blocks.append(_para(
                Run(f"{number}. {mc.question} ", bold=True), *_cite(mc.page, "({})"),
                role="question",
            ))
            blocks.extend(
                Block(OPTION, [Run(f"{i}) {opt}")]) for i, opt in enumerate(mc.options, start=1)
            )
            number += 1

    if assessment.short_answer:
        blocks.append(_heading(HEADING2, "단답형"))
        for sa in assessment.short_answer:
            blocks.append(_para(Run(f"{number}. {sa.question} ", bold=True), *_cite(sa.page, "({})")))
            number += 1

    if assessment.essay:
        blocks.append(_heading(HEADING2, "서술형"))
        for es in assessment.essay:
            blocks.append(_para(Run(f"{number}. {es.question} ", bold=True), *_cite(es.page, "({})")))
            number += 1

    return blocks


def _student_blocks(sw: StudentWorksheet) -> List[Block]:
    blocks = [
        Block(PAGE_BREAK),
        Block(DIVIDER),
        Block(TITLE, [Run("학생용 학습지")], center=True),
    ]
    if sw.lesson_info is not None:
        blocks.extend(_lesson_info_blocks(sw.lesson_info))
    if sw.concept_explanations:
        blocks.extend(_concept_blocks(sw))
    if sw.activities is not None:
        blocks.extend(_activity_blocks(sw.activities))
    if sw.application_task is not None:
        blocks.extend(_application_blocks(sw.application_task))
    if sw.assessment is not None:
        blocks.extend(_assessment_blocks(sw.assessment))
    return blocks


def _mc_answer_text(answer, options: List[str]) -> str:
    if isinstance(answer, str) and answer.strip().isdigit():
        answer = int(answer.strip())
    if isinstance(answer, int) and 1 <= answer <= len(options):
        return f"{answer}) {options[answer - 1]}"
    return str(answer)


def _item_answer_blocks(sw: Optional[StudentWorksheet]) -> List[Block]:
    """Answers that the schema carries per item but the guide does not restate."""
    if sw is None:
        return []

    lines: List[Block] = []
    for idx, ce in enumerate(sw.concept_explanations, start=1):
        cq = ce.check_question
        if cq is not None and cq.answer:
            lines.append(Block(BULLET, [Run(f"개념 {idx} 확인 질문: ", bold=True), Run(cq.answer)]))

    if sw.activities is not None:
        for label, items in (
            ("빈칸", sw.activities.fill_blanks),
            ("O/X", sw.activities.ox_questions),
            ("단답", sw.activities.short_answers),
        ):
            for idx, item in enumerate(items, start=1):
                if item.answer:
                    lines.append(Block(BULLET, [Run(f"{label} {idx}) ", bold=True), Run(item.answer)]))

    if sw.assessment is not None:
        number = 1
        for mc in sw.assessment.multiple_choice:
            if mc.answer is not None and str(mc.answer):
                lines.append(Block(BULLET, [
                    Run(f"형성평가 {number}. ", bold=True),
                    Run(_mc_answer_text(mc.answer, mc.options)),
                ]))
            number += 1
        for sa in sw.assessment.short_answer:
            if sa.answer:
                lines.append(Block(BULLET, [Run(f"형성평가 {number}. ", bold=True), Run(sa.answer)]))
            number += 1
        for es in sw.assessment.essay:
            if es.rubric_elements:
                lines.append(Block(BULLET, [
                    Run(f"형성평가 {number}. 채점 요소: ", bold=True),
                    Run(", ".join(es.rubric_elements)),
                ]))
            number += 1

    if not lines:
        return []
    return [_heading(HEADING1, "🗝 문항별 정답")] + lines


def _teacher_blocks(tg: Optional[TeacherGuide], sw: Optional[StudentWorksheet]) -> List[Block]:
    item_answers = _item_answer_blocks(sw)
    if tg is None and not item_answers:
        return []

    blocks = [
        Block(PAGE_BREAK),
        Block(DIVIDER),
        Block(TITLE, [Run("교사용 자료 (정답 및 해설)")], center=True),
    ]
    if tg is not None and tg.answer_key:
        blocks.append(_heading(HEADING1, "📋 정답표"))
        blocks.append(_para(Run(tg.answer_key), role="answer-section"))

    blocks.extend(item_answers)

    if tg is None:
        return blocks

    if tg.explanations:
        blocks.append(_heading(HEADING1, "📝 문항별 해설"))
        for exp in tg.explanations:
            blocks.append(_para(
                Run(f"문항 {exp.question_num}: ", bold=True),
                Run(exp.explanation),
                *_cite(exp.page),
            ))

    if tg.rubric:
        blocks.append(_heading(HEADING1, "📊 서술형 채점 기준"))
        for rub in tg.rubric:
            blocks.append(_heading(HEADING3, f"[{rub.question}]"))
            blocks.append(_para(Run("상: ", bold=True), Run(rub.high)))
            blocks.append(_para(Run("중: ", bold=True), Run(rub.mid)))
            blocks.append(_para(Run("하: ", bold=True), Run(rub.low)))

    if tg.feedback_tips:
        blocks.append(_heading(HEADING1, "💬 오개념 피드백 멘트"))
        for ft in tg.feedback_tips:
            blocks.append(_para(
                Run(f"[{ft.misconception}] ", bold=True, color=RED),
                Run(ft.feedback),
            ))

    return blocks


def _quality_blocks(qc: QualityCheck) -> List[Block]:
    blocks = [Block(DIVIDER), _heading(HEADING1, "✅ 검수 체크리스트")]
    for label, passed in qc.items():
        blocks.append(_para(
            Run("✓ " if passed else "✗ ", bold=True, color=GREEN if passed else RED),
            Run(label),
            role="checklist-item",
        ))
    return blocks


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def build_blocks(ws: Worksheet) -> List[Block]:
    """Return the block list for *ws*, in document order."""
    blocks = _header_blocks(ws)
    if ws.design is not None:
        blocks.extend(_design_blocks(ws.design))
    if ws.student_worksheet is not None:
        blocks.extend(_student_blocks(ws.student_worksheet))
    blocks.extend(_teacher_blocks(ws.teacher_guide, ws.student_worksheet))
    if ws.quality_check is not None:
        blocks.extend(_quality_blocks(ws.quality_check))
    return blocks


def plain_text(blocks: List[Block]) -> str:
    """Concatenate block text, one block per line (used by the CLI preview)."""
    return "\n".join(b.text for b in blocks if b.runs)

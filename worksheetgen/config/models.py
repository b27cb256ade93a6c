"""
Worksheet Generator - Data Models
=================================

Pydantic v2 models shared across the pipeline:

  Worksheet : Worksheet and its nested sections (the LLM's JSON response)
  Settings  : GenerationSettings (model, temperature, output format, prompts)

Convention
----------
- The worksheet schema is *lenient*: every field is optional, ``null`` is
  treated as absent, numbers are accepted where strings are expected and
  unknown keys are ignored.  Renderers only check for presence.
- Korean labels and defaults match what the completion prompt asks for.
"""

from __future__ import annotations

import re
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from ..extract.prompts import DEFAULT_SYSTEM_PROMPT

DEFAULT_TITLE = "학습자료"
OutputFormat = Literal["docx", "pdf", "html"]
OUTPUT_FORMATS: List[str] = ["docx", "pdf", "html"]


# ============================================================
# Lenient coercion helpers
# ============================================================

def _as_list(value: Any) -> Any:
    """Wrap a lone item in a list; map ``None`` to an empty list."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [v for v in value if v is not None]
    return [value]


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        return ": ".join(str(v) for v in value.values() if v is not None)
    return str(value)


def _as_str_list(value: Any) -> List[str]:
    return [_stringify(v) for v in _as_list(value)]


StrList = Annotated[List[str], BeforeValidator(_as_str_list)]


class _SchemaModel(BaseModel):
    """Base for every worksheet section."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


# ============================================================
# Header
# ============================================================

class WorksheetMetadata(_SchemaModel):
    grade: str = ""
    subject: str = ""
    duration: str = ""
    level: str = ""


# ============================================================
# 1. Design (근거 기반 설계도)
# ============================================================

class CoreConcept(_SchemaModel):
    concept: str = ""
    definition: str = ""
    page: str = ""


class KeyTerm(_SchemaModel):
    term: str = ""
    definition: str = ""
    page: str = ""


class Design(_SchemaModel):
    core_concepts: Annotated[List[CoreConcept], BeforeValidator(_as_list)] = Field(default_factory=list)
    key_terms: Annotated[List[KeyTerm], BeforeValidator(_as_list)] = Field(default_factory=list)
    misconceptions: StrList = Field(default_factory=list)


# ============================================================
# 2. Student worksheet (학생용 학습지)
# ============================================================

class LessonInfo(_SchemaModel):
    title: str = ""
    objectives: StrList = Field(default_factory=list)
    keywords: StrList = Field(default_factory=list)


class CheckQuestion(_SchemaModel):
    question: str = ""
    answer: str = ""


class ConceptExplanation(_SchemaModel):
    concept: str = ""
    definition: str = ""
    explanation: str = ""
    example: str = ""
    page: str = ""
    check_question: Optional[CheckQuestion] = None


class QuestionItem(_SchemaModel):
    """A question with a short answer (fill-blank, O/X, short answer)."""

    question: str = ""
    answer: str = ""
    page: str = ""


class FindEvidence(_SchemaModel):
    instruction: str = ""
    page: str = ""


class Activities(_SchemaModel):
    fill_blanks: Annotated[List[QuestionItem], BeforeValidator(_as_list)] = Field(default_factory=list)
    ox_questions: Annotated[List[QuestionItem], BeforeValidator(_as_list)] = Field(default_factory=list)
    short_answers: Annotated[List[QuestionItem], BeforeValidator(_as_list)] = Field(default_factory=list)
    find_evidence: Optional[FindEvidence] = None


class ApplicationTask(_SchemaModel):
    description: str = ""
    output_format: str = ""
    guidelines: StrList = Field(default_factory=list)


class MultipleChoice(_SchemaModel):
    question: str = ""
    options: StrList = Field(default_factory=list)
    # 1-based option number; some models answer with the option text instead.
    answer: Union[int, str, None] = None
    page: str = ""


class EssayQuestion(_SchemaModel):
    question: str = ""
    rubric_elements: StrList = Field(default_factory=list)
    page: str = ""


class Assessment(_SchemaModel):
    multiple_choice: Annotated[List[MultipleChoice], BeforeValidator(_as_list)] = Field(default_factory=list)
    short_answer: Annotated[List[QuestionItem], BeforeValidator(_as_list)] = Field(default_factory=list)
    essay: Annotated[List[EssayQuestion], BeforeValidator(_as_list)] = Field(default_factory=list)

    @property
    def question_count(self) -> int:
        return len(self.multiple_choice) + len(self.short_answer) + len(self.essay)


class StudentWorksheet(_SchemaModel):
    lesson_info: Optional[LessonInfo] = None
    concept_explanations: Annotated[List[ConceptExplanation], BeforeValidator(_as_list)] = Field(default_factory=list)
    activities: Optional[Activities] = None
    application_task: Optional[ApplicationTask] = None
    assessment: Optional[Assessment] = None


# ============================================================
# 3. Teacher guide (교사용 자료)
# ============================================================

class Explanation(_SchemaModel):
    question_num: str = ""
    explanation: str = ""
    page: str = ""


class RubricEntry(_SchemaModel):
    question: str = ""
    high: str = ""
    mid: str = ""
    low: str = ""


class FeedbackTip(_SchemaModel):
    misconception: str = ""
    feedback: str = ""


class TeacherGuide(_SchemaModel):
    answer_key: str = ""
    explanations: Annotated[List[Explanation], BeforeValidator(_as_list)] = Field(default_factory=list)
    rubric: Annotated[List[RubricEntry], BeforeValidator(_as_list)] = Field(default_factory=list)
    feedback_tips: Annotated[List[FeedbackTip], BeforeValidator(_as_list)] = Field(default_factory=list)


# ============================================================
# 4. Quality checklist (검수 체크리스트)
# ============================================================

QUALITY_CHECK_LABELS = {
    "no_external_content": "PDF 외 내용 없음",
    "all_pages_cited": "모든 개념/문항에 페이지 근거 표기",
    "no_ambiguous_questions": "애매한 문항 없음",
    "time_appropriate": "시간(차시) 내 가능한 분량",
    "difficulty_met": "난이도 분포 충족",
    "no_answer_leak": "학생용에 정답 미노출",
}


class QualityCheck(_SchemaModel):
    no_external_content: bool = False
    all_pages_cited: bool = False
    no_ambiguous_questions: bool = False
    time_appropriate: bool = False
    difficulty_met: bool = False
    no_answer_leak: bool = False

    def items(self) -> List[tuple]:
        """Return ``(label, passed)`` pairs in display order."""
        return [(label, bool(getattr(self, key))) for key, label in QUALITY_CHECK_LABELS.items()]


# ============================================================
# Worksheet (root)
# ============================================================

_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]+')


class Worksheet(_SchemaModel):
    """The worksheet JSON returned by the completion call."""

    title: str = ""
    metadata: Optional[WorksheetMetadata] = None
    design: Optional[Design] = None
    student_worksheet: Optional[StudentWorksheet] = None
    teacher_guide: Optional[TeacherGuide] = None
    quality_check: Optional[QualityCheck] = None

    @property
    def display_title(self) -> str:
        return self.title.strip() or DEFAULT_TITLE

    def safe_filename(self, extension: str) -> str:
        """File name derived from the title, e.g. ``광합성 학습지.docx``."""
        stem = _UNSAFE_FILENAME_CHARS.sub("_", self.display_title).strip(" .")
        return f"{stem or DEFAULT_TITLE}.{extension.lstrip('.')}"


# ============================================================
# Generation settings (사용자 설정)
# ============================================================

class GenerationSettings(BaseModel):
    """Everything the user can change before pressing *generate*."""

    model: str = Field(default="gpt-4o-mini", description="Chat-completion model id.")
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Sampling temperature, 0.0-1.0 in steps of 0.1.",
    )
    output_format: OutputFormat = Field(default="docx")
    user_request: str = Field(default="", description="Free-text customisation (사용자 추가 요구사항).")
    system_prompt_template: str = Field(
        default=DEFAULT_SYSTEM_PROMPT,
        description="Editable persona/task prompt; the JSON output format is appended to it.",
    )
    max_tokens: int = Field(default=4000, gt=0)

    @field_validator("temperature")
    @classmethod
    def _round_to_tenths(cls, v: float) -> float:
        return round(v, 1)

    @field_validator("output_format", mode="before")
    @classmethod
    def _lower_format(cls, v: Any) -> Any:
        return v.strip().lower().lstrip(".") if isinstance(v, str) else v

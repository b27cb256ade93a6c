"""Shared fixtures for the worksheet generator test suite.

Provides PDFs built with PyMuPDF at test time, a complete worksheet JSON
document shaped like a real model response, and an in-memory provider.
"""

import copy
from typing import Callable, List, Optional

import fitz
import pytest

from worksheetgen.config.models import GenerationSettings, Worksheet
from worksheetgen.errors import MissingAPIKeyError
from worksheetgen.ingest.base import PageRecord
from worksheetgen.providers.base import LLMProvider, LLMResponse


# ---------------------------------------------------------------------------
# PDF fixtures
# ---------------------------------------------------------------------------

PAGE_TEXTS = [
    "Photosynthesis converts light energy into chemical energy in plants.",
    "Chlorophyll absorbs red and blue light and reflects green light.",
    "Glucose produced by the leaf is stored as starch for later use.",
]


def build_pdf(texts: List[str]) -> bytes:
    """Return PDF bytes with one page per entry in *texts*."""
    doc = fitz.open()
    for text in texts:
        page = doc.new_page(width=595, height=842)
        page.insert_text((72, 72), text, fontsize=11)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def make_pdf() -> Callable[[List[str]], bytes]:
    return build_pdf


@pytest.fixture
def sample_pdf_bytes() -> bytes:
    """A three-page text PDF."""
    return build_pdf(PAGE_TEXTS)


@pytest.fixture
def sample_pdf_file(tmp_path, sample_pdf_bytes):
    path = tmp_path / "photosynthesis.pdf"
    path.write_bytes(sample_pdf_bytes)
    return path


@pytest.fixture
def pages() -> List[PageRecord]:
    return [PageRecord(page_number=i + 1, text=t) for i, t in enumerate(PAGE_TEXTS)]


# ---------------------------------------------------------------------------
# Worksheet fixtures
# ---------------------------------------------------------------------------

WORKSHEET_DATA = {
    "title": "광합성 학습지",
    "metadata": {"grade": "중2", "subject": "과학", "duration": "45분", "level": "기본"},
    "design": {
        "core_concepts": [
            {"concept": "광합성", "definition": "빛에너지를 화학에너지로 전환", "page": "p.1"},
        ],
        "key_terms": [
            {"term": "엽록소", "definition": "빛을 흡수하는 색소", "page": "p.2"},
        ],
        "misconceptions": ["식물은 흙에서 양분을 먹는다"],
    },
    "student_worksheet": {
        "lesson_info": {
            "title": "광합성의 원리",
            "objectives": ["광합성 과정을 설명할 수 있다"],
            "keywords": ["광합성", "엽록소"],
        },
        "concept_explanations": [
            {
                "concept": "광합성",
                "definition": "빛에너지를 이용해 포도당을 만드는 과정",
                "explanation": "잎의 세포 안에서 일어난다",
                "example": "햇빛 아래의 나뭇잎",
                "page": "p.1",
                "check_question": {"question": "광합성은 어디에서 일어나는가?", "answer": "엽록체"},
            },
        ],
        "activities": {
            "fill_blanks": [{"question": "엽록소는 ___ 빛을 반사한다", "answer": "초록", "page": "p.2"}],
            "ox_questions": [{"question": "포도당은 녹말로 저장된다", "answer": "O", "page": "p.3"}],
            "short_answers": [{"question": "광합성에 필요한 에너지는?", "answer": "빛에너지", "page": "p.1"}],
            "find_evidence": {"instruction": "엽록소가 흡수하는 빛을 찾아 밑줄을 그으세요", "page": "p.2"},
        },
        "application_task": {
            "description": "교실 화분의 위치를 정해 보자",
            "output_format": "포스터",
            "guidelines": ["근거 페이지를 표기할 것"],
        },
        "assessment": {
            "multiple_choice": [
                {"question": "광합성의 산물은?", "options": ["산소", "질소", "수소", "헬륨"], "answer": 1, "page": "p.1"},
                {"question": "엽록소가 반사하는 빛은?", "options": ["빨강", "초록"], "answer": 2, "page": "p.2"},
            ],
            "short_answer": [{"question": "포도당의 저장 형태는?", "answer": "녹말", "page": "p.3"}],
            "essay": [{"question": "광합성의 의의를 서술하시오", "rubric_elements": ["에너지 전환"], "page": "p.1"}],
        },
    },
    "teacher_guide": {
        "answer_key": "1) 산소 2) 초록 3) 녹말",
        "explanations": [{"question_num": "1", "explanation": "광합성 결과 산소가 발생한다", "page": "p.1"}],
        "rubric": [{"question": "광합성의 의의", "high": "세 요소 모두 서술", "mid": "두 요소", "low": "한 요소"}],
        "feedback_tips": [{"misconception": "흙에서 양분", "feedback": "양분은 잎에서 만들어져요"}],
    },
    "quality_check": {
        "no_external_content": True,
        "all_pages_cited": True,
        "no_ambiguous_questions": True,
        "time_appropriate": True,
        "difficulty_met": False,
        "no_answer_leak": True,
    },
}


@pytest.fixture
def worksheet_data() -> dict:
    """A deep copy of the full worksheet JSON, safe to mutate."""
    return copy.deepcopy(WORKSHEET_DATA)


@pytest.fixture
def worksheet(worksheet_data) -> Worksheet:
    return Worksheet.model_validate(worksheet_data)


@pytest.fixture
def generation_settings() -> GenerationSettings:
    return GenerationSettings(model="gpt-4o-mini", temperature=0.7, output_format="html")


# ---------------------------------------------------------------------------
# Provider fixture
# ---------------------------------------------------------------------------

class FakeProvider(LLMProvider):
    """Returns a canned JSON object, or raises *error*, and records requests."""

    provider_name = "fake"

    def __init__(self, payload: Optional[dict] = None, api_key: str = "sk-test",
                 error: Optional[Exception] = None):
        self.payload = WORKSHEET_DATA if payload is None else payload
        self.api_key = api_key
        self.error = error
        self.requests = []

    def check_credentials(self) -> None:
        if not self.api_key:
            raise MissingAPIKeyError()

    def complete(self, request) -> LLMResponse:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return LLMResponse(raw_text="{}", parsed_json=copy.deepcopy(self.payload), model=request.model)


@pytest.fixture
def fake_provider_cls():
    return FakeProvider


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()

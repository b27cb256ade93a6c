"""
Worksheet session: one uploaded PDF, its page selection, and the last
generated document.

The Streamlit app keeps one :class:`WorksheetSession` in
``st.session_state``; the CLI builds one per invocation.  Input problems
raise :class:`~worksheetgen.errors.InputValidationError` subclasses
before any state change or network call.  Everything else is logged,
moves the session to ``error`` with a status message, and is re-raised.
"""
from __future__ import annotations

import hashlib
import logging
from typing import List, Optional

from pydantic import ValidationError

from ..config.models import GenerationSettings, Worksheet
from ..errors import InputValidationError
from ..extract.prompt_builder import CompletionRequest, build_completion_request
from ..ingest.base import PageRecord
from ..ingest.intake import validate_pdf_upload
from ..ingest.pdf_reader import extract_pages
from ..providers.base import LLMJSONError, LLMProvider
from ..render.dispatcher import RenderedDocument, render_worksheet
from .state import Event, SessionState, StateMachine

logger = logging.getLogger(__name__)

STATUS_IDLE = "PDF 파일을 업로드하세요."
STATUS_EXTRACTING = "PDF 처리 중... (텍스트 추출 및 미리보기 생성)"
STATUS_READY = "준비 완료! 필요 없는 페이지는 클릭해서 제외하세요."
STATUS_GENERATING = "AI가 학습지를 생성하고 있습니다... (시간이 걸릴 수 있습니다)"
STATUS_DONE = "완료! 다운로드가 시작되었습니다."
STATUS_FAILED = "오류 발생: {}"
NO_PAGES_MESSAGE = "PDF 파일 내용 추출에 실패했습니다."
BAD_SHAPE_MESSAGE = "AI 응답의 형식이 올바르지 않습니다: {}"


def _parse_worksheet(data: dict, provider: str = "") -> Worksheet:
    try:
        return Worksheet.model_validate(data)
    except ValidationError as exc:
        fields = ", ".join(
            ".".join(str(part) for part in err["loc"]) or "(root)" for err in exc.errors()
        )
        raise LLMJSONError(BAD_SHAPE_MESSAGE.format(fields), provider=provider) from exc


class WorksheetSession:
    """Owns the page list and drives load → select → generate."""

    def __init__(self, *, with_previews: bool = True, preview_scale: float = 1.0):
        self.with_previews = with_previews
        self.preview_scale = preview_scale
        self.machine = StateMachine(guards={Event.GENERATE: lambda: bool(self.pages)})
        self._reset()
        self.status_message = STATUS_IDLE

    def _reset(self) -> None:
        self.filename: str = ""
        self.size: int = 0
        self.digest: str = ""
        self.pages: List[PageRecord] = []
        self.last_request: Optional[CompletionRequest] = None
        self.last_worksheet: Optional[Worksheet] = None
        self.last_document: Optional[RenderedDocument] = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self.machine.state

    @property
    def can_generate(self) -> bool:
        """Whether the generate control should be enabled."""
        return self.machine.can(Event.GENERATE)

    @property
    def selected_pages(self) -> List[PageRecord]:
        return [p for p in self.pages if p.included]

    def _fail(self, event: Event, exc: Exception) -> None:
        self.machine.fire(event)
        self.status_message = STATUS_FAILED.format(exc)

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    def load_pdf(self, filename: str, mime_type: str, data: bytes) -> List[PageRecord]:
        """Validate and extract *data*, replacing any previously loaded file.

        Raises
        ------
        UnsupportedFileError
            If *mime_type* is not ``application/pdf``.  Prior state is kept.
        ExtractionError
            If the PDF cannot be read.  The session ends in ``error``.
        """
        validate_pdf_upload(filename, mime_type)
        self.machine.fire(Event.LOAD)

        self._reset()
        self.filename = filename
        self.size = len(data)
        self.digest = hashlib.sha256(data).hexdigest()[:16]
        self.status_message = STATUS_EXTRACTING
        logger.info("Loading %s (%.2f MB)", filename, self.size / 1024 / 1024)

        try:
            pages = extract_pages(
                data, with_previews=self.with_previews, preview_scale=self.preview_scale
            )
        except Exception as exc:
            logger.exception("Failed to extract %s", filename)
            self._fail(Event.LOAD_FAILED, exc)
            raise

        self.pages = pages
        self.machine.fire(Event.LOADED)
        self.status_message = STATUS_READY
        logger.info("%s: %d pages ready", filename, len(pages))
        return pages

    # ------------------------------------------------------------------
    # Page selection
    # ------------------------------------------------------------------

    def _page(self, page_number: int) -> PageRecord:
        for page in self.pages:
            if page.page_number == page_number:
                return page
        raise KeyError(f"No page {page_number} (document has {len(self.pages)} pages)")

    def toggle_page(self, page_number: int) -> bool:
        """Flip inclusion of one page and return its new value."""
        return self._page(page_number).toggle()

    def set_page_included(self, page_number: int, included: bool) -> None:
        self._page(page_number).included = bool(included)

    def select_all(self) -> None:
        for page in self.pages:
            page.included = True

    def deselect_all(self) -> None:
        for page in self.pages:
            page.included = False

    def select_only(self, page_numbers) -> None:
        """Include exactly *page_numbers*; unknown numbers raise ``KeyError``."""
        wanted = set(page_numbers)
        for number in wanted:
            self._page(number)
        for page in self.pages:
            page.included = page.page_number in wanted

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def generate(self, settings: GenerationSettings, provider: LLMProvider) -> RenderedDocument:
        """Call the model for the selected pages and render the result.

        Raises
        ------
        MissingAPIKeyError, InputValidationError, EmptySelectionError
            Before any state change or request.
        InvalidTransitionError
            If a load or another generation is in progress.
        LLMError
            On API or JSON failure (session moves to ``error``).
        """
        if self.state in (SessionState.EXTRACTING, SessionState.GENERATING):
            self.machine.fire(Event.GENERATE)  # raises InvalidTransitionError

        provider.check_credentials()
        if not self.pages:
            raise InputValidationError(NO_PAGES_MESSAGE)
        request = build_completion_request(self.pages, settings)

        self.machine.fire(Event.GENERATE)
        self.last_request = request
        self.status_message = STATUS_GENERATING
        logger.info(
            "Generating %s from %d/%d pages of %s",
            settings.output_format, len(self.selected_pages), len(self.pages), self.filename,
        )

        try:
            response = provider.complete(request)
            worksheet = _parse_worksheet(response.parsed_json, provider.provider_name)
            document = render_worksheet(worksheet, settings.output_format)
        except Exception as exc:
            logger.exception("Worksheet generation failed")
            self._fail(Event.GENERATE_FAILED, exc)
            raise

        self.last_worksheet = worksheet
        self.last_document = document
        self.machine.fire(Event.GENERATED)
        self.status_message = STATUS_DONE
        return document

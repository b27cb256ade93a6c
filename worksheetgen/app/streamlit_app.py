"""
Worksheet Generator (Streamlit UI)
==================================

Upload a PDF, choose which pages to use, and generate a worksheet
(학생용 학습지 + 교사용 자료) as DOCX, PDF or HTML.

Run with::

    streamlit run worksheetgen/app/streamlit_app.py
"""

from __future__ import annotations

import logging
import sys
import traceback
from pathlib import Path
from typing import Optional

# Ensure project root is on sys.path (needed for Streamlit Cloud deployment)
_PROJECT_ROOT = str(Path(__file__).resolve().parent.parent.parent)
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

import pandas as pd
import streamlit as st

# ---------------------------------------------------------------------------
# Project imports
# ---------------------------------------------------------------------------

from worksheetgen.config.log_config import configure_logging
from worksheetgen.config.models import OUTPUT_FORMATS, GenerationSettings
from worksheetgen.config.settings import AppSettings
from worksheetgen.errors import InputValidationError
from worksheetgen.extract.prompts import DEFAULT_SYSTEM_PROMPT
from worksheetgen.ingest.base import extraction_summary
from worksheetgen.providers.registry import create_provider, model_ids, model_label
from worksheetgen.session.controller import STATUS_EXTRACTING, STATUS_GENERATING, WorksheetSession

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

FORMAT_LABELS = {
    "docx": "Word (.docx)",
    "pdf": "PDF (.pdf)",
    "html": "HTML (.html)",
}
PREVIEW_COLUMNS = 4


# ---------------------------------------------------------------------------
# Session-state initialisation
# ---------------------------------------------------------------------------

def _init_session_state() -> None:
    """Ensure every required session-state key exists."""
    if "app_settings" not in st.session_state:
        settings = AppSettings.from_env()
        configure_logging(settings.log_level)
        st.session_state["app_settings"] = settings

    settings: AppSettings = st.session_state["app_settings"]
    defaults = {
        "session": WorksheetSession(),
        "loaded_file_id": None,
        "system_prompt": DEFAULT_SYSTEM_PROMPT,
        "user_request": settings.user_request,
    }
    for key, default in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = default


def _session() -> WorksheetSession:
    return st.session_state["session"]


def _secret_api_key() -> str:
    """``OPENAI_API_KEY`` from ``.streamlit/secrets.toml`` if one exists."""
    try:
        return str(st.secrets.get("OPENAI_API_KEY", "") or "")
    except Exception as exc:  # no secrets file configured
        logger.debug("No Streamlit secrets available: %s", exc)
        return ""


def _reset_system_prompt() -> None:
    st.session_state["system_prompt"] = DEFAULT_SYSTEM_PROMPT


def _checkbox_key(session: WorksheetSession, page_number: int) -> str:
    return f"page_{session.digest}_{page_number}"


# ---------------------------------------------------------------------------
# Sidebar: settings
# ---------------------------------------------------------------------------

def _render_sidebar() -> dict:
    settings: AppSettings = st.session_state["app_settings"]

    with st.sidebar:
        st.title("📝 학습지 생성기")
        st.caption("PDF 자료 기반 학습지 · 교사용 자료 자동 생성")
        st.divider()

        default_key = settings.api_key or _secret_api_key()
        api_key = st.text_input(
            "OpenAI API Key",
            value=default_key,
            type="password",
            placeholder="sk-...",
            key="api_key_input",
        )

        tab_basic, tab_prompt = st.tabs(["기본 설정", "프롬프트 설정"])

        with tab_basic:
            options = model_ids()
            if settings.model not in options:
                options = [settings.model] + options
            model = st.selectbox(
                "모델",
                options,
                index=options.index(settings.model),
                format_func=model_label,
                key="model_select",
            )
            temperature = st.slider(
                "창의성 (temperature)",
                min_value=0.0,
                max_value=1.0,
                value=float(settings.temperature),
                step=0.1,
                key="temperature_slider",
            )
            output_format = st.selectbox(
                "출력 형식",
                OUTPUT_FORMATS,
                index=OUTPUT_FORMATS.index(settings.output_format),
                format_func=lambda f: FORMAT_LABELS[f],
                key="format_select",
            )

        with tab_prompt:
            st.text_area(
                "📢 추가 요구사항",
                key="user_request",
                height=120,
                placeholder="예: 중학교 2학년 수준으로, 객관식 5문항 포함",
            )
            st.text_area("시스템 프롬프트", key="system_prompt", height=300)
            st.caption("JSON 출력 형식 지시문은 자동으로 덧붙여집니다.")
            st.button("기본 프롬프트로 복원", key="btn_reset_prompt", on_click=_reset_system_prompt)

        st.divider()
        if st.button("리셋 (Reset)", key="btn_reset"):
            for k in list(st.session_state.keys()):
                del st.session_state[k]
            st.rerun()

    return {
        "api_key": api_key,
        "model": model,
        "temperature": temperature,
        "output_format": output_format,
    }


# ---------------------------------------------------------------------------
# Upload & preview
# ---------------------------------------------------------------------------

def _handle_upload(uploaded_file) -> None:
    session = _session()
    file_id = (uploaded_file.name, uploaded_file.size)
    if st.session_state["loaded_file_id"] == file_id:
        return

    st.session_state["loaded_file_id"] = file_id
    try:
        with st.spinner(STATUS_EXTRACTING):
            session.load_pdf(uploaded_file.name, uploaded_file.type or "", uploaded_file.getvalue())
    except InputValidationError as exc:
        st.warning(str(exc))
    except Exception as exc:
        st.error(f"PDF를 처리하는 중 오류가 발생했습니다:\n\n{exc}")
        with st.expander("오류 상세"):
            st.code(traceback.format_exc())


def _set_all_pages(included: bool) -> None:
    session = _session()
    if included:
        session.select_all()
    else:
        session.deselect_all()
    for page in session.pages:
        st.session_state[_checkbox_key(session, page.page_number)] = included


def _render_page_grid(session: WorksheetSession) -> None:
    col_a, col_b, col_c = st.columns([1, 1, 4])
    col_a.button("전체 선택", on_click=_set_all_pages, args=(True,), key="btn_select_all")
    col_b.button("전체 해제", on_click=_set_all_pages, args=(False,), key="btn_deselect_all")
    col_c.caption(f"선택된 페이지: {len(session.selected_pages)}/{len(session.pages)}")

    for start in range(0, len(session.pages), PREVIEW_COLUMNS):
        cols = st.columns(PREVIEW_COLUMNS)
        for col, page in zip(cols, session.pages[start:start + PREVIEW_COLUMNS]):
            with col:
                if page.preview_png:
                    st.image(page.preview_png, width="stretch")
                else:
                    st.caption("미리보기 없음")
                key = _checkbox_key(session, page.page_number)
                if key not in st.session_state:
                    st.session_state[key] = page.included
                included = st.checkbox(f"p.{page.page_number}", key=key)
                session.set_page_included(page.page_number, included)

    with st.expander("페이지별 추출 결과"):
        st.text(extraction_summary(session.pages, session.filename))
        df = pd.DataFrame(
            [
                {
                    "페이지": p.page_number,
                    "포함": p.included,
                    "글자 수": p.char_count,
                    "내용": p.snippet(),
                }
                for p in session.pages
            ]
        )
        st.dataframe(df, width="stretch", hide_index=True)


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------

def _run_generation(options: dict) -> None:
    session = _session()
    app_settings: AppSettings = st.session_state["app_settings"]

    try:
        settings = GenerationSettings(
            model=options["model"],
            temperature=options["temperature"],
            output_format=options["output_format"],
            user_request=st.session_state["user_request"],
            system_prompt_template=st.session_state["system_prompt"],
        )
        provider = create_provider(
            api_key=options["api_key"],
            base_url=app_settings.base_url,
            timeout=app_settings.request_timeout,
        )
        with st.spinner(STATUS_GENERATING):
            session.generate(settings, provider)
    except InputValidationError as exc:
        st.warning(str(exc))
        return
    except Exception as exc:
        st.error(f"오류 발생: {exc}")
        with st.expander("오류 상세"):
            st.code(traceback.format_exc())
        return

    st.success(session.status_message)


def _render_download(session: WorksheetSession) -> None:
    document = session.last_document
    if document is None:
        return
    st.download_button(
        label=f"⬇ {document.filename} 다운로드",
        data=document.data,
        file_name=document.filename,
        mime=document.mime_type,
        key="btn_download",
        type="primary",
    )
    if session.last_request is not None and session.last_request.truncated:
        st.caption("※ 자료가 길어 앞부분 15,000자만 사용했습니다.")


# ===================================================================
# Main application
# ===================================================================

def main() -> None:
    """Entry point for the Streamlit worksheet generator."""

    st.set_page_config(
        page_title="학습지 생성기",
        page_icon="📝",
        layout="wide",
        initial_sidebar_state="expanded",
    )

    _init_session_state()
    options = _render_sidebar()
    session = _session()

    st.header("1. PDF 업로드")
    uploaded = st.file_uploader("PDF 자료를 업로드하세요", type=["pdf"], key="pdf_uploader")
    if uploaded is not None:
        _handle_upload(uploaded)
    else:
        st.session_state["loaded_file_id"] = None

    if session.filename:
        st.caption(f"📄 {session.filename} ({session.size / 1024 / 1024:.2f} MB)")

    if session.pages:
        st.header("2. 페이지 선택")
        _render_page_grid(session)

    st.header("3. 학습지 생성")
    st.info(session.status_message)
    if st.button(
        "🚀 학습지 생성",
        key="btn_generate",
        disabled=not session.can_generate,
        type="primary",
    ):
        _run_generation(options)

    _render_download(session)


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    main()

"""Exceptions raised before any network activity or by the session state machine.

LLM-side failures live in :mod:`worksheetgen.providers.base`.
"""
from __future__ import annotations


class WorksheetError(Exception):
    """Base class for worksheet generator errors."""


class InputValidationError(WorksheetError):
    """User input was rejected; nothing was extracted or sent."""


class UnsupportedFileError(InputValidationError):
    """The uploaded file is not a PDF."""

    def __init__(self, filename: str, mime_type: str):
        super().__init__("PDF 파일만 업로드 가능합니다.")
        self.filename = filename
        self.mime_type = mime_type


class EmptySelectionError(InputValidationError):
    """No included page contributed any text."""

    def __init__(self, message: str = "선택된 페이지가 없습니다. 최소 1개 이상의 페이지를 선택해주세요."):
        super().__init__(message)


class MissingAPIKeyError(InputValidationError):
    """No API key was supplied for the completion endpoint."""

    def __init__(self, message: str = "OpenAI API Key를 입력해주세요."):
        super().__init__(message)


class InvalidTransitionError(WorksheetError):
    """An action was attempted that the current session state does not allow."""

    def __init__(self, state: str, event: str):
        super().__init__(f"'{event}' is not allowed while the session is '{state}'")
        self.state = state
        self.event = event


class ExtractionError(RuntimeError):
    """The PDF could not be read by any extraction backend."""

"""PDF intake and per-page extraction.

Public API
----------
.. autofunction:: validate_pdf_upload
.. autofunction:: extract_pages
.. autoclass:: PageRecord
"""
from .base import PageRecord, extraction_summary
from .intake import PDF_MIME_TYPE, validate_pdf_upload
from .pdf_reader import extract_pages, read_pdf, render_previews

__all__ = [
    "PageRecord",
    "extraction_summary",
    "PDF_MIME_TYPE",
    "validate_pdf_upload",
    "extract_pages",
    "read_pdf",
    "render_previews",
]

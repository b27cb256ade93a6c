"""Choose a writer for the requested output format."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict

from ..config.models import OUTPUT_FORMATS, Worksheet
from .docx_writer import render_docx
from .html_writer import render_html
from .pdf_writer import render_pdf

logger = logging.getLogger(__name__)

MIME_TYPES: Dict[str, str] = {
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "pdf": "application/pdf",
    "html": "text/html",
}

_FORMAT_MAP: Dict[str, Callable[[Worksheet], bytes]] = {
    "docx": render_docx,
    "pdf": render_pdf,
    "html": render_html,
}


@dataclass
class RenderedDocument:
    """A finished file ready for download or writing to disk."""
    filename: str
    mime_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


def render_worksheet(worksheet: Worksheet, output_format: str = "docx") -> RenderedDocument:
    """Render *worksheet* in *output_format* (``docx``, ``pdf`` or ``html``).

    Raises
    ------
    ValueError
        If *output_format* is not one of the supported formats.
    """
    fmt = (output_format or "").strip().lower().lstrip(".")
    renderer = _FORMAT_MAP.get(fmt)
    if renderer is None:
        raise ValueError(
            f"Unsupported output format: {output_format!r} (expected one of {', '.join(OUTPUT_FORMATS)})"
        )

    data = renderer(worksheet)
    filename = worksheet.safe_filename(fmt)
    logger.info("Rendered %s (%d bytes)", filename, len(data))
    return RenderedDocument(filename=filename, mime_type=MIME_TYPES[fmt], data=data)

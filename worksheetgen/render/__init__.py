"""Document writers: worksheet JSON → docx / pdf / html."""
from .blocks import Block, Run, build_blocks, plain_text
from .dispatcher import MIME_TYPES, RenderedDocument, render_worksheet
from .docx_writer import render_docx
from .html_writer import render_html
from .pdf_writer import build_story, render_pdf

__all__ = [
    "Block",
    "Run",
    "build_blocks",
    "plain_text",
    "MIME_TYPES",
    "RenderedDocument",
    "render_worksheet",
    "render_docx",
    "render_html",
    "render_pdf",
    "build_story",
]

"""
Word (.docx) writer using python-docx.

Korean text needs an East-Asian font set on each run; otherwise Word
falls back to a Latin font and renders boxes on some systems.
"""
from __future__ import annotations

import io
import logging
from typing import List

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH, WD_BREAK
from docx.oxml.ns import qn
from docx.shared import Pt, RGBColor

from ..config.models import Worksheet
from .blocks import (
    BULLET,
    DIVIDER,
    HEADING1,
    HEADING2,
    HEADING3,
    OPTION,
    PAGE_BREAK,
    TITLE,
    Block,
    build_blocks,
)

logger = logging.getLogger(__name__)

KOREAN_FONT = "Malgun Gothic"
BODY_SIZE = Pt(11)

_HEADING_LEVELS = {TITLE: 0, HEADING1: 1, HEADING2: 2, HEADING3: 3}


def _apply_font(run, size=None) -> None:
    run.font.name = KOREAN_FONT
    rpr = run._element.get_or_add_rPr()
    rfonts = rpr.get_or_add_rFonts()
    rfonts.set(qn("w:eastAsia"), KOREAN_FONT)
    if size is not None:
        run.font.size = size


def _write_runs(paragraph, block: Block) -> None:
    for r in block.runs:
        run = paragraph.add_run(r.text)
        run.bold = r.bold or None
        run.italic = r.italic or None
        if r.color:
            run.font.color.rgb = RGBColor.from_string(r.color)
        _apply_font(run, BODY_SIZE)


def _add_divider(doc) -> None:
    p = doc.add_paragraph()
    run = p.add_run("━" * 30)
    run.font.color.rgb = RGBColor.from_string("999999")
    _apply_font(run, Pt(8))


def _add_page_break(doc) -> None:
    doc.add_paragraph().add_run().add_break(WD_BREAK.PAGE)


def _add_block(doc, block: Block) -> None:
    if block.kind == PAGE_BREAK:
        _add_page_break(doc)
        return
    if block.kind == DIVIDER:
        _add_divider(doc)
        return

    if block.kind in _HEADING_LEVELS:
        heading = doc.add_heading(level=_HEADING_LEVELS[block.kind])
        for r in block.runs:
            _apply_font(heading.add_run(r.text))
        if block.center:
            heading.alignment = WD_ALIGN_PARAGRAPH.CENTER
        return

    if block.kind == BULLET:
        p = doc.add_paragraph(style="List Bullet")
    elif block.kind == OPTION:
        p = doc.add_paragraph()
        p.paragraph_format.left_indent = Pt(24)
    else:
        p = doc.add_paragraph()
    _write_runs(p, block)
    if block.center:
        p.alignment = WD_ALIGN_PARAGRAPH.CENTER


def write_blocks(blocks: List[Block]) -> bytes:
    doc = Document()
    style = doc.styles["Normal"]
    style.font.name = KOREAN_FONT
    style.font.size = BODY_SIZE
    style.element.get_or_add_rPr().get_or_add_rFonts().set(qn("w:eastAsia"), KOREAN_FONT)

    for block in blocks:
        _add_block(doc, block)

    buf = io.BytesIO()
    doc.save(buf)
    return buf.getvalue()


def render_docx(worksheet: Worksheet) -> bytes:
    """Render *worksheet* to .docx bytes."""
    blocks = build_blocks(worksheet)
    data = write_blocks(blocks)
    logger.info("DOCX rendered: %d blocks, %d bytes", len(blocks), len(data))
    return data

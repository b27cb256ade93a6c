"""
PDF writer using reportlab platypus.

Korean glyphs come from reportlab's built-in CID font ``HYGothic-Medium``
so no TTF needs to ship with the package.  CID fonts have no emoji or
check-mark glyphs: ✓/✗ become ``[O]``/``[X]`` and other symbols outside
the font are stripped.
"""
from __future__ import annotations

import io
import logging
import re
from typing import List

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.cidfonts import UnicodeCIDFont
from reportlab.platypus import (
    HRFlowable,
    PageBreak,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
)
from xml.sax.saxutils import escape

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

KOREAN_FONT = "HYGothic-Medium"

_SYMBOL_MAP = {"✓": "[O]", "✗": "[X]"}
# Emoji, dingbats, variation selectors and anything outside the BMP
_UNSUPPORTED = re.compile(
    "[\U00010000-\U0010FFFF\u2600-\u27BF\u2B00-\u2BFF\uFE0F\u200D]"
)


def _register_font() -> None:
    if KOREAN_FONT not in pdfmetrics.getRegisteredFontNames():
        pdfmetrics.registerFont(UnicodeCIDFont(KOREAN_FONT))


def pdf_safe(text: str) -> str:
    """Replace or drop characters the CID font cannot draw."""
    for symbol, replacement in _SYMBOL_MAP.items():
        text = text.replace(symbol, replacement)
    return _UNSUPPORTED.sub("", text)


def _styles() -> dict:
    base = getSampleStyleSheet()
    body = ParagraphStyle(
        "WSBody", parent=base["Normal"], fontName=KOREAN_FONT,
        fontSize=10.5, leading=16, wordWrap="CJK", spaceAfter=3,
    )
    return {
        TITLE: ParagraphStyle(
            "WSTitle", parent=body, fontSize=18, leading=24,
            alignment=TA_CENTER, spaceBefore=6, spaceAfter=10,
        ),
        HEADING1: ParagraphStyle(
            "WSHeading1", parent=body, fontSize=14, leading=20,
            textColor=colors.HexColor("#2c3e50"), spaceBefore=10, spaceAfter=6,
        ),
        HEADING2: ParagraphStyle(
            "WSHeading2", parent=body, fontSize=12, leading=18,
            textColor=colors.HexColor("#34495e"), spaceBefore=8, spaceAfter=4,
        ),
        HEADING3: ParagraphStyle(
            "WSHeading3", parent=body, fontSize=11, leading=16, spaceBefore=6,
        ),
        "body": body,
        "center": ParagraphStyle("WSCenter", parent=body, alignment=TA_CENTER),
        BULLET: ParagraphStyle("WSBullet", parent=body, leftIndent=14, bulletIndent=4),
        OPTION: ParagraphStyle("WSOption", parent=body, leftIndent=24),
    }


def _markup(block: Block) -> str:
    """Convert runs to reportlab's mini-HTML paragraph markup."""
    parts = []
    for r in block.runs:
        text = escape(pdf_safe(r.text))
        if not text:
            continue
        if r.bold:
            text = f"<b>{text}</b>"
        if r.italic:
            text = f"<i>{text}</i>"
        if r.color:
            text = f'<font color="#{r.color}">{text}</font>'
        parts.append(text)
    return "".join(parts)


def build_story(blocks: List[Block]) -> list:
    """Return the platypus flowables for *blocks*."""
    _register_font()
    styles = _styles()
    story: list = []

    for block in blocks:
        if block.kind == PAGE_BREAK:
            story.append(PageBreak())
            continue
        if block.kind == DIVIDER:
            story.append(HRFlowable(width="100%", thickness=0.5, color=colors.grey,
                                    spaceBefore=4, spaceAfter=4))
            continue

        markup = _markup(block)
        if not markup:
            continue

        if block.kind == BULLET:
            story.append(Paragraph(markup, styles[BULLET], bulletText="-"))
        elif block.kind in styles:
            story.append(Paragraph(markup, styles[block.kind]))
        elif block.center:
            story.append(Paragraph(markup, styles["center"]))
        else:
            story.append(Paragraph(markup, styles["body"]))

        if block.kind == TITLE:
            story.append(Spacer(1, 4 * mm))

    return story


def write_blocks(blocks: List[Block], title: str = "") -> bytes:
    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf, pagesize=A4,
        leftMargin=20 * mm, rightMargin=20 * mm,
        topMargin=18 * mm, bottomMargin=18 * mm,
        title=title,
    )
    doc.build(build_story(blocks))
    return buf.getvalue()


def render_pdf(worksheet: Worksheet) -> bytes:
    """Render *worksheet* to PDF bytes."""
    blocks = build_blocks(worksheet)
    data = write_blocks(blocks, title=worksheet.display_title)
    logger.info("PDF rendered: %d blocks, %d bytes", len(blocks), len(data))
    return data

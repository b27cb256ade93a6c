"""Standalone HTML writer (UTF-8, inline stylesheet, printable)."""
from __future__ import annotations

import html
import logging
from typing import List

from ..config.models import Worksheet
from .blocks import (
    BULLET,
    DIVIDER,
    GREEN,
    HEADING1,
    HEADING2,
    HEADING3,
    OPTION,
    PAGE_BREAK,
    RED,
    TITLE,
    Block,
    Run,
    build_blocks,
)

logger = logging.getLogger(__name__)

STYLESHEET = """
body {
    font-family: 'Malgun Gothic', sans-serif;
    max-width: 900px;
    margin: 40px auto;
    padding: 20px;
    line-height: 1.8;
    background: #f9fafb;
}
h1 {
    text-align: center;
    color: #1f2937;
    border-bottom: 3px solid #6366f1;
    padding-bottom: 10px;
}
h2 {
    color: #4f46e5;
    margin-top: 30px;
    border-left: 4px solid #6366f1;
    padding-left: 10px;
}
h3 { color: #6366f1; margin-top: 20px; }
h4 { color: #374151; margin: 16px 0 6px; }
.metadata {
    text-align: center;
    font-weight: bold;
    margin-bottom: 30px;
    padding: 10px;
    background: #e0e7ff;
    border-radius: 8px;
}
.section {
    margin: 30px 0;
    padding: 20px;
    background: white;
    border-radius: 12px;
    box-shadow: 0 1px 3px rgba(0,0,0,0.1);
}
.concept-item, .term-item {
    margin: 10px 0;
    padding: 10px;
    background: #f3f4f6;
    border-radius: 6px;
    list-style: none;
}
.page-ref { color: #9ca3af; font-style: italic; font-size: 0.9em; }
.question {
    margin: 15px 0;
    padding: 15px;
    background: #fef3c7;
    border-radius: 8px;
    border-left: 3px solid #f59e0b;
}
.option { margin: 2px 0 2px 24px; }
.answer-section {
    padding: 20px;
    background: #d1fae5;
    border-radius: 12px;
    white-space: pre-wrap;
}
.page-break {
    page-break-before: always;
    margin-top: 50px;
    padding-top: 20px;
    border-top: 3px solid #6366f1;
}
.checklist-item { padding: 8px; margin: 5px 0; }
.check-ok { color: #10b981; }
.check-fail { color: #ef4444; }
"""

_TAGS = {TITLE: "h1", HEADING1: "h2", HEADING2: "h3", HEADING3: "h4"}


def _run_html(run: Run, checklist: bool = False) -> str:
    text = html.escape(run.text)
    if run.citation:
        return f'<span class="page-ref">{text}</span>'
    if run.bold:
        text = f"<strong>{text}</strong>"
    if run.italic:
        text = f"<em>{text}</em>"
    if checklist and run.color in (GREEN, RED):
        css = "check-ok" if run.color == GREEN else "check-fail"
        text = f'<span class="{css}">{text}</span>'
    elif run.color:
        text = f'<span style="color:#{run.color}">{text}</span>'
    return text


def _inner(block: Block) -> str:
    checklist = block.role == "checklist-item"
    return "".join(_run_html(r, checklist) for r in block.runs)


def write_blocks(blocks: List[Block], title: str) -> str:
    body: List[str] = []
    in_section = False
    in_list = False

    def close_list():
        nonlocal in_list
        if in_list:
            body.append("</ul>")
            in_list = False

    def close_section():
        nonlocal in_section
        close_list()
        if in_section:
            body.append("</div>")
            in_section = False

    for block in blocks:
        if block.kind != BULLET:
            close_list()

        if block.kind == PAGE_BREAK:
            close_section()
            body.append('<div class="page-break"></div>')
        elif block.kind == DIVIDER:
            continue
        elif block.kind == HEADING1:
            close_section()
            body.append('<div class="section">')
            in_section = True
            body.append(f"<h2>{_inner(block)}</h2>")
        elif block.kind in _TAGS:
            tag = _TAGS[block.kind]
            body.append(f"<{tag}>{_inner(block)}</{tag}>")
        elif block.kind == BULLET:
            if not in_list:
                body.append("<ul>")
                in_list = True
            css = f' class="{block.role}"' if block.role else ""
            body.append(f"<li{css}>{_inner(block)}</li>")
        elif block.kind == OPTION:
            body.append(f'<div class="option">{_inner(block)}</div>')
        else:
            css = f' class="{block.role}"' if block.role else ""
            body.append(f"<div{css}>{_inner(block)}</div>")

    close_section()

    return (
        "<!DOCTYPE html>\n"
        '<html lang="ko">\n<head>\n<meta charset="UTF-8">\n'
        '<meta name="viewport" content="width=device-width, initial-scale=1.0">\n'
        f"<title>{html.escape(title)}</title>\n"
        f"<style>{STYLESHEET}</style>\n</head>\n<body>\n"
        + "\n".join(body)
        + "\n</body>\n</html>\n"
    )


def render_html(worksheet: Worksheet) -> bytes:
    """Render *worksheet* to a UTF-8 encoded HTML document."""
    blocks = build_blocks(worksheet)
    document = write_blocks(blocks, worksheet.display_title)
    logger.info("HTML rendered: %d blocks, %d chars", len(blocks), len(document))
    return document.encode("utf-8")

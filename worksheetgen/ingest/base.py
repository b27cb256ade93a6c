"""Page records produced by extraction."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional


@dataclass
class PageRecord:
    """Extracted content of a single PDF page."""
    page_number: int  # 1-based
    text: str
    included: bool = True
    preview_png: Optional[bytes] = None

    def toggle(self) -> bool:
        """Flip the inclusion flag and return the new value."""
        self.included = not self.included
        return self.included

    @property
    def has_text(self) -> bool:
        return bool(self.text and self.text.strip())

    @property
    def char_count(self) -> int:
        return len(self.text)

    def snippet(self, length: int = 60) -> str:
        """First *length* characters, for tables and tooltips."""
        if len(self.text) <= length:
            return self.text
        return self.text[:length].rstrip() + "…"


def extraction_summary(pages: List[PageRecord], source_filename: str = "") -> str:
    """Return a human-readable summary of extraction results."""
    with_text = sum(1 for p in pages if p.has_text)
    total_chars = sum(p.char_count for p in pages)
    included = sum(1 for p in pages if p.included)
    lines = [
        f"파일: {source_filename or '-'}",
        f"페이지 수: {len(pages)}",
        f"텍스트 추출 페이지: {with_text}/{len(pages)}",
        f"포함된 페이지: {included}/{len(pages)}",
        f"합계 글자 수: {total_chars:,}",
    ]
    if pages and with_text == 0:
        lines.append("⚠ 이미지 기반 PDF일 수 있습니다 (추출된 텍스트 없음)")
    return "\n".join(lines)

"""PDF page extraction with page numbers preserved.

Text extraction priority:
  1. pdfplumber     - good reading order for most text PDFs
  2. PyMuPDF (fitz) - handles CIDFont / Type3 fonts pdfplumber can't decode
  3. pypdfium2      - Chrome's PDFium engine, last resort for Chrome-printed PDFs

If a backend yields very little text, the next one is tried and the best
result is kept.  Page previews are rendered with PyMuPDF, falling back to
pypdfium2 (via Pillow) when PyMuPDF cannot rasterize the file.
"""
from __future__ import annotations

import io
import logging
import re
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import fitz  # PyMuPDF
import pdfplumber
import pypdfium2 as pdfium

from ..errors import ExtractionError
from .base import PageRecord

logger = logging.getLogger(__name__)

_MIN_USEFUL_CHARS_PER_PAGE = 20  # below this, extraction probably failed
DEFAULT_PREVIEW_SCALE = 1.0


# ---------------------------------------------------------------------------
# Garbled-text detection
# ---------------------------------------------------------------------------
# (cid:XXXX) placeholders that pdfminer emits for unmapped glyphs
_CID_PATTERN = re.compile(r'\(cid:\d+\)')
# Kangxi Radicals range (U+2F00-U+2FDF), usually a broken ToUnicode map
_KANGXI_PATTERN = re.compile(r'[⼀-⿟]')


def _is_garbled(text: str) -> bool:
    """Detect text made mostly of unmappable glyphs."""
    clean = (text or "").strip()
    if not clean:
        return False

    garbled = (
        clean.count('�')
        + len(_CID_PATTERN.findall(clean)) * 8
        + len(_KANGXI_PATTERN.findall(clean))
    )
    ratio = garbled / len(clean)
    if ratio > 0.15:
        logger.info("Garbled text detected: %.1f%% of %d chars", ratio * 100, len(clean))
        return True
    return False


def _normalize(text: str) -> str:
    """Collapse runs of whitespace into single spaces."""
    return " ".join((text or "").split())


# ---------------------------------------------------------------------------
# Text backends: each returns one string per page, in page order
# ---------------------------------------------------------------------------

def _extract_with_pdfplumber(data: bytes) -> List[str]:
    texts: List[str] = []
    with pdfplumber.open(io.BytesIO(data)) as pdf:
        for idx, pdf_page in enumerate(pdf.pages):
            try:
                text = pdf_page.extract_text() or ""
            except Exception as exc:
                logger.debug("pdfplumber: extract_text failed on page %d: %s", idx + 1, exc)
                text = ""
            texts.append("" if _is_garbled(text) else text)
    return texts


def _extract_with_pymupdf(data: bytes) -> List[str]:
    texts: List[str] = []
    with fitz.open(stream=data, filetype="pdf") as doc:
        for page in doc:
            text = page.get_text("text") or ""
            texts.append("" if _is_garbled(text) else text)
    return texts


def _extract_with_pypdfium2(data: bytes) -> List[str]:
    texts: List[str] = []
    doc = pdfium.PdfDocument(data)
    try:
        for idx in range(len(doc)):
            page = doc[idx]
            textpage = page.get_textpage()
            text = textpage.get_text_bounded() or ""
            textpage.close()
            page.close()
            texts.append("" if _is_garbled(text) else text)
    finally:
        doc.close()
    return texts


_BACKENDS: List[Tuple[str, Callable[[bytes], List[str]]]] = [
    ("pdfplumber", _extract_with_pdfplumber),
    ("PyMuPDF", _extract_with_pymupdf),
    ("pypdfium2", _extract_with_pypdfium2),
]


def extract_text_by_page(data: bytes) -> List[str]:
    """Return whitespace-normalised text for every page of the PDF in *data*.

    Raises
    ------
    ExtractionError
        If no backend can open the file or the file has no pages.
    """
    best: Optional[List[str]] = None
    best_chars = -1
    backend_errors: List[str] = []

    for name, extract_fn in _BACKENDS:
        try:
            texts = [_normalize(t) for t in extract_fn(data)]
        except Exception as exc:
            logger.warning("PDF extraction with %s failed: %s", name, exc)
            backend_errors.append(f"{name}: {exc}")
            continue

        if not texts:
            backend_errors.append(f"{name}: 0 pages")
            continue

        char_count = sum(len(t) for t in texts)
        logger.info("%s: extracted %d chars from %d pages", name, char_count, len(texts))
        if char_count / len(texts) >= _MIN_USEFUL_CHARS_PER_PAGE:
            return texts
        if char_count > best_chars:
            best, best_chars = texts, char_count

    if best is not None:
        logger.warning(
            "All PDF backends produced little text (best: %d chars). "
            "The PDF may be image-based.",
            best_chars,
        )
        return best

    detail = "; ".join(backend_errors) or "no backends available"
    raise ExtractionError(f"PDF를 읽을 수 없습니다. ({detail})")


# ---------------------------------------------------------------------------
# Previews
# ---------------------------------------------------------------------------

def _render_pages_fitz(data: bytes, scale: float) -> List[bytes]:
    images: List[bytes] = []
    with fitz.open(stream=data, filetype="pdf") as doc:
        matrix = fitz.Matrix(scale, scale)
        for page in doc:
            images.append(page.get_pixmap(matrix=matrix).tobytes("png"))
    return images


def _render_pages_pypdfium2(data: bytes, scale: float) -> List[bytes]:
    images: List[bytes] = []
    doc = pdfium.PdfDocument(data)
    try:
        for idx in range(len(doc)):
            page = doc[idx]
            pil_image = page.render(scale=scale).to_pil()
            buf = io.BytesIO()
            pil_image.save(buf, format="PNG")
            images.append(buf.getvalue())
            page.close()
    finally:
        doc.close()
    return images


def render_previews(data: bytes, scale: float = DEFAULT_PREVIEW_SCALE) -> List[bytes]:
    """Rasterize every page to PNG bytes, in page order."""
    try:
        return _render_pages_fitz(data, scale)
    except Exception as exc:
        logger.warning("PyMuPDF preview rendering failed (%s); trying pypdfium2", exc)
        return _render_pages_pypdfium2(data, scale)


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------

def extract_pages(
    data: bytes,
    *,
    with_previews: bool = True,
    preview_scale: float = DEFAULT_PREVIEW_SCALE,
) -> List[PageRecord]:
    """Extract one :class:`PageRecord` per page, numbered from 1.

    Every record starts out included.  A preview failure is logged and
    leaves ``preview_png`` empty; a text failure raises
    :class:`ExtractionError`.
    """
    texts = extract_text_by_page(data)

    previews: List[Optional[bytes]] = [None] * len(texts)
    if with_previews:
        try:
            rendered = render_previews(data, preview_scale)
        except Exception as exc:
            logger.warning("Preview rendering failed: %s", exc)
        else:
            if len(rendered) == len(texts):
                previews = list(rendered)
            else:
                logger.warning(
                    "Preview count %d does not match page count %d; skipping previews",
                    len(rendered), len(texts),
                )

    return [
        PageRecord(page_number=idx + 1, text=text, included=True, preview_png=preview)
        for idx, (text, preview) in enumerate(zip(texts, previews))
    ]


def read_pdf(file_path: str, *, with_previews: bool = False) -> List[PageRecord]:
    """Read a PDF from disk and extract its pages.

    Raises
    ------
    FileNotFoundError
        If *file_path* does not exist.
    ValueError
        If *file_path* is not a regular file.
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"PDF file not found: {file_path}")
    if not path.is_file():
        raise ValueError(f"Path is not a file: {file_path}")

    logger.info("Reading PDF: %s (%.1f KB)", path.name, path.stat().st_size / 1024)
    return extract_pages(path.read_bytes(), with_previews=with_previews)

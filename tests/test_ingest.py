"""Tests for worksheetgen.ingest -- upload validation and page extraction.

Covers the MIME check, 1-based page numbering, the default inclusion
flag, preview rendering and the failure paths.
"""

import pytest

from worksheetgen.errors import ExtractionError, UnsupportedFileError
from worksheetgen.ingest import pdf_reader
from worksheetgen.ingest.base import PageRecord, extraction_summary
from worksheetgen.ingest.intake import PDF_MIME_TYPE, validate_pdf_upload
from worksheetgen.ingest.pdf_reader import _is_garbled, _normalize, extract_pages, read_pdf

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


# ===================================================================
# Upload validation
# ===================================================================

class TestValidatePdfUpload:
    """Only application/pdf is accepted."""

    def test_pdf_accepted(self):
        validate_pdf_upload("notes.pdf", PDF_MIME_TYPE)

    def test_mime_parameters_and_case_ignored(self):
        validate_pdf_upload("notes.pdf", "Application/PDF; charset=binary")

    @pytest.mark.parametrize("mime", ["text/plain", "image/png", "application/msword", ""])
    def test_other_types_rejected(self, mime):
        with pytest.raises(UnsupportedFileError):
            validate_pdf_upload("notes.pdf", mime)

    def test_extension_alone_is_not_enough(self):
        with pytest.raises(UnsupportedFileError):
            validate_pdf_upload("notes.pdf", "application/octet-stream")

    def test_error_carries_message_and_input(self):
        with pytest.raises(UnsupportedFileError) as exc_info:
            validate_pdf_upload("photo.png", "image/png")
        assert str(exc_info.value) == "PDF 파일만 업로드 가능합니다."
        assert exc_info.value.filename == "photo.png"
        assert exc_info.value.mime_type == "image/png"


# ===================================================================
# PageRecord
# ===================================================================

class TestPageRecord:

    def test_toggle_twice_restores(self):
        page = PageRecord(page_number=1, text="abc")
        assert page.toggle() is False
        assert page.toggle() is True
        assert page.included is True

    def test_snippet_truncates(self):
        page = PageRecord(page_number=1, text="x" * 100)
        assert page.snippet(10) == "x" * 10 + "…"
        assert PageRecord(page_number=1, text="short").snippet() == "short"

    def test_has_text(self):
        assert PageRecord(page_number=1, text="  a ").has_text
        assert not PageRecord(page_number=1, text="   ").has_text

    def test_summary_flags_image_pdf(self):
        summary = extraction_summary([PageRecord(page_number=1, text="")], "scan.pdf")
        assert "scan.pdf" in summary
        assert "이미지 기반" in summary


# ===================================================================
# Extraction
# ===================================================================

class TestExtractPages:

    def test_one_record_per_page_numbered_from_one(self, sample_pdf_bytes):
        pages = extract_pages(sample_pdf_bytes, with_previews=False)
        assert [p.page_number for p in pages] == [1, 2, 3]

    def test_all_pages_included_by_default(self, sample_pdf_bytes):
        pages = extract_pages(sample_pdf_bytes, with_previews=False)
        assert all(p.included for p in pages)

    def test_text_is_per_page(self, sample_pdf_bytes):
        pages = extract_pages(sample_pdf_bytes, with_previews=False)
        assert "Photosynthesis" in pages[0].text
        assert "Chlorophyll" in pages[1].text
        assert "Chlorophyll" not in pages[0].text
        assert "starch" in pages[2].text

    def test_whitespace_is_collapsed(self, sample_pdf_bytes):
        pages = extract_pages(sample_pdf_bytes, with_previews=False)
        for page in pages:
            assert "\n" not in page.text
            assert "  " not in page.text

    def test_previews_are_png(self, sample_pdf_bytes):
        pages = extract_pages(sample_pdf_bytes)
        assert all(p.preview_png and p.preview_png.startswith(PNG_SIGNATURE) for p in pages)

    def test_without_previews(self, sample_pdf_bytes):
        pages = extract_pages(sample_pdf_bytes, with_previews=False)
        assert all(p.preview_png is None for p in pages)

    def test_preview_failure_is_not_fatal(self, sample_pdf_bytes, monkeypatch):
        def boom(data, scale=1.0):
            raise RuntimeError("renderer unavailable")

        monkeypatch.setattr(pdf_reader, "render_previews", boom)
        pages = extract_pages(sample_pdf_bytes)
        assert len(pages) == 3
        assert all(p.preview_png is None for p in pages)

    def test_blank_page_kept_with_empty_text(self, make_pdf):
        pages = extract_pages(make_pdf(["First page has plenty of readable text.", ""]), with_previews=False)
        assert len(pages) == 2
        assert pages[1].text == ""

    def test_garbage_bytes_raise_extraction_error(self):
        with pytest.raises(ExtractionError, match="PDF를 읽을 수 없습니다"):
            extract_pages(b"this is not a pdf", with_previews=False)


class TestReadPdf:

    def test_reads_file(self, sample_pdf_file):
        pages = read_pdf(str(sample_pdf_file))
        assert len(pages) == 3

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_pdf(str(tmp_path / "missing.pdf"))

    def test_directory_rejected(self, tmp_path):
        with pytest.raises(ValueError, match="not a file"):
            read_pdf(str(tmp_path))


# ===================================================================
# Helpers
# ===================================================================

class TestGarbledDetection:

    def test_clean_text(self):
        assert not _is_garbled("광합성은 빛에너지를 이용한다.")

    def test_cid_placeholders(self):
        assert _is_garbled("(cid:123)(cid:456)(cid:789) ab")

    def test_replacement_chars(self):
        assert _is_garbled("����ab")

    def test_empty(self):
        assert not _is_garbled("")

    def test_normalize(self):
        assert _normalize("  a \n\n b\tc ") == "a b c"

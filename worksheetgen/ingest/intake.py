"""Upload validation.

Only the declared MIME type is consulted, the same check a browser file
input performs; the filename extension is informational.
"""
import logging

from ..errors import UnsupportedFileError

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"


def validate_pdf_upload(filename: str, mime_type: str) -> None:
    """Raise :class:`UnsupportedFileError` unless *mime_type* is a PDF.

    Parameters
    ----------
    filename : str
        Original file name (used for logging only).
    mime_type : str
        MIME type reported by the uploader, e.g. ``"application/pdf"``.
        Parameters such as ``; charset=binary`` are ignored.
    """
    normalized = (mime_type or "").split(";", 1)[0].strip().lower()
    if normalized != PDF_MIME_TYPE:
        logger.info("Rejected upload %s (type=%r)", filename, mime_type)
        raise UnsupportedFileError(filename, mime_type)

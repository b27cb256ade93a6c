"""Logging setup shared by the CLI and the Streamlit app."""
import logging

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Third-party loggers that are noisy at INFO
_QUIET = ("httpx", "httpcore", "openai", "pdfminer", "PIL")


def configure_logging(level: str = "INFO") -> None:
    level_no = logging.getLevelName(level.upper()) if isinstance(level, str) else level
    if not isinstance(level_no, int):
        level_no = logging.INFO
    logging.basicConfig(level=level_no, format=LOG_FORMAT, force=True)
    for name in _QUIET:
        logging.getLogger(name).setLevel(max(level_no, logging.WARNING))

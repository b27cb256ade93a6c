"""CLI interface for the worksheet generator."""
import json
import logging
from pathlib import Path
from typing import List, Optional

import typer

from ..config.log_config import configure_logging
from ..config.models import Worksheet
from ..config.settings import AppSettings, load_settings
from ..errors import InputValidationError
from ..ingest.base import extraction_summary
from ..ingest.intake import PDF_MIME_TYPE
from ..providers.base import LLMError
from ..providers.registry import create_provider
from ..render.dispatcher import RenderedDocument, render_worksheet
from ..session.controller import WorksheetSession

app = typer.Typer(help="Worksheet Generator - build worksheets and teacher guides from PDF material")
logger = logging.getLogger(__name__)


def parse_page_ranges(selection: str) -> List[int]:
    """Parse ``"1,3-5"`` into ``[1, 3, 4, 5]`` (sorted, de-duplicated)."""
    pages = set()
    for part in selection.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            start_s, end_s = part.split("-", 1)
            start, end = int(start_s), int(end_s)
            if start > end:
                raise ValueError(f"Invalid page range: {part}")
            pages.update(range(start, end + 1))
        else:
            pages.add(int(part))
    if not pages or min(pages) < 1:
        raise ValueError(f"Invalid page selection: {selection!r}")
    return sorted(pages)


def _write_document(document: RenderedDocument, output_dir: str) -> Path:
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)
    path = out / document.filename
    path.write_bytes(document.data)
    return path


def _load_session(input_file: str, *, with_previews: bool = False) -> WorksheetSession:
    path = Path(input_file)
    if not path.is_file():
        raise FileNotFoundError(f"PDF file not found: {input_file}")
    mime_type = PDF_MIME_TYPE if path.suffix.lower() == ".pdf" else "application/octet-stream"
    session = WorksheetSession(with_previews=with_previews)
    session.load_pdf(path.name, mime_type, path.read_bytes())
    return session


def extract(input_file: str, as_json: bool = False) -> None:
    """Print the page summary of a PDF."""
    session = _load_session(input_file)
    if as_json:
        payload = [
            {"page_number": p.page_number, "chars": p.char_count, "text": p.text}
            for p in session.pages
        ]
        typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))
        return

    typer.echo(extraction_summary(session.pages, session.filename))
    for page in session.pages:
        typer.echo(f"  p.{page.page_number:<3} {page.char_count:>6} chars  {page.snippet()}")


def generate(
    input_file: str,
    output_format: Optional[str] = None,
    model: Optional[str] = None,
    temperature: Optional[float] = None,
    pages: Optional[str] = None,
    request: Optional[str] = None,
    system_prompt_file: Optional[str] = None,
    config: Optional[str] = None,
    output_dir: str = "output",
    save_json: bool = False,
) -> Path:
    """Generate a worksheet document from a PDF."""
    settings: AppSettings = load_settings(config).merged({
        "output_format": output_format,
        "model": model,
        "temperature": temperature,
        "user_request": request,
        "system_prompt_file": system_prompt_file,
    })
    gen_settings = settings.generation_settings()

    session = _load_session(input_file)
    if pages:
        session.select_only(parse_page_ranges(pages))
    logger.info(
        "Selected pages: %s", ", ".join(str(p.page_number) for p in session.selected_pages) or "-"
    )

    provider = create_provider(
        api_key=settings.api_key or None,
        base_url=settings.base_url,
        timeout=settings.request_timeout,
    )
    document = session.generate(gen_settings, provider)
    path = _write_document(document, output_dir)
    typer.echo(f"Saved: {path}")

    if save_json and session.last_worksheet is not None:
        json_path = path.with_suffix(".json")
        json_path.write_text(
            session.last_worksheet.model_dump_json(indent=2, exclude_none=True),
            encoding="utf-8",
        )
        typer.echo(f"Saved: {json_path}")
    return path


def render(input_file: str, output_format: str = "docx", output_dir: str = "output") -> Path:
    """Render a saved worksheet JSON file without calling the API."""
    with open(input_file, encoding="utf-8") as f:
        worksheet = Worksheet.model_validate(json.load(f))
    document = render_worksheet(worksheet, output_format)
    path = _write_document(document, output_dir)
    typer.echo(f"Saved: {path}")
    return path


def _fail(exc: Exception) -> None:
    typer.echo(f"Error: {exc}", err=True)
    raise typer.Exit(code=1)


@app.callback()
def _main_options(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level (default: $LOG_LEVEL or INFO)"),
):
    configure_logging(log_level or AppSettings.from_env().log_level)


@app.command("extract")
def extract_cmd(
    input_file: str = typer.Argument(..., help="Path to PDF"),
    as_json: bool = typer.Option(False, "--json", help="Print pages as JSON"),
):
    """Show per-page extraction results."""
    try:
        extract(input_file, as_json)
    except (InputValidationError, FileNotFoundError, RuntimeError) as exc:
        _fail(exc)


@app.command("generate")
def generate_cmd(
    input_file: str = typer.Argument(..., help="Path to PDF"),
    output_format: Optional[str] = typer.Option(None, "--format", help="docx / pdf / html"),
    model: Optional[str] = typer.Option(None, help="Model id"),
    temperature: Optional[float] = typer.Option(None, min=0.0, max=1.0, help="Sampling temperature 0.0-1.0"),
    pages: Optional[str] = typer.Option(None, help="Pages to include, e.g. 1,3-5 (default: all)"),
    request: Optional[str] = typer.Option(None, help="Additional requirements for the worksheet"),
    system_prompt_file: Optional[str] = typer.Option(None, help="Replace the default system prompt"),
    config: Optional[str] = typer.Option(None, help="Path to settings YAML/JSON"),
    output_dir: str = typer.Option("output", "--out", help="Output directory"),
    save_json: bool = typer.Option(False, "--save-json", help="Also save the worksheet JSON"),
):
    """Generate a worksheet from a PDF."""
    try:
        generate(
            input_file, output_format, model, temperature, pages, request,
            system_prompt_file, config, output_dir, save_json,
        )
    except (InputValidationError, LLMError, FileNotFoundError, RuntimeError, ValueError, KeyError) as exc:
        _fail(exc)


@app.command("render")
def render_cmd(
    input_file: str = typer.Argument(..., help="Path to worksheet JSON"),
    output_format: str = typer.Option("docx", "--format", help="docx / pdf / html"),
    output_dir: str = typer.Option("output", "--out", help="Output directory"),
):
    """Render a worksheet JSON file to a document."""
    try:
        render(input_file, output_format, output_dir)
    except (ValueError, FileNotFoundError) as exc:
        _fail(exc)


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()

"""
interleave-pdf: rebuild a double-sided document from two single-sided scans.

Scan all fronts in one pass (odd.pdf), flip the stack, scan all backs
(even.pdf), then:

  interleave-pdf merge odd.pdf even.pdf book.pdf --reverse-even

Env (used when the matching argument/flag is omitted):
  INTERLEAVE_ODD_PDF, INTERLEAVE_EVEN_PDF, INTERLEAVE_OUTPUT_PDF,
  INTERLEAVE_REVERSE_EVEN
"""
from __future__ import annotations

import logging
import sys

import structlog
import typer

from .config import MergeConfig
from .deps import ensure_codec
from .errors import InterleaveError, OutputPathError

app = typer.Typer(add_completion=False, no_args_is_help=True)
log = structlog.get_logger("interleave_pdf")

# ---------- logging setup ----------

def configure_logging(verbosity: int) -> None:
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG if verbosity > 0 else logging.INFO),
        # stdout is reserved for the result line / dry-run plan
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def _confirm(assume_yes: bool):
    if assume_yes:
        return lambda prompt: True
    return lambda prompt: typer.confirm(prompt, default=False)


def _fail(e: Exception, code: int = 1, event: str = "merge_failed") -> typer.Exit:
    log.error(event, error=str(e), kind=type(e).__name__)
    typer.echo(f"ERROR: {e}", err=True)
    return typer.Exit(code)

# ---------- CLI ----------

@app.command()
def merge(
    odd_pdf: str = typer.Argument(..., envvar="INTERLEAVE_ODD_PDF", help="PDF with the odd pages (fronts)"),
    even_pdf: str = typer.Argument(..., envvar="INTERLEAVE_EVEN_PDF", help="PDF with the even pages (backs)"),
    output_pdf: str = typer.Argument(..., envvar="INTERLEAVE_OUTPUT_PDF", help="Where to write the merged PDF"),
    reverse_even: bool = typer.Option(
        False, "--reverse-even", envvar="INTERLEAVE_REVERSE_EVEN",
        help="Even pages were scanned back to front (flipped stack)",
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the page order; write nothing"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Install missing dependencies without asking"),
    verbose: int = typer.Option(0, "-v", count=True, help="-v for debug logs"),
):
    """Interleave ODD_PDF and EVEN_PDF into OUTPUT_PDF."""
    configure_logging(verbose)
    config = MergeConfig.from_strings(odd_pdf, even_pdf, output_pdf, reverse_even)

    try:
        ensure_codec(_confirm(yes))
        # PyPDF2 may only just have been installed.
        from . import pdf

        if dry_run:
            for step in pdf.plan_pdfs(config):
                typer.echo(str(step))
            return
        result = pdf.merge_pdfs(config)
    except OutputPathError as e:
        raise _fail(e, code=2)
    except InterleaveError as e:
        raise _fail(e)

    typer.echo(f"Wrote {result.total_pages} pages to {result.output_pdf}")


@app.command()
def deps(
    yes: bool = typer.Option(False, "--yes", "-y", help="Install without asking"),
    verbose: int = typer.Option(0, "-v", count=True, help="-v for debug logs"),
):
    """Check that the PDF library is installed, installing it from PyPI if needed."""
    configure_logging(verbose)
    try:
        ensure_codec(_confirm(yes))
    except InterleaveError as e:
        raise _fail(e, event="deps_failed")
    typer.echo("PyPDF2 is available.")


if __name__ == "__main__":
    app()

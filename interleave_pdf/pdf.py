"""PyPDF2-backed page sources and sinks, and the file-level merge."""
from __future__ import annotations

import dataclasses as dc
import os
import stat
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator, Optional

import PyPDF2
import structlog

from .config import MergeConfig, check_inputs
from .core import PageSource, PlanStep, interleave, merge_plan
from .errors import CodecOpenError, IOWriteError

log = structlog.get_logger("interleave_pdf")


class PdfPageSource:
    def __init__(self, path: Path, fh: BinaryIO, reader: PyPDF2.PdfReader):
        self.path = path
        self.fh = fh
        self.reader = reader
        self._count = len(reader.pages)

    @property
    def page_count(self) -> int:
        return self._count

    def get_page(self, position: int) -> PyPDF2.PageObject:
        if not 1 <= position <= self._count:
            raise IndexError(f"page {position} out of range 1..{self._count} in {self.path}")
        return self.reader.pages[position - 1]


class PdfPageSink:
    """
    Collects pages in a PdfWriter and commits them on close().

    The document is written to a temporary file next to ``path`` and renamed
    into place, so a failed run never leaves a truncated output behind.
    """

    def __init__(self, path: Path):
        self.path = path
        self.writer = PyPDF2.PdfWriter()
        self.closed = False

    def append(self, source: PageSource, position: int) -> None:
        if self.closed:
            raise ValueError(f"sink for {self.path} is already closed")
        # Page objects are resolved lazily, so a broken page tree can surface here.
        try:
            self.writer.add_page(source.get_page(position))
        except (CodecOpenError, IndexError):
            raise
        except Exception as e:
            raise CodecOpenError(f"cannot copy page {position} of {getattr(source, 'path', 'input')}: {e}") from e

    def _output_mode(self) -> int:
        try:
            return stat.S_IMODE(os.stat(self.path).st_mode)
        except FileNotFoundError:
            umask = os.umask(0)
            os.umask(umask)
            return 0o666 & ~umask

    @property
    def page_count(self) -> int:
        return len(self.writer.pages)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        tmp_name: Optional[str] = None
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent)
            os.chmod(tmp_name, self._output_mode())
            with os.fdopen(fd, "wb") as out:
                self.writer.write(out)
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as e:
            raise IOWriteError(f"cannot write {self.path}: {e}") from e
        except Exception as e:
            raise CodecOpenError(f"cannot serialize {self.path}: {e}") from e
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)


@contextmanager
def open_read(path: Path) -> Iterator[PdfPageSource]:
    try:
        fh = open(path, "rb")
    except OSError as e:
        raise CodecOpenError(f"cannot open {path}: {e}") from e

    with fh:
        try:
            reader = PyPDF2.PdfReader(fh)
            if reader.is_encrypted:
                raise CodecOpenError(f"{path} is encrypted; password-protected PDFs are not supported")
            source = PdfPageSource(path, fh, reader)
        except CodecOpenError:
            raise
        except Exception as e:
            # Malformed page trees raise TypeError, RecursionError and friends, not just PyPdfError.
            raise CodecOpenError(f"cannot read {path} as PDF: {e}") from e
        yield source


@contextmanager
def open_write(path: Path) -> Iterator[PdfPageSink]:
    # Nothing is written unless the body finishes without raising.
    sink = PdfPageSink(path)
    yield sink
    sink.close()


@dc.dataclass
class MergeResult:
    output_pdf: Path
    odd_pages: int
    even_pages: int
    total_pages: int


def merge_pdfs(config: MergeConfig) -> MergeResult:
    """
    Interleave ``config.odd_pdf`` and ``config.even_pdf`` into ``config.output_pdf``.

    Raises:
        MissingInputError: an input path is not an existing file (nothing is opened)
        CodecOpenError: an input exists but PyPDF2 cannot read it
        IOWriteError: the output cannot be written
    """
    check_inputs(config)
    log.info(
        "merge_start",
        odd=str(config.odd_pdf),
        even=str(config.even_pdf),
        output=str(config.output_pdf),
        reverse_even=config.reverse_even,
    )

    with open_read(config.odd_pdf) as odd, open_read(config.even_pdf) as even:
        log.info("sources_opened", odd_pages=odd.page_count, even_pages=even.page_count)
        with open_write(config.output_pdf) as sink:
            total = interleave(odd, even, sink, reverse_even=config.reverse_even)
        odd_pages, even_pages = odd.page_count, even.page_count

    log.info("output_written", output=str(config.output_pdf), pages=total)
    return MergeResult(config.output_pdf, odd_pages, even_pages, total)


def plan_pdfs(config: MergeConfig) -> list[PlanStep]:
    """Open both inputs and return the page order a merge would produce, without writing."""
    check_inputs(config)
    with open_read(config.odd_pdf) as odd, open_read(config.even_pdf) as even:
        return list(merge_plan(odd.page_count, even.page_count, config.reverse_even))

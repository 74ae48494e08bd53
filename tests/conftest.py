from pathlib import Path

import pytest
import structlog
from PyPDF2 import PdfReader, PdfWriter


def make_pdf(path: Path, widths: list[int], height: int = 100) -> Path:
    """Write a PDF of blank pages; each page is identified by its width."""
    writer = PdfWriter()
    for w in widths:
        writer.add_blank_page(width=w, height=height)
    with open(path, "wb") as f:
        writer.write(f)
    return path


def page_widths(path: Path) -> list[int]:
    reader = PdfReader(str(path))
    return [round(float(p.mediabox.width)) for p in reader.pages]


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()


@pytest.fixture
def scans(tmp_path):
    """Five fronts (widths 101..105) and three backs (widths 202, 204, 206)."""
    odd = make_pdf(tmp_path / "odd.pdf", [101, 102, 103, 104, 105])
    even = make_pdf(tmp_path / "even.pdf", [202, 204, 206])
    return odd, even


def raw_pdf(path: Path, objects: list[bytes]) -> Path:
    """Write a PDF from raw object bodies (object 1 is the catalog) with a correct xref table."""
    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for n, body in enumerate(objects, 1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % n + body + b"\nendobj\n"
    xref = len(out)
    out += b"xref\n0 %d\n0000000000 65535 f \n" % (len(objects) + 1)
    for off in offsets:
        out += b"%010d 00000 n \n" % off
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (len(objects) + 1, xref)
    path.write_bytes(bytes(out))
    return path


CATALOG = b"<< /Type /Catalog /Pages 2 0 R >>"

BROKEN_PAGE_TREES = {
    "kid_is_a_number": [CATALOG, b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>", b"42"],
    "kid_is_missing": [CATALOG, b"<< /Type /Pages /Kids [4 0 R] /Count 1 >>", b"null"],
    "kids_not_an_array": [CATALOG, b"<< /Type /Pages /Kids 5 /Count 3 >>"],
}

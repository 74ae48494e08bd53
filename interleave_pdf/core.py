"""
Page interleaving for two-pass duplex scans.

A scanner without a duplex feeder produces two files: the fronts (odd pages
1, 3, 5...) and, after flipping the stack, the backs (even pages 2, 4, 6...).
The backs usually come out last-page-first, which is what ``reverse_even``
undoes.

Nothing here knows about PDF files. Sources and sinks are small protocols so
the ordering logic can be driven by the PyPDF2 adapter in ``pdf.py`` or by
plain lists in tests.
"""
from __future__ import annotations

from typing import Any, Iterator, Literal, NamedTuple, Protocol

import structlog

log = structlog.get_logger("interleave_pdf")

Side = Literal["odd", "even"]


class PageSource(Protocol):
    @property
    def page_count(self) -> int: ...

    def get_page(self, position: int) -> Any: ...


class PageSink(Protocol):
    def append(self, source: PageSource, position: int) -> None: ...

    def close(self) -> None: ...


class PlanStep(NamedTuple):
    side: Side
    position: int  # 1-based, within its own source

    def __str__(self) -> str:
        return f"{self.side}:{self.position}"


def merge_plan(count_odd: int, count_even: int, reverse_even: bool = False) -> Iterator[PlanStep]:
    """
    Yield the pages to emit, in output order.

    Step i (1-based) emits odd page i if the odd source still has one, then
    the matching even page: i, or count_even - i + 1 when reversing. The
    shorter source simply stops contributing once it runs out.
    """
    if count_odd < 0 or count_even < 0:
        raise ValueError(f"page counts must be >= 0, got odd={count_odd} even={count_even}")

    for i in range(1, max(count_odd, count_even) + 1):
        if i <= count_odd:
            yield PlanStep("odd", i)
        if i <= count_even:
            # Only reached while i <= count_even, so the reversed index stays in [1, count_even].
            yield PlanStep("even", count_even - i + 1 if reverse_even else i)


def interleave(odd: PageSource, even: PageSource, sink: PageSink, reverse_even: bool = False) -> int:
    """
    Append every page of ``odd`` and ``even`` to ``sink`` in duplex order.

    Returns the number of pages appended, which is always
    ``odd.page_count + even.page_count``. The sink is not closed here; whoever
    opened it owns finalizing it.
    """
    count_odd, count_even = odd.page_count, even.page_count
    sources = {"odd": odd, "even": even}

    appended = 0
    for step in merge_plan(count_odd, count_even, reverse_even):
        sink.append(sources[step.side], step.position)
        appended += 1
        log.debug("page_appended", side=step.side, position=step.position, output_page=appended)

    return appended

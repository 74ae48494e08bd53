from __future__ import annotations

import dataclasses as dc
import os
from pathlib import Path

from .errors import MissingInputError, OutputPathError

QUOTES = "\"'"


def strip_quotes(value: str) -> str:
    """Drop whitespace and one pair of matching quotes, e.g. from a pasted path."""
    s = value.strip()
    if len(s) >= 2 and s[0] == s[-1] and s[0] in QUOTES:
        s = s[1:-1].strip()
    return s


@dc.dataclass(frozen=True)
class MergeConfig:
    odd_pdf: Path
    even_pdf: Path
    output_pdf: Path
    reverse_even: bool = False

    @classmethod
    def from_strings(cls, odd_pdf: str, even_pdf: str, output_pdf: str, reverse_even: bool = False) -> MergeConfig:
        return cls(
            odd_pdf=Path(strip_quotes(odd_pdf)),
            even_pdf=Path(strip_quotes(even_pdf)),
            output_pdf=Path(strip_quotes(output_pdf)),
            reverse_even=reverse_even,
        )


def check_inputs(config: MergeConfig) -> None:
    """Fail before anything is opened if an input is missing or the output would clobber one."""
    for which, path in (("odd", config.odd_pdf), ("even", config.even_pdf)):
        if not path.is_file() or not os.access(path, os.R_OK):
            raise MissingInputError(which, str(path))

    out = config.output_pdf.resolve()
    if out in (config.odd_pdf.resolve(), config.even_pdf.resolve()):
        raise OutputPathError(f"output path must differ from both inputs: {config.output_pdf}")

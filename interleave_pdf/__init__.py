"""Interleave odd and even page scans into one double-sided PDF."""
from __future__ import annotations

from .core import PlanStep, interleave, merge_plan
from .errors import (
    CodecOpenError,
    DependencyUnavailableError,
    InterleaveError,
    IOWriteError,
    MissingInputError,
)

__version__ = "0.1.0"

__all__ = [
    "CodecOpenError",
    "DependencyUnavailableError",
    "IOWriteError",
    "InterleaveError",
    "MissingInputError",
    "PlanStep",
    "interleave",
    "merge_plan",
]

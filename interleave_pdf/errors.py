from __future__ import annotations


class InterleaveError(Exception):
    """Base class for every failure that aborts a run."""


class MissingInputError(InterleaveError):
    def __init__(self, which: str, path: str):
        self.which = which
        self.path = path
        super().__init__(f"{which} PDF not found or not readable: {path}")


class CodecOpenError(InterleaveError):
    """The PDF library could not open a file that exists."""


class IOWriteError(InterleaveError):
    """The output file could not be created or written."""


class DependencyUnavailableError(InterleaveError):
    """The PDF library is missing and was not installed."""


class OutputPathError(ValueError):
    """The output path would overwrite one of the inputs."""

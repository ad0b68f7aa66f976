"""Exception types raised by h5stack."""

from __future__ import annotations

from pathlib import Path


class H5StackError(Exception):
    """Base class for all h5stack errors."""


class InvalidShapeError(H5StackError, ValueError):
    """The volume lacks a row (Y) or column (X) axis."""


class UnsupportedPixelTypeError(H5StackError, TypeError):
    """The volume's element type has no on-disk representation."""


class ExportError(H5StackError, RuntimeError):
    """A storage operation failed while writing the dataset.

    The underlying exception is chained as ``__cause__``.
    """

    def __init__(self, message: str, operation: str, path: str | Path) -> None:
        super().__init__(message)
        self.operation = operation
        self.path = Path(path)

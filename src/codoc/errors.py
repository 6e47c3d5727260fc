"""Domain-specific errors for codoc."""

from __future__ import annotations


class CodocError(Exception):
    """Base error for codoc.

    `location` names the package location being processed, when known.
    """

    def __init__(self, message: str, *, location: str | None = None) -> None:
        super().__init__(message)
        self.location = location


class ExtractError(CodocError):
    """Raised when documentation cannot be extracted from a location."""


class ResolutionError(ExtractError):
    """Raised when a location yields zero or more than one package."""


class ParseError(ExtractError):
    """Raised when the source of a package is malformed."""


class ScannerError(CodocError):
    """Raised when the Go toolchain or the embedded scanner cannot be run."""


class LoadError(CodocError):
    """Raised when an artifact payload cannot be decoded."""

"""Exception types raised by the stylesheet pipeline."""

from __future__ import annotations


class StylepressError(ValueError):
    """Base class for errors surfaced to Stylepress callers."""


class CompilationError(StylepressError):
    """Raised when a stylesheet cannot be compiled.

    Failures coming from a compiler backend are chained as ``__cause__``.
    """


class ImportDepthError(CompilationError):
    """Raised when nested CSS ``@import`` inlining exceeds the depth bound."""


class PathEscapeError(CompilationError):
    """Raised when a ``url()`` reference resolves above the webroot."""

    def __init__(self, message: str, *, path: str, url: str) -> None:
        super().__init__(message)
        self.path = path
        self.url = url


class RequestError(StylepressError):
    """Raised when requested files or options are invalid."""

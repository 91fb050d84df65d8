"""Stylepress package initialization."""

from __future__ import annotations

from .api import (
    StylepressClient,
    check_stylesheet_cache,
    clear_cache,
    compile_stylesheets,
    config_context,
)
from .errors import (
    CompilationError,
    ImportDepthError,
    PathEscapeError,
    RequestError,
    StylepressError,
)

__all__ = [
    "__version__",
    "CompilationError",
    "ImportDepthError",
    "PathEscapeError",
    "RequestError",
    "StylepressClient",
    "StylepressError",
    "check_stylesheet_cache",
    "clear_cache",
    "compile_stylesheets",
    "config_context",
    "get_version",
]

__version__ = "0.4.0"


def get_version() -> str:
    """Return the current package version."""
    return __version__

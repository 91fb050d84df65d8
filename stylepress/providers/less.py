"""lesscpy-backed LESS compiler backend for Stylepress."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import lesscpy

from .imports import collect_dependencies, resolve_less_import


@dataclass(frozen=True, slots=True)
class LessResult:
    compiled_text: str
    dependency_paths: tuple[Path, ...]


class LessCompilerBackend:
    """Compile LESS files and report every file that took part."""

    def __init__(self, *, minify: bool = False) -> None:
        self.minify = minify

    def compile(self, path: Path) -> LessResult:
        source = Path(path).resolve()
        # A file handle lets lesscpy resolve imports against the source directory.
        with source.open(encoding="utf-8") as handle:
            compiled = lesscpy.compile(handle, minify=self.minify)
        text = source.read_text(encoding="utf-8")
        imported = collect_dependencies(
            text,
            search_dirs=[source.parent],
            resolve=resolve_less_import,
        )
        return LessResult(
            compiled_text=compiled,
            dependency_paths=(source, *imported),
        )

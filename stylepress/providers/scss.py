"""libsass-backed SCSS compiler backend for Stylepress."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import sass

from .imports import collect_dependencies, resolve_scss_import

DEFAULT_OUTPUT_STYLE = "nested"


class ScssCompilerBackend:
    """Compile SCSS source text against a list of import paths.

    Files pulled in by the last compilation are available from
    ``parsed_files``.
    """

    def __init__(self, *, output_style: str = DEFAULT_OUTPUT_STYLE) -> None:
        self.output_style = output_style
        self._import_paths: list[Path] = []
        self._parsed_files: list[Path] = []

    def add_import_path(self, path: Path | str) -> None:
        resolved = Path(path).resolve()
        if resolved not in self._import_paths:
            self._import_paths.append(resolved)

    def compile(self, text: str, import_paths: Sequence[Path | str] = ()) -> str:
        for path in import_paths:
            self.add_import_path(path)
        self._parsed_files = []
        compiled = sass.compile(
            string=text,
            include_paths=[str(path) for path in self._import_paths],
            output_style=self.output_style,
        )
        self._parsed_files = collect_dependencies(
            text,
            search_dirs=self._import_paths,
            resolve=resolve_scss_import,
        )
        return compiled

    @property
    def parsed_files(self) -> list[Path]:
        return list(self._parsed_files)

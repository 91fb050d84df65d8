"""Stylesheet dialect registry and compiler strategies."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Protocol, Sequence

from .config import DEFAULT_MAX_IMPORT_DEPTH, CompileOptions
from .errors import CompilationError
from .services.import_service import inline_imports, read_stylesheet
from .text import Messages

LESS_EXTENSION = ".less"
SCSS_EXTENSION = ".scss"
CSS_EXTENSION = ".css"


class LessOutput(Protocol):
    compiled_text: str
    dependency_paths: Sequence[Path]


class LessBackend(Protocol):
    def compile(self, path: Path) -> LessOutput:
        raise NotImplementedError


class ScssBackend(Protocol):
    parsed_files: Sequence[Path]

    def compile(self, text: str, import_paths: Sequence[Path | str] = ()) -> str:
        raise NotImplementedError


def _default_less_backend() -> LessBackend:
    from .providers.less import LessCompilerBackend  # local import avoids eager heavy deps

    return LessCompilerBackend()


def _default_scss_backend() -> ScssBackend:
    from .providers.scss import ScssCompilerBackend  # local import avoids eager heavy deps

    return ScssCompilerBackend()


@dataclass(frozen=True, slots=True)
class CompilerBackends:
    """Factories producing a fresh compiler backend per compilation."""

    less: Callable[[], LessBackend] = field(default=_default_less_backend)
    scss: Callable[[], ScssBackend] = field(default=_default_scss_backend)


@dataclass(slots=True)
class DialectOutput:
    compiled_text: str
    # None means the output is plain text whose validity only follows the source.
    dependency_paths: tuple[Path, ...] | None = None


class DialectStrategy(Protocol):
    name: str

    def compile(
        self,
        source: Path,
        backends: CompilerBackends,
        *,
        max_import_depth: int = DEFAULT_MAX_IMPORT_DEPTH,
    ) -> DialectOutput:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class LessStrategy(DialectStrategy):
    name: str = "less"

    def compile(
        self,
        source: Path,
        backends: CompilerBackends,
        *,
        max_import_depth: int = DEFAULT_MAX_IMPORT_DEPTH,
    ) -> DialectOutput:
        backend = backends.less()
        try:
            result = backend.compile(source)
        except Exception as exc:
            raise CompilationError(
                Messages.ERROR_LESS_COMPILER.format(path=source, reason=exc)
            ) from exc
        paths = _union_paths([source], result.dependency_paths)
        return DialectOutput(compiled_text=result.compiled_text, dependency_paths=paths)


@dataclass(frozen=True, slots=True)
class ScssStrategy(DialectStrategy):
    name: str = "scss"

    def compile(
        self,
        source: Path,
        backends: CompilerBackends,
        *,
        max_import_depth: int = DEFAULT_MAX_IMPORT_DEPTH,
    ) -> DialectOutput:
        text = read_stylesheet(source)
        backend = backends.scss()
        try:
            compiled = backend.compile(text, [source.parent])
            parsed = list(backend.parsed_files)
        except Exception as exc:
            raise CompilationError(
                Messages.ERROR_SCSS_COMPILER.format(path=source, reason=exc)
            ) from exc
        paths = _union_paths([source], parsed)
        return DialectOutput(compiled_text=compiled, dependency_paths=paths)


@dataclass(frozen=True, slots=True)
class CssStrategy(DialectStrategy):
    name: str = "css"

    def compile(
        self,
        source: Path,
        backends: CompilerBackends,
        *,
        max_import_depth: int = DEFAULT_MAX_IMPORT_DEPTH,
    ) -> DialectOutput:
        text = read_stylesheet(source)
        return DialectOutput(
            compiled_text=inline_imports(text, source, max_depth=max_import_depth)
        )


_STRATEGIES: Dict[str, DialectStrategy] = {
    "less": LessStrategy(),
    "scss": ScssStrategy(),
    "css": CssStrategy(),
}


def get_strategy(dialect: str) -> DialectStrategy:
    try:
        return _STRATEGIES[dialect]
    except KeyError as exc:
        raise ValueError(f"Unsupported dialect: {dialect}") from exc


def available_dialects() -> list[str]:
    return sorted(_STRATEGIES.keys())


def is_less(path: Path, options: CompileOptions) -> bool:
    return Path(path).suffix.lower() == LESS_EXTENSION or options.lessify_all_css


def is_scss(path: Path, options: CompileOptions) -> bool:
    return Path(path).suffix.lower() == SCSS_EXTENSION or options.scssify_all_css


def select_dialect(path: Path, options: CompileOptions) -> str:
    """Return the dialect name used to compile ``path``.

    LESS wins over SCSS, so a ``.less`` file never goes through SCSS even when
    every stylesheet is forced through SCSS.
    """

    if is_less(path, options):
        return "less"
    if is_scss(path, options):
        return "scss"
    return "css"


def _union_paths(first: Sequence[Path], rest: Sequence[Path]) -> tuple[Path, ...]:
    merged: list[Path] = []
    for raw in (*first, *rest):
        path = Path(raw)
        if path not in merged:
            merged.append(path)
    return tuple(merged)

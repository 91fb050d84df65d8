"""Compile a single stylesheet and persist the result to the cache."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from .url_service import rewrite_urls
from ..cache import CacheEnvelope, stamp_dependencies, write_envelope
from ..config import DEFAULT_MAX_IMPORT_DEPTH, CompileOptions
from ..dialects import CompilerBackends, get_strategy, select_dialect

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CompileSettings:
    webroot: Path
    sub_folder: str = ""
    max_import_depth: int = DEFAULT_MAX_IMPORT_DEPTH


def compile_source(
    source_path: Path,
    cache_path: Path,
    *,
    options: CompileOptions,
    settings: CompileSettings,
    backends: CompilerBackends | None = None,
) -> CacheEnvelope:
    """Compile ``source_path``, rewrite its url() references and store the build.

    LESS and SCSS builds are stored as structured envelopes stamped with every
    file the compiler read. Plain CSS is stored as raw text.
    """

    source = Path(source_path).resolve()
    dialect = select_dialect(source, options)
    logger.debug("Compiling %s as %s", source, dialect)
    output = get_strategy(dialect).compile(
        source,
        backends or CompilerBackends(),
        max_import_depth=settings.max_import_depth,
    )
    text = rewrite_urls(
        output.compiled_text,
        source,
        webroot=settings.webroot,
        sub_folder=settings.sub_folder,
    )
    if output.dependency_paths is None:
        envelope = CacheEnvelope.raw(text)
    else:
        existing = [path for path in output.dependency_paths if Path(path).is_file()]
        envelope = CacheEnvelope.structured(text, stamp_dependencies(existing))
    write_envelope(cache_path, envelope)
    logger.debug(
        "Stored %s build of %s with %d dependencies",
        envelope.kind.value,
        source,
        len(envelope.dependencies),
    )
    return envelope

"""Serve one or more stylesheets from the build cache, compiling on a miss."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from .compile_service import CompileSettings, compile_source
from ..cache import cache_path_for, check_cache, servable_content
from ..config import CompileOptions
from ..dialects import CompilerBackends, select_dialect
from ..errors import RequestError
from ..text import Messages

logger = logging.getLogger(__name__)

CSS_CONTENT_TYPE = "text/css"


@dataclass(slots=True)
class StylesheetEntry:
    path: Path
    dialect: str
    cache_path: Path
    cache_hit: bool


@dataclass(slots=True)
class StylesheetResponse:
    body: str
    entries: list[StylesheetEntry] = field(default_factory=list)
    content_type: str = CSS_CONTENT_TYPE

    @property
    def headers(self) -> dict[str, str]:
        return {"Content-Type": self.content_type}


class CachePipeline:
    """Resolve each requested stylesheet through the cache and join the results."""

    def __init__(
        self,
        settings: CompileSettings,
        options: CompileOptions | None = None,
        *,
        backends: CompilerBackends | None = None,
    ) -> None:
        self.settings = settings
        self.options = options or CompileOptions()
        self.backends = backends or CompilerBackends()

    def cache_path(self, source: Path) -> Path:
        return cache_path_for(
            source,
            self.options,
            webroot=self.settings.webroot,
            sub_folder=self.settings.sub_folder,
        )

    def is_fresh(self, source: Path) -> bool:
        source = Path(source).resolve()
        return check_cache(source, self.cache_path(source)) is not None

    def process_file(self, source: Path) -> tuple[str, StylesheetEntry]:
        source = Path(source).resolve()
        cache_path = self.cache_path(source)
        envelope = check_cache(source, cache_path)
        hit = envelope is not None
        if envelope is None:
            envelope = compile_source(
                source,
                cache_path,
                options=self.options,
                settings=self.settings,
                backends=self.backends,
            )
        entry = StylesheetEntry(
            path=source,
            dialect=select_dialect(source, self.options),
            cache_path=cache_path,
            cache_hit=hit,
        )
        return servable_content(envelope), entry

    def process(self, files: Sequence[Path]) -> StylesheetResponse:
        if not files:
            raise RequestError(Messages.ERROR_NO_FILES)
        parts: list[str] = []
        entries: list[StylesheetEntry] = []
        for file in files:
            content, entry = self.process_file(file)
            parts.append(content)
            entries.append(entry)
        hits = sum(1 for entry in entries if entry.cache_hit)
        logger.info(
            "Served %d stylesheet(s), %d from cache", len(entries), hits
        )
        return StylesheetResponse(body="\n".join(parts), entries=entries)

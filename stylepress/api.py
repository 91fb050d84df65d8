"""Public Python API for Stylepress."""

from __future__ import annotations

from dataclasses import dataclass
from contextlib import ExitStack, contextmanager
from pathlib import Path
from collections.abc import Mapping
from typing import Iterator, Sequence

from .cache import cache_dir_context, clear_all_cache
from .config import (
    CompileOptions,
    Config,
    config_dir_context,
    config_from_json,
    load_config,
    resolve_sub_folder,
    resolve_webroot,
)
from .dialects import CompilerBackends
from .errors import StylepressError
from .services.compile_service import CompileSettings
from .services.pipeline_service import CachePipeline, StylesheetResponse
from .services.request_service import parse_request_options, resolve_request_files


@dataclass(frozen=True, slots=True)
class RuntimeSettings:
    webroot: Path
    sub_folder: str
    cache_dir: str | None
    max_import_depth: int
    options: CompileOptions

    def compile_settings(self) -> CompileSettings:
        return CompileSettings(
            webroot=self.webroot,
            sub_folder=self.sub_folder,
            max_import_depth=self.max_import_depth,
        )


class StylepressClient:
    """Session-style API wrapper for library use."""

    def __init__(
        self,
        *,
        config_dir: Path | str | None = None,
        cache_dir: Path | str | None = None,
        use_config: bool = True,
        backends: CompilerBackends | None = None,
    ) -> None:
        self.config_dir = config_dir
        self.cache_dir = cache_dir
        self.use_config = use_config
        self.backends = backends
        self._runtime_config: Config | None = None

    def set_config_json(
        self,
        payload: Mapping[str, object] | str | None,
        *,
        replace: bool = False,
    ) -> None:
        """Set in-memory config for this client from a JSON string or mapping."""
        if payload is None:
            self._runtime_config = None
            return
        with config_dir_context(self.config_dir):
            base = None if replace else (self._runtime_config or self._load_config())
        try:
            self._runtime_config = config_from_json(payload, base=base)
        except ValueError as exc:
            raise StylepressError(str(exc)) from exc

    @contextmanager
    def config_context(
        self,
        payload: Mapping[str, object] | str | None,
        *,
        replace: bool = False,
    ):
        """Temporarily override this client's in-memory config."""
        previous = self._runtime_config
        self.set_config_json(payload, replace=replace)
        try:
            yield self
        finally:
            self._runtime_config = previous

    def compile(
        self,
        files: Sequence[Path | str],
        *,
        webroot: Path | str | None = None,
        sub_folder: str | None = None,
        lessify_all_css: bool | None = None,
        scssify_all_css: bool | None = None,
    ) -> StylesheetResponse:
        """Return the concatenated build of ``files`` from the cache or the compilers."""
        with self._scope(
            webroot=webroot,
            sub_folder=sub_folder,
            lessify_all_css=lessify_all_css,
            scssify_all_css=scssify_all_css,
        ) as pipeline:
            return pipeline.process([Path(file) for file in files])

    def serve(
        self,
        files_param: str,
        params: Mapping[str, object] | None = None,
        *,
        webroot: Path | str | None = None,
    ) -> StylesheetResponse:
        """Serve a request carrying a comma separated ``files`` value and options."""
        with self._scope(webroot=webroot) as pipeline:
            files = resolve_request_files(files_param, pipeline.settings.webroot)
            pipeline.options = parse_request_options(params, base=pipeline.options)
            return pipeline.process(files)

    def is_cache_fresh(
        self,
        file: Path | str,
        *,
        webroot: Path | str | None = None,
        sub_folder: str | None = None,
        lessify_all_css: bool | None = None,
        scssify_all_css: bool | None = None,
    ) -> bool:
        with self._scope(
            webroot=webroot,
            sub_folder=sub_folder,
            lessify_all_css=lessify_all_css,
            scssify_all_css=scssify_all_css,
        ) as pipeline:
            return pipeline.is_fresh(Path(file))

    def clear_cache(self) -> int:
        with self._scope() as _pipeline:
            return clear_all_cache()

    def _load_config(self) -> Config:
        return load_config() if self.use_config else Config()

    @contextmanager
    def _scope(
        self,
        *,
        webroot: Path | str | None = None,
        sub_folder: str | None = None,
        lessify_all_css: bool | None = None,
        scssify_all_css: bool | None = None,
    ) -> Iterator[CachePipeline]:
        with ExitStack() as stack:
            stack.enter_context(config_dir_context(self.config_dir))
            config = self._runtime_config or self._load_config()
            settings = _resolve_settings(
                config,
                webroot=webroot,
                sub_folder=sub_folder,
                lessify_all_css=lessify_all_css,
                scssify_all_css=scssify_all_css,
            )
            cache_dir = self.cache_dir if self.cache_dir is not None else settings.cache_dir
            stack.enter_context(cache_dir_context(cache_dir))
            yield CachePipeline(
                settings.compile_settings(),
                settings.options,
                backends=self.backends,
            )


@contextmanager
def config_context(
    payload: Mapping[str, object] | str | None,
    *,
    replace: bool = False,
    config_dir: Path | str | None = None,
    cache_dir: Path | str | None = None,
    use_config: bool = True,
    backends: CompilerBackends | None = None,
):
    """Yield a configured client for scoped API usage."""
    client = StylepressClient(
        config_dir=config_dir,
        cache_dir=cache_dir,
        use_config=use_config,
        backends=backends,
    )
    client.set_config_json(payload, replace=replace)
    try:
        yield client
    finally:
        client.set_config_json(None)


def compile_stylesheets(
    files: Sequence[Path | str],
    *,
    webroot: Path | str | None = None,
    sub_folder: str | None = None,
    lessify_all_css: bool | None = None,
    scssify_all_css: bool | None = None,
    config_dir: Path | str | None = None,
    cache_dir: Path | str | None = None,
    use_config: bool = True,
    backends: CompilerBackends | None = None,
) -> StylesheetResponse:
    """Compile ``files`` into one stylesheet body, reusing cached builds."""
    client = StylepressClient(
        config_dir=config_dir,
        cache_dir=cache_dir,
        use_config=use_config,
        backends=backends,
    )
    return client.compile(
        files,
        webroot=webroot,
        sub_folder=sub_folder,
        lessify_all_css=lessify_all_css,
        scssify_all_css=scssify_all_css,
    )


def check_stylesheet_cache(
    file: Path | str,
    *,
    webroot: Path | str | None = None,
    sub_folder: str | None = None,
    lessify_all_css: bool | None = None,
    scssify_all_css: bool | None = None,
    config_dir: Path | str | None = None,
    cache_dir: Path | str | None = None,
    use_config: bool = True,
) -> bool:
    """Return True when the cached build of ``file`` is still valid."""
    client = StylepressClient(
        config_dir=config_dir,
        cache_dir=cache_dir,
        use_config=use_config,
    )
    return client.is_cache_fresh(
        file,
        webroot=webroot,
        sub_folder=sub_folder,
        lessify_all_css=lessify_all_css,
        scssify_all_css=scssify_all_css,
    )


def clear_cache(
    *,
    config_dir: Path | str | None = None,
    cache_dir: Path | str | None = None,
    use_config: bool = True,
) -> int:
    """Remove every cached build, returning how many were removed."""
    client = StylepressClient(
        config_dir=config_dir,
        cache_dir=cache_dir,
        use_config=use_config,
    )
    return client.clear_cache()


def _resolve_settings(
    config: Config,
    *,
    webroot: Path | str | None,
    sub_folder: str | None,
    lessify_all_css: bool | None,
    scssify_all_css: bool | None,
) -> RuntimeSettings:
    webroot_value = resolve_webroot(
        str(webroot) if webroot is not None else config.webroot
    )
    sub_folder_value = resolve_sub_folder(
        sub_folder if sub_folder is not None else config.sub_folder
    )
    options = CompileOptions(
        lessify_all_css=bool(
            lessify_all_css if lessify_all_css is not None else config.lessify_all_css
        ),
        scssify_all_css=bool(
            scssify_all_css if scssify_all_css is not None else config.scssify_all_css
        ),
    )
    return RuntimeSettings(
        webroot=webroot_value,
        sub_folder=sub_folder_value,
        cache_dir=config.cache_dir,
        max_import_depth=config.max_import_depth,
        options=options,
    )

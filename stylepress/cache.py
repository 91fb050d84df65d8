"""Compiled stylesheet cache for Stylepress backed by plain files."""

from __future__ import annotations

import hashlib
import json
import logging
import os
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable

from .config import CompileOptions

logger = logging.getLogger(__name__)

DEFAULT_CACHE_DIR = Path(os.path.expanduser("~")) / ".stylepress" / "cache"
CACHE_DIR = DEFAULT_CACHE_DIR
_CACHE_DIR_OVERRIDE: ContextVar[Path | None] = ContextVar(
    "stylepress_cache_dir_override",
    default=None,
)
CACHE_VERSION = 1
CACHE_SUFFIX = ".css.cache"


class EnvelopeKind(str, Enum):
    RAW_TEXT = "raw"
    STRUCTURED = "structured"


@dataclass(frozen=True, slots=True)
class DependencyStamp:
    path: Path
    mtime_ns: int

    @classmethod
    def for_file(cls, path: Path) -> "DependencyStamp":
        return cls(path=Path(path), mtime_ns=os.stat(path).st_mtime_ns)

    def is_current(self) -> bool:
        """Return True while the file on disk is not newer than the stamp."""
        try:
            live = os.stat(self.path).st_mtime_ns
        except OSError:
            return False
        return live <= self.mtime_ns


@dataclass(frozen=True, slots=True)
class CacheEnvelope:
    kind: EnvelopeKind
    compiled_text: str
    dependencies: tuple[DependencyStamp, ...] = ()

    @classmethod
    def raw(cls, text: str) -> "CacheEnvelope":
        return cls(kind=EnvelopeKind.RAW_TEXT, compiled_text=text)

    @classmethod
    def structured(
        cls,
        text: str,
        dependencies: Iterable[DependencyStamp],
    ) -> "CacheEnvelope":
        return cls(
            kind=EnvelopeKind.STRUCTURED,
            compiled_text=text,
            dependencies=tuple(dependencies),
        )

    @property
    def is_structured(self) -> bool:
        return self.kind is EnvelopeKind.STRUCTURED


def stamp_dependencies(paths: Iterable[Path | str]) -> tuple[DependencyStamp, ...]:
    """Stamp each distinct path with its live modification time, keeping order."""

    stamps: list[DependencyStamp] = []
    seen: set[Path] = set()
    for raw in paths:
        path = Path(raw)
        if path in seen:
            continue
        seen.add(path)
        stamps.append(DependencyStamp.for_file(path))
    return tuple(stamps)


def encode_envelope(envelope: CacheEnvelope) -> str:
    payload: dict[str, object] = {
        "version": CACHE_VERSION,
        "kind": envelope.kind.value,
        "compiled_text": envelope.compiled_text,
    }
    if envelope.is_structured:
        payload["dependencies"] = {
            str(stamp.path): stamp.mtime_ns for stamp in envelope.dependencies
        }
    return json.dumps(payload, ensure_ascii=False)


def decode_envelope(content: str) -> CacheEnvelope:
    """Decode cache file content.

    Anything that is not a JSON object carrying a known ``kind`` is treated as
    raw stylesheet text, which is how earlier releases stored plain CSS builds.
    A payload that claims a kind but has malformed fields raises ValueError.
    """

    payload = _load_payload(content)
    if payload is None:
        return CacheEnvelope.raw(content)
    kind = EnvelopeKind(payload["kind"])
    text = payload.get("compiled_text")
    if not isinstance(text, str):
        raise ValueError("Cache envelope is missing compiled_text")
    if kind is EnvelopeKind.RAW_TEXT:
        return CacheEnvelope.raw(text)
    raw_deps = payload.get("dependencies")
    if not isinstance(raw_deps, dict):
        raise ValueError("Structured cache envelope is missing dependencies")
    stamps: list[DependencyStamp] = []
    for path, mtime in raw_deps.items():
        if isinstance(mtime, bool) or not isinstance(mtime, int):
            raise ValueError(f"Invalid dependency timestamp for {path}")
        stamps.append(DependencyStamp(path=Path(path), mtime_ns=mtime))
    return CacheEnvelope.structured(text, stamps)


def _load_payload(content: str) -> dict | None:
    stripped = content.lstrip()
    if not stripped.startswith("{"):
        return None
    try:
        payload = json.loads(content)
    except json.JSONDecodeError:
        return None
    if not isinstance(payload, dict):
        return None
    kind = payload.get("kind")
    if kind not in {member.value for member in EnvelopeKind}:
        return None
    return payload


def servable_content(envelope: CacheEnvelope) -> str:
    return envelope.compiled_text


def _resolve_cache_dir() -> Path:
    override = _CACHE_DIR_OVERRIDE.get()
    return override if override is not None else CACHE_DIR


@contextmanager
def cache_dir_context(path: Path | str | None):
    """Temporarily override the cache directory for the current context."""

    if path is None:
        yield
        return
    dir_path = Path(path).expanduser().resolve()
    if dir_path.exists() and not dir_path.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {dir_path}")
    token = _CACHE_DIR_OVERRIDE.set(dir_path)
    try:
        yield
    finally:
        _CACHE_DIR_OVERRIDE.reset(token)


def ensure_cache_dir() -> Path:
    cache_dir = _resolve_cache_dir()
    cache_dir.mkdir(parents=True, exist_ok=True)
    return cache_dir


def set_cache_dir(path: Path | str | None) -> None:
    global CACHE_DIR
    if path is None:
        CACHE_DIR = DEFAULT_CACHE_DIR
        return
    dir_path = Path(path).expanduser().resolve()
    if dir_path.exists() and not dir_path.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {dir_path}")
    CACHE_DIR = dir_path


def cache_key(
    source_path: Path,
    options: CompileOptions,
    *,
    webroot: Path,
    sub_folder: str = "",
) -> str:
    base = (
        f"{Path(source_path).resolve()}|lessify={options.lessify_all_css}"
        f"|scssify={options.scssify_all_css}|webroot={webroot}|sub={sub_folder}"
    )
    return hashlib.sha1(base.encode("utf-8")).hexdigest()


def cache_path_for(
    source_path: Path,
    options: CompileOptions,
    *,
    webroot: Path,
    sub_folder: str = "",
) -> Path:
    """Return the cache file that holds the build of ``source_path``."""

    key = cache_key(source_path, options, webroot=webroot, sub_folder=sub_folder)
    return ensure_cache_dir() / f"{key}{CACHE_SUFFIX}"


def read_fresh_cache(source_path: Path, cache_path: Path) -> str | None:
    """Return cache content when it exists and is not older than the source."""

    try:
        cache_stat = os.stat(cache_path)
    except OSError:
        return None
    if os.stat(source_path).st_mtime_ns > cache_stat.st_mtime_ns:
        return None
    return Path(cache_path).read_text(encoding="utf-8")


def check_cache(source_path: Path, cache_path: Path) -> CacheEnvelope | None:
    """Return the cached envelope, or None when it is missing or stale."""

    content = read_fresh_cache(source_path, cache_path)
    if content is None:
        logger.debug("Cache miss for %s", source_path)
        return None
    try:
        envelope = decode_envelope(content)
    except ValueError as exc:
        logger.debug("Discarding unreadable cache %s: %s", cache_path, exc)
        return None
    if envelope.is_structured:
        for stamp in envelope.dependencies:
            if not stamp.is_current():
                logger.debug(
                    "Cache for %s is stale because %s changed", source_path, stamp.path
                )
                return None
    logger.debug("Cache hit for %s", source_path)
    return envelope


def write_envelope(cache_path: Path, envelope: CacheEnvelope) -> None:
    cache_path = Path(cache_path)
    cache_path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = cache_path.with_suffix(cache_path.suffix + ".tmp")
    tmp_path.write_text(encode_envelope(envelope), encoding="utf-8")
    tmp_path.replace(cache_path)


def list_cache_entries() -> list[dict[str, object]]:
    """Return metadata for every cached stylesheet build currently stored."""

    cache_dir = _resolve_cache_dir()
    if not cache_dir.is_dir():
        return []
    entries: list[dict[str, object]] = []
    for path in sorted(cache_dir.glob(f"*{CACHE_SUFFIX}")):
        try:
            content = path.read_text(encoding="utf-8")
            envelope = decode_envelope(content)
        except (OSError, ValueError):
            continue
        entries.append(
            {
                "cache_file": path,
                "kind": envelope.kind.value,
                "dependencies": [str(stamp.path) for stamp in envelope.dependencies],
                "size": len(envelope.compiled_text),
            }
        )
    return entries


def clear_all_cache() -> int:
    """Remove every cached build, returning the number of files removed."""

    cache_dir = _resolve_cache_dir()
    if not cache_dir.is_dir():
        return 0
    removed = 0
    for path in cache_dir.glob(f"*{CACHE_SUFFIX}"):
        path.unlink()
        removed += 1
    return removed

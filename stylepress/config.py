"""Global configuration management for Stylepress."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from contextlib import contextmanager
from contextvars import ContextVar
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict

from dotenv import load_dotenv

from .text import Messages

DEFAULT_CONFIG_DIR = Path(os.path.expanduser("~")) / ".stylepress"
CONFIG_DIR = DEFAULT_CONFIG_DIR
CONFIG_FILE = CONFIG_DIR / "config.json"
_CONFIG_DIR_OVERRIDE: ContextVar[Path | None] = ContextVar(
    "stylepress_config_dir_override",
    default=None,
)
DEFAULT_SUB_FOLDER = ""
DEFAULT_MAX_IMPORT_DEPTH = 32
ENV_WEBROOT = "STYLEPRESS_WEBROOT"
ENV_SUB_FOLDER = "STYLEPRESS_SUB_FOLDER"


@dataclass(frozen=True, slots=True)
class CompileOptions:
    """Per-request switches that force a compiler for every stylesheet."""

    lessify_all_css: bool = False
    scssify_all_css: bool = False


@dataclass
class Config:
    webroot: str | None = None
    sub_folder: str = DEFAULT_SUB_FOLDER
    cache_dir: str | None = None
    lessify_all_css: bool = False
    scssify_all_css: bool = False
    max_import_depth: int = DEFAULT_MAX_IMPORT_DEPTH


def _resolve_config_dir() -> Path:
    override = _CONFIG_DIR_OVERRIDE.get()
    return override if override is not None else CONFIG_DIR


def _resolve_config_file() -> Path:
    override = _CONFIG_DIR_OVERRIDE.get()
    if override is not None:
        return override / "config.json"
    return CONFIG_FILE


@contextmanager
def config_dir_context(path: Path | str | None):
    """Temporarily override the config directory for the current context."""

    if path is None:
        yield
        return
    dir_path = Path(path).expanduser().resolve()
    if dir_path.exists() and not dir_path.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {dir_path}")
    token = _CONFIG_DIR_OVERRIDE.set(dir_path)
    try:
        yield
    finally:
        _CONFIG_DIR_OVERRIDE.reset(token)


def load_config() -> Config:
    config_file = _resolve_config_file()
    if not config_file.exists():
        return Config()
    raw = json.loads(config_file.read_text(encoding="utf-8"))
    config = Config()
    _apply_config_payload(config, raw)
    return config


def save_config(config: Config) -> None:
    config_dir = _resolve_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)
    data: Dict[str, Any] = {}
    if config.webroot:
        data["webroot"] = config.webroot
    if config.sub_folder:
        data["sub_folder"] = config.sub_folder
    if config.cache_dir:
        data["cache_dir"] = config.cache_dir
    data["lessify_all_css"] = bool(config.lessify_all_css)
    data["scssify_all_css"] = bool(config.scssify_all_css)
    data["max_import_depth"] = config.max_import_depth
    config_file = _resolve_config_file()
    config_file.write_text(
        json.dumps(data, ensure_ascii=False, indent=2),
        encoding="utf-8",
    )


def set_config_dir(path: Path | str | None) -> None:
    global CONFIG_DIR, CONFIG_FILE
    if path is None:
        CONFIG_DIR = DEFAULT_CONFIG_DIR
    else:
        dir_path = Path(path).expanduser().resolve()
        if dir_path.exists() and not dir_path.is_dir():
            raise NotADirectoryError(f"Path is not a directory: {dir_path}")
        CONFIG_DIR = dir_path
    CONFIG_FILE = CONFIG_DIR / "config.json"


def config_from_json(
    payload: str | Mapping[str, object], *, base: Config | None = None
) -> Config:
    """Return a Config from a JSON string or mapping without saving it."""
    data = _coerce_config_payload(payload)
    config = Config() if base is None else _clone_config(base)
    _apply_config_payload(config, data)
    return config


def update_config_from_json(
    payload: str | Mapping[str, object], *, replace: bool = False
) -> Config:
    """Update config from a JSON string or mapping and persist it."""
    base = None if replace else load_config()
    config = config_from_json(payload, base=base)
    save_config(config)
    return config


def resolve_webroot(configured: str | None) -> Path:
    """Return the webroot from config, environment or the working directory."""

    load_dotenv()
    if configured:
        return Path(configured).expanduser().resolve()
    env_value = (os.getenv(ENV_WEBROOT) or "").strip()
    if env_value:
        return Path(env_value).expanduser().resolve()
    return Path.cwd().resolve()


def resolve_sub_folder(configured: str | None) -> str:
    """Return the site-relative prefix with a single leading slash, or ''."""

    load_dotenv()
    value = configured
    if not value:
        value = os.getenv(ENV_SUB_FOLDER) or ""
    cleaned = value.strip().strip("/")
    return f"/{cleaned}" if cleaned else ""


def _coerce_config_payload(payload: str | Mapping[str, object]) -> Mapping[str, object]:
    if isinstance(payload, str):
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise ValueError(Messages.ERROR_CONFIG_JSON_INVALID) from exc
    elif isinstance(payload, Mapping):
        data = dict(payload)
    else:
        raise ValueError(Messages.ERROR_CONFIG_JSON_INVALID)
    if not isinstance(data, Mapping):
        raise ValueError(Messages.ERROR_CONFIG_JSON_INVALID)
    return data


def _clone_config(config: Config) -> Config:
    return Config(
        webroot=config.webroot,
        sub_folder=config.sub_folder,
        cache_dir=config.cache_dir,
        lessify_all_css=config.lessify_all_css,
        scssify_all_css=config.scssify_all_css,
        max_import_depth=config.max_import_depth,
    )


def _apply_config_payload(config: Config, payload: Mapping[str, object]) -> None:
    if "webroot" in payload:
        config.webroot = _coerce_optional_str(payload["webroot"], "webroot")
    if "sub_folder" in payload:
        config.sub_folder = (
            _coerce_optional_str(payload["sub_folder"], "sub_folder")
            or DEFAULT_SUB_FOLDER
        )
    if "cache_dir" in payload:
        config.cache_dir = _coerce_optional_str(payload["cache_dir"], "cache_dir")
    if "lessify_all_css" in payload:
        config.lessify_all_css = _coerce_bool(
            payload["lessify_all_css"], "lessify_all_css"
        )
    if "scssify_all_css" in payload:
        config.scssify_all_css = _coerce_bool(
            payload["scssify_all_css"], "scssify_all_css"
        )
    if "max_import_depth" in payload:
        depth = _coerce_int(
            payload["max_import_depth"], "max_import_depth", DEFAULT_MAX_IMPORT_DEPTH
        )
        if depth < 1:
            raise ValueError(Messages.ERROR_DEPTH_NEGATIVE)
        config.max_import_depth = depth


def _coerce_optional_str(value: object, field: str) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        cleaned = value.strip()
        return cleaned or None
    raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))


def _coerce_int(value: object, field: str, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool):
        raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))
    if isinstance(value, str):
        cleaned = value.strip()
        if not cleaned:
            return default
        try:
            return int(cleaned)
        except ValueError as exc:
            raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field)) from exc
    raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))


def _coerce_bool(value: object, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        cleaned = value.strip().lower()
        if cleaned in {"true", "1", "yes", "on"}:
            return True
        if cleaned in {"false", "0", "no", "off"}:
            return False
    raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))

"""Turn raw request parameters into stylesheet paths and compile options."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from ..config import CompileOptions
from ..errors import RequestError
from ..text import Messages

STYLESHEET_EXTENSIONS = frozenset({".css", ".less", ".scss"})
_OPTION_ALIASES = {
    "lessifyAllCss": "lessify_all_css",
    "lessify_all_css": "lessify_all_css",
    "scssifyAllCss": "scssify_all_css",
    "scssify_all_css": "scssify_all_css",
}


def resolve_request_files(files_param: str, webroot: Path) -> list[Path]:
    """Return absolute paths for a comma separated list of site paths.

    Every file must exist under ``webroot`` and carry a stylesheet extension.
    """

    root = Path(webroot).resolve()
    tokens = [token.strip() for token in (files_param or "").split(",")]
    tokens = [token for token in tokens if token]
    if not tokens:
        raise RequestError(Messages.ERROR_NO_FILES)
    files: list[Path] = []
    for token in tokens:
        candidate = (root / token.lstrip("/")).resolve()
        if candidate != root and root not in candidate.parents:
            raise RequestError(Messages.ERROR_FILE_OUTSIDE_WEBROOT.format(path=token))
        if candidate.suffix.lower() not in STYLESHEET_EXTENSIONS:
            raise RequestError(Messages.ERROR_EXTENSION_UNSUPPORTED.format(path=token))
        if not candidate.is_file():
            raise RequestError(Messages.ERROR_FILE_NOT_FOUND.format(path=token))
        files.append(candidate)
    return files


def parse_request_options(
    raw: Mapping[str, object] | None,
    *,
    base: CompileOptions | None = None,
) -> CompileOptions:
    """Return compile options from request parameters, ignoring unknown keys."""

    values = {
        "lessify_all_css": (base or CompileOptions()).lessify_all_css,
        "scssify_all_css": (base or CompileOptions()).scssify_all_css,
    }
    for key, value in (raw or {}).items():
        target = _OPTION_ALIASES.get(key)
        if target is None:
            continue
        try:
            values[target] = parse_boolean(value)
        except ValueError as exc:
            raise RequestError(
                Messages.ERROR_OPTION_INVALID.format(name=key, value=value)
            ) from exc
    return CompileOptions(**values)


def parse_boolean(value: object) -> bool:
    if isinstance(value, bool):
        return value
    token = str(value).strip().lower()
    if token in {"1", "true", "t", "yes", "y", "on"}:
        return True
    if token in {"0", "false", "f", "no", "n", "off"}:
        return False
    raise ValueError(Messages.ERROR_BOOLEAN_INVALID.format(value=value))

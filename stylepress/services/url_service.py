"""Rewrite relative ``url()`` references into site-absolute paths."""

from __future__ import annotations

import re
from pathlib import Path

from ..errors import PathEscapeError
from ..text import Messages

URL_PATTERN = re.compile(
    r"""(url\s*\(\s*)(['"]?)(?!\s*data:)([^)'"]*)(\2\s*\))""",
    re.IGNORECASE,
)


def rewrite_urls(
    text: str,
    source_path: Path | str,
    *,
    webroot: Path | str,
    sub_folder: str = "",
) -> str:
    """Return ``text`` with relative url() targets made absolute from the site root.

    Targets are resolved against the directory of ``source_path`` as seen from
    the webroot, prefixed by ``sub_folder``. Absolute paths, fragments, data
    URIs and anything carrying a scheme are left alone. A target that climbs
    above the site root raises PathEscapeError and nothing is rewritten.
    """

    segments = site_segments(source_path, webroot=webroot, sub_folder=sub_folder)
    source = Path(source_path).as_posix()

    def _replace(match: re.Match[str]) -> str:
        prefix, quote, raw, suffix = match.groups()
        target = raw.strip()
        if _is_passthrough(target):
            return match.group(0)
        climbs = target.count("../")
        if climbs > len(segments):
            raise PathEscapeError(
                Messages.ERROR_URL_ABOVE_WEBROOT.format(path=source, url=target),
                path=source,
                url=target,
            )
        base = "/".join(segments[: len(segments) - climbs])
        if base:
            base = f"/{base}"
        resolved = f"{base}/{target}".replace("../", "").replace("./", "")
        return f"{prefix}{quote}{resolved}{suffix}"

    return URL_PATTERN.sub(_replace, text)


def site_segments(
    source_path: Path | str,
    *,
    webroot: Path | str,
    sub_folder: str = "",
) -> list[str]:
    """Return the site-relative directory segments of ``source_path``."""

    directory = Path(source_path).parent.as_posix()
    root = Path(webroot).as_posix().rstrip("/")
    if directory == root:
        relative = ""
    elif root and directory.startswith(f"{root}/"):
        relative = directory[len(root) :]
    else:
        relative = directory
    return [part for part in f"{sub_folder}{relative}".split("/") if part]


def _is_passthrough(target: str) -> bool:
    if not target:
        return True
    if target.startswith(("/", "#")):
        return True
    return "://" in target

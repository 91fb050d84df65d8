"""Inline CSS ``@import`` rules for plain stylesheets."""

from __future__ import annotations

import re
from pathlib import Path

from ..config import DEFAULT_MAX_IMPORT_DEPTH
from ..errors import CompilationError, ImportDepthError
from ..text import Messages

# @import [url(]['"]path['"][)] [media-list];
IMPORT_PATTERN = re.compile(
    r"""@import\s*(?:url)?(?:\(?'?"?)?([^'"\)\(]*)(?:'?"?)?\)?\s?([^;]*);""",
    re.IGNORECASE | re.MULTILINE,
)
# Bare relative url( openings: not absolute, not a scheme such as data: or http:.
RELATIVE_URL_PATTERN = re.compile(r"""\burl\(["']?(?=[.\w])(?!\w+:)""")


def inline_imports(
    text: str,
    source_path: Path | str,
    *,
    max_depth: int = DEFAULT_MAX_IMPORT_DEPTH,
) -> str:
    """Replace every resolvable ``@import`` in ``text`` with the imported content.

    Imports are resolved against the directory of ``source_path``. Rules that
    point at missing files, or that do not match the recognised shape, stay in
    the output untouched. A media list on the rule wraps the inlined content in
    an ``@media`` block. Nesting deeper than ``max_depth`` raises
    ImportDepthError.
    """

    source = Path(source_path).as_posix()
    return _inline(text, source, max_depth=max_depth, chain=(source,))


def _inline(text: str, source: str, *, max_depth: int, chain: tuple[str, ...]) -> str:
    directory = _dirname(source)
    for match in IMPORT_PATTERN.finditer(text):
        target = match.group(1).strip()
        media = match.group(2).strip()
        if not target:
            continue
        imported = f"{directory}/{target}"
        if not Path(imported).is_file():
            continue
        if len(chain) > max_depth:
            raise ImportDepthError(
                Messages.ERROR_IMPORT_TOO_DEEP.format(
                    limit=max_depth,
                    path=chain[0],
                    chain=" -> ".join(chain + (imported,)),
                )
            )
        content = read_stylesheet(Path(imported))
        content = _inline(content, imported, max_depth=max_depth, chain=chain + (imported,))
        content = _prefix_relative_urls(content, directory, _dirname(imported))
        if media:
            content = f"@media {media} {{{content}}}"
        text = text.replace(match.group(0), content)
    return text


def read_stylesheet(path: Path) -> str:
    """Return the UTF-8 text of a stylesheet, raising CompilationError if undecodable."""

    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise CompilationError(
            Messages.ERROR_SOURCE_UNDECODABLE.format(path=path, reason=exc)
        ) from exc


def _prefix_relative_urls(content: str, importer_dir: str, imported_dir: str) -> str:
    if imported_dir == importer_dir:
        return content
    parent = f"{importer_dir}/"
    if not imported_dir.startswith(parent):
        return content
    prefix = imported_dir[len(parent) :] + "/"
    return RELATIVE_URL_PATTERN.sub(lambda m: m.group(0) + prefix, content)


def _dirname(path: str) -> str:
    head, _, _ = path.rpartition("/")
    return head or "/"

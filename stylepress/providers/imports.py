"""Import discovery shared by the LESS and SCSS backends."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Callable, Sequence

IMPORT_RULE_PATTERN = re.compile(r"@(?:import|use|forward)\b([^;{}]*);", re.IGNORECASE)
IMPORT_TARGET_PATTERN = re.compile(
    r"""url\(\s*['"]?([^'")]+?)['"]?\s*\)|"([^"]+)"|'([^']+)'""",
    re.IGNORECASE,
)
BLOCK_COMMENT_PATTERN = re.compile(r"/\*.*?\*/", re.DOTALL)

Resolver = Callable[[str, Sequence[Path]], "Path | None"]


def import_targets(text: str) -> list[str]:
    """Return the quoted or url() targets of every import-like rule in ``text``."""

    cleaned = BLOCK_COMMENT_PATTERN.sub("", text)
    targets: list[str] = []
    for rule in IMPORT_RULE_PATTERN.finditer(cleaned):
        for match in IMPORT_TARGET_PATTERN.finditer(rule.group(1)):
            target = next(group for group in match.groups() if group is not None).strip()
            if not target or "://" in target or target.startswith("//"):
                continue
            targets.append(target)
    return targets


def resolve_less_import(target: str, search_dirs: Sequence[Path]) -> Path | None:
    names = [target]
    if not Path(target).suffix:
        names.insert(0, f"{target}.less")
    return _first_file(names, search_dirs)


def resolve_scss_import(target: str, search_dirs: Sequence[Path]) -> Path | None:
    if target.endswith(".css") or target.startswith("sass:"):
        return None
    stem = Path(target)
    partial = str(stem.with_name(f"_{stem.name}"))
    names: list[str] = []
    if stem.suffix in {".scss", ".sass"}:
        names.extend([target, partial])
    else:
        for suffix in (".scss", ".sass", ".css"):
            names.extend([f"{target}{suffix}", f"{partial}{suffix}"])
        names.extend([f"{target}/_index.scss", f"{target}/index.scss"])
    return _first_file(names, search_dirs)


def collect_dependencies(
    text: str,
    *,
    search_dirs: Sequence[Path],
    resolve: Resolver,
) -> list[Path]:
    """Walk imports starting at ``text`` and return every file reached, in order.

    Each imported file is searched first in its own directory, then in
    ``search_dirs``.
    """

    found: list[Path] = []
    seen: set[Path] = set()
    pending: list[tuple[str, list[Path]]] = [(text, list(search_dirs))]
    while pending:
        current_text, dirs = pending.pop(0)
        for target in import_targets(current_text):
            path = resolve(target, dirs)
            if path is None:
                continue
            path = path.resolve()
            if path in seen:
                continue
            seen.add(path)
            found.append(path)
            try:
                nested = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError):
                continue
            pending.append((nested, [path.parent, *search_dirs]))
    return found


def _first_file(names: Sequence[str], search_dirs: Sequence[Path]) -> Path | None:
    for directory in search_dirs:
        for name in names:
            candidate = Path(directory) / name
            if candidate.is_file():
                return candidate
    return None

"""File discovery: sitemap trees, HTML listings and asset globbing."""

from __future__ import annotations

import fnmatch
import logging
import os
import re
from typing import Any, Iterator

from sitelens.config import DEFAULT_ASSET_EXTENSIONS, HTML_EXTENSIONS, MAX_DEPTH
from sitelens.paths import assert_contained

logger = logging.getLogger(__name__)

_BRACE_RE = re.compile(r"\{([^{}]*)\}")


def is_html(path: str) -> bool:
    return os.path.splitext(path)[1].lower() in HTML_EXTENSIONS


def walk_tree(
    root_path: str,
    include_html_only: bool = False,
    max_depth: int = MAX_DEPTH,
) -> dict[str, Any]:
    """Build a {path, type, children} tree; directories past max_depth stay empty."""
    if not os.path.isdir(root_path):
        return {"path": root_path, "type": "file"}

    tree: dict[str, Any] = {"path": root_path, "type": "dir", "children": []}

    def walk(current: str, depth: int, node: dict[str, Any]) -> None:
        if depth > max_depth:
            return
        try:
            with os.scandir(current) as it:
                entries = sorted(it, key=lambda e: e.name)
        except PermissionError:
            logger.warning("skipping unreadable directory %s", current)
            return
        for entry in entries:
            try:
                if entry.is_dir(follow_symlinks=False):
                    child: dict[str, Any] = {"path": entry.path, "type": "dir", "children": []}
                    node["children"].append(child)
                    walk(entry.path, depth + 1, child)
                elif entry.is_file():
                    if include_html_only and not is_html(entry.name):
                        continue
                    node["children"].append({"path": entry.path, "type": "file"})
            except OSError:
                logger.warning("skipping unreadable entry %s", entry.path)

    walk(root_path, 0, tree)
    return tree


def _iter_files(top: str) -> Iterator[str]:
    """Regular files under top, in sorted, depth-first order."""
    for dirpath, dirnames, filenames in os.walk(top):
        dirnames.sort()
        for name in sorted(filenames):
            yield os.path.join(dirpath, name)


def list_html_files(path: str, roots: tuple[str, ...] | list[str]) -> list[str]:
    if os.path.isfile(path):
        return [assert_contained(path, roots)] if is_html(path) else []
    return [assert_contained(f, roots) for f in _iter_files(path) if is_html(f)]


def expand_braces(pattern: str) -> list[str]:
    """Expand {a,b} alternations: "*.{css,js}" -> ["*.css", "*.js"]."""
    m = _BRACE_RE.search(pattern)
    if not m:
        return [pattern]
    head, tail = pattern[:m.start()], pattern[m.end():]
    out: list[str] = []
    for option in m.group(1).split(","):
        out.extend(expand_braces(head + option + tail))
    return out


def matches_pattern(rel_posix: str, pattern: str) -> bool:
    """Glob match; a slash-free pattern matches the basename at any depth."""
    if "/" not in pattern:
        return fnmatch.fnmatch(rel_posix.rsplit("/", 1)[-1], pattern)
    if fnmatch.fnmatch(rel_posix, pattern):
        return True
    return pattern.startswith("**/") and fnmatch.fnmatch(rel_posix, pattern[3:])


def list_assets(
    path: str,
    roots: tuple[str, ...] | list[str],
    patterns: list[str] | None = None,
) -> list[str]:
    if os.path.isfile(path):
        return [assert_contained(path, roots)]

    expanded = [p for raw in (patterns or []) for p in expand_braces(raw)]
    found: list[str] = []
    for f in _iter_files(path):
        if expanded:
            rel = os.path.relpath(f, path).replace(os.sep, "/")
            if not any(matches_pattern(rel, p) for p in expanded):
                continue
        elif os.path.splitext(f)[1].lower() not in DEFAULT_ASSET_EXTENSIONS:
            continue
        found.append(assert_contained(f, roots))
    return found

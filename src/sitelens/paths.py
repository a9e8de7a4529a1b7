"""Path utilities: canonicalization, root confinement, root-relative resolution.

Every filesystem path a tool touches must come out of ``resolve`` (caller
input) or ``assert_contained`` (paths derived from file contents or directory
walks). Containment is purely lexical: symlinks that live inside a root but
point elsewhere are not detected.
"""

from __future__ import annotations

import os
from typing import Iterable

from sitelens.errors import AccessDenied, InvalidArgument, NoRootsConfigured, NotFound


def normalize(path: str) -> str:
    """Absolute, collapsed form of ``path``. Never touches the filesystem."""
    abs_path = os.path.abspath(path)
    # POSIX keeps a leading "//"; fold it so keys stay deterministic.
    if os.sep == "/" and abs_path.startswith("//"):
        abs_path = "/" + abs_path.lstrip("/")
    return abs_path


def canonical_key(path: str) -> str:
    """Case- and separator-normalized comparison key for a path."""
    return os.path.normcase(normalize(path))


def is_inside(child: str, root: str) -> bool:
    """True iff child is a proper descendant of root (lexical test)."""
    try:
        rel = os.path.relpath(canonical_key(child), canonical_key(root))
    except ValueError:
        # Different drives on Windows.
        return False
    if not rel or rel == os.curdir or os.path.isabs(rel):
        return False
    return rel.split(os.sep, 1)[0] != os.pardir


def is_within_any_root(candidate: str, roots: Iterable[str]) -> bool:
    """True iff candidate equals a root or lies beneath one."""
    key = canonical_key(candidate)
    for root in roots:
        if key == canonical_key(root) or is_inside(key, root):
            return True
    return False


def path_exists(path: str) -> bool:
    return os.access(path, os.R_OK)


def resolve(input_path: str, roots: tuple[str, ...] | list[str]) -> str:
    """Resolve caller input to a contained, existing, absolute path.

    Absolute input must lie inside a root; containment is checked before the
    filesystem is consulted. Relative input is joined to each root in
    declared order and the first contained, existing candidate wins.
    """
    if not isinstance(input_path, str) or not input_path.strip():
        raise InvalidArgument("Path must be a non-empty string.", {"path": input_path})
    if "\x00" in input_path:
        raise InvalidArgument("Path must not contain NUL characters.", {"path": input_path})
    if not roots:
        raise NoRootsConfigured()

    raw = input_path.strip()

    if os.path.isabs(raw):
        candidate = normalize(raw)
        if not is_within_any_root(candidate, roots):
            raise AccessDenied(
                f"Access denied: {candidate!r} is outside the allowed roots.",
                {"path": candidate},
            )
        if not path_exists(candidate):
            raise NotFound(f"Path not found: {candidate!r}", {"path": candidate})
        return candidate

    for root in roots:
        candidate = normalize(os.path.join(root, raw))
        if is_within_any_root(candidate, [root]) and path_exists(candidate):
            return candidate

    raise NotFound(
        f"Relative path {raw!r} does not exist within the allowed roots.",
        {"path": raw},
    )


def assert_contained(path: str, roots: tuple[str, ...] | list[str]) -> str:
    """Re-validate a derived path; returns its normalized form."""
    candidate = normalize(path)
    if not is_within_any_root(candidate, roots):
        raise AccessDenied(
            f"Access denied: {path!r} is outside the allowed roots.",
            {"path": candidate},
        )
    return candidate


def owning_root(path: str, roots: tuple[str, ...] | list[str]) -> str | None:
    """First declared root that contains ``path``."""
    for root in roots:
        if is_within_any_root(path, [root]):
            return root
    return None

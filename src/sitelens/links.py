"""Link checking: classify, contain and verify href/src targets of HTML files."""

from __future__ import annotations

import logging
import os
from urllib.parse import unquote, urlparse

from sitelens.config import DEFAULT_LINK_EXTENSIONS
from sitelens.documents import collect_links, read_html
from sitelens.errors import AccessDenied, ParseError
from sitelens.models import LinkResult
from sitelens.paths import assert_contained, owning_root

logger = logging.getLogger(__name__)


def normalize_extensions(extensions: list[str] | None) -> tuple[str, ...]:
    if not extensions:
        return DEFAULT_LINK_EXTENSIONS
    out = []
    for ext in extensions:
        ext = ext.strip().lower()
        if ext:
            out.append(ext if ext.startswith(".") else "." + ext)
    return tuple(out) or DEFAULT_LINK_EXTENSIONS


def is_external(href: str) -> bool:
    """Anything with a URL scheme or host; single-letter schemes are drive letters."""
    if href.startswith("//"):
        return True
    parsed = urlparse(href)
    return bool(parsed.netloc) or len(parsed.scheme) > 1


def target_exists(path: str) -> bool:
    if os.path.isfile(path):
        return True
    return os.path.isdir(path) and os.path.isfile(os.path.join(path, "index.html"))


def check_link(
    file: str,
    href: str,
    roots: tuple[str, ...] | list[str],
    extensions: tuple[str, ...],
    line: int | None = None,
) -> LinkResult:
    if is_external(href):
        return LinkResult(file=file, link=href, ok=False, status="skipped", external=True, line=line)
    if href.startswith("#"):
        return LinkResult(file=file, link=href, ok=True, status="ok", line=line)

    target = unquote(urlparse(href).path)
    if not target:
        # "?query" only: refers back to the document itself.
        return LinkResult(file=file, link=href, ok=True, status="ok", line=line)

    if target.startswith("/"):
        base = owning_root(file, roots)
        if base is None:
            return LinkResult(file=file, link=href, ok=False, status="missing", line=line)
        candidate = os.path.join(base, target.lstrip("/"))
    else:
        candidate = os.path.join(os.path.dirname(file), target)

    try:
        candidate = assert_contained(candidate, roots)
    except AccessDenied:
        logger.debug("link %r in %s escapes the allowed roots", href, file)
        return LinkResult(file=file, link=href, ok=False, status="missing", line=line)

    ext = os.path.splitext(candidate)[1].lower()
    if ext and ext not in extensions:
        return LinkResult(file=file, link=href, ok=False, status="skipped", line=line)

    exists = target_exists(candidate)
    return LinkResult(
        file=file,
        link=href,
        ok=exists,
        status="ok" if exists else "missing",
        line=line,
    )


def check_links(
    html_files: list[str],
    roots: tuple[str, ...] | list[str],
    extensions: list[str] | None = None,
) -> list[LinkResult]:
    """Check every link of every file; unparseable files contribute nothing."""
    exts = normalize_extensions(extensions)
    results: list[LinkResult] = []
    for file in html_files:
        try:
            doc = read_html(file)
        except ParseError as exc:
            logger.warning("skipping links of %s: %s", file, exc.message)
            continue
        for ref in collect_links(doc):
            results.append(check_link(file, ref.value, roots, exts, ref.line))
    return results

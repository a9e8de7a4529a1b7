"""Tool handlers: roots-list, sitemap, link-check, asset-budget, scan-accessibility, report."""

from __future__ import annotations

import functools
import logging
import os
import sys
from typing import Any, Callable

from sitelens.assets import aggregate_assets
from sitelens.config import DEFAULT_TOP, MAX_DEPTH, MAX_TOP, SERVER_NAME, SERVER_VERSION
from sitelens.errors import InvalidArgument, NoRootsConfigured, SiteLensError, err, from_exception, ok
from sitelens.files import list_assets, list_html_files, walk_tree
from sitelens.links import check_links
from sitelens.models import ScanBucket, Severity, Weights, clamp_int, coerce_budget
from sitelens.paths import is_within_any_root, resolve
from sitelens.report import build_report
from sitelens.rules import scan_files
from sitelens.store import ResultCache

logger = logging.getLogger(__name__)

Handler = Callable[..., dict[str, Any]]


def tool_boundary(fn: Handler) -> Handler:
    """Turn typed and I/O errors raised inside a handler into error envelopes."""

    @functools.wraps(fn)
    def wrapper(args: dict[str, Any], *rest: Any) -> dict[str, Any]:
        try:
            return fn(args, *rest)
        except SiteLensError as exc:
            logger.info("%s failed: %s %s", fn.__name__, exc.code, exc.message)
            return from_exception(exc)
        except OSError as exc:
            logger.warning("%s hit an I/O error: %s", fn.__name__, exc)
            return err(
                "E_IO_ERROR",
                "Filesystem error while running the tool.",
                {"path": exc.filename, "errno": exc.errno, "reason": exc.strerror},
            )

    return wrapper


def _require_roots(roots: tuple[str, ...]) -> None:
    if not roots:
        raise NoRootsConfigured()


def _string_list(args: dict[str, Any], key: str) -> list[str]:
    value = args.get(key)
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, str) and v]


@tool_boundary
def handle_roots_list(
    _args: dict[str, Any],
    roots: tuple[str, ...],
) -> dict[str, Any]:
    """List configured roots in declaration order."""
    return ok({
        "roots": [
            {
                "rootId": f"root_{i}",
                "displayName": os.path.basename(r) or r,
                "path": r,
            }
            for i, r in enumerate(roots)
        ]
    })


@tool_boundary
def handle_sitemap(
    args: dict[str, Any],
    roots: tuple[str, ...],
) -> dict[str, Any]:
    _require_roots(roots)
    include_html_only = bool(args.get("includeHtmlOnly", False))
    max_depth = clamp_int(args.get("maxDepth"), MAX_DEPTH, 0, MAX_DEPTH)
    resolved = resolve(args.get("path", ""), roots)
    tree = walk_tree(resolved, include_html_only, max_depth)
    return ok({"target": resolved, "maxDepth": max_depth, "tree": tree})


@tool_boundary
def handle_link_check(
    args: dict[str, Any],
    roots: tuple[str, ...],
    cache: ResultCache,
) -> dict[str, Any]:
    """Check links under path (or only the entry document) and cache them for path."""
    _require_roots(roots)
    resolved = resolve(args.get("path", ""), roots)

    scan_from = resolved
    entry = args.get("entry")
    if entry:
        scan_from = resolve(entry, roots)
        if not is_within_any_root(scan_from, [resolved]):
            raise InvalidArgument(
                "entry must lie within path.",
                {"entry": scan_from, "path": resolved},
            )

    html_files = list_html_files(scan_from, roots)
    results = check_links(html_files, roots, _string_list(args, "extensions"))
    cache.put(resolved, ScanBucket(links=results))

    return ok({
        "target": resolved,
        "results": [r.to_dict() for r in results],
        "stats": {
            "files": len(html_files),
            "links": len(results),
            "ok": sum(1 for r in results if r.status == "ok"),
            "missing": sum(1 for r in results if r.status == "missing"),
            "skipped": sum(1 for r in results if r.status == "skipped"),
        },
    })


@tool_boundary
def handle_asset_budget(
    args: dict[str, Any],
    roots: tuple[str, ...],
    cache: ResultCache,
) -> dict[str, Any]:
    _require_roots(roots)
    resolved = resolve(args.get("path", ""), roots)
    budget = coerce_budget(args.get("budgetKB"))
    files = list_assets(resolved, roots, _string_list(args, "patterns") or None)
    report = aggregate_assets(files, budget)
    cache.put(resolved, ScanBucket(assets=report))
    return ok({"target": resolved, **report.to_dict()})


@tool_boundary
def handle_scan_accessibility(
    args: dict[str, Any],
    roots: tuple[str, ...],
    cache: ResultCache,
) -> dict[str, Any]:
    """Scan HTML under path, filtered by include/exclude substrings; caches the results."""
    _require_roots(roots)
    resolved = resolve(args.get("path", ""), roots)
    include = _string_list(args, "include")
    exclude = _string_list(args, "exclude")

    files = list_html_files(resolved, roots)
    if include:
        files = [f for f in files if any(s in f for s in include)]
    if exclude:
        files = [f for f in files if not any(s in f for s in exclude)]

    results = scan_files(files)
    cache.put(resolved, ScanBucket(accessibility=results))

    totals = {s.value: 0 for s in Severity}
    for r in results:
        for sev, n in r.counts_by_severity().items():
            totals[sev] += n

    return ok({
        "target": resolved,
        "filesScanned": len(results),
        "countsBySeverity": totals,
        "results": [r.to_dict() for r in results],
    })


@tool_boundary
def handle_report(
    args: dict[str, Any],
    roots: tuple[str, ...],
    cache: ResultCache,
) -> dict[str, Any]:
    _require_roots(roots)
    resolved = resolve(args.get("path", ""), roots)
    weights = Weights.from_args(args.get("weights"))
    top = clamp_int(args.get("top"), DEFAULT_TOP, 1, MAX_TOP)
    report = build_report(resolved, cache, weights, top)
    return ok(report.to_dict())


@tool_boundary
def handle_server_info(
    _args: dict[str, Any],
    roots: tuple[str, ...],
    cache: ResultCache,
    tool_names: list[str],
) -> dict[str, Any]:
    """Server metadata for debugging configuration and cache state."""
    return ok({
        "name": SERVER_NAME,
        "version": SERVER_VERSION,
        "python": sys.version.split()[0],
        "platform": sys.platform,
        "roots": list(roots),
        "cachedTargets": cache.targets(),
        "policies": {
            "containment": "lexical",
            "symlinks": "not resolved; a link inside a root may point outside it",
            "maxDepth": MAX_DEPTH,
            "maxTop": MAX_TOP,
        },
        "tools": tool_names,
    })

"""Asset sizing: per-type totals, heaviest files, budget overruns."""

from __future__ import annotations

import logging
import os

from sitelens.config import DEFAULT_BUDGET_KB, TOP_HEAVY_LIMIT
from sitelens.models import AssetEntry, AssetReport, OverBudgetEntry

logger = logging.getLogger(__name__)


def round2(n: float) -> float:
    return round(n, 2)


def file_kb(path: str) -> float:
    return round2(os.stat(path).st_size / 1024)


def ext_of(path: str) -> str:
    return os.path.splitext(path)[1].lower()


def _sized(files: list[str]) -> list[AssetEntry]:
    sizes: list[AssetEntry] = []
    for f in files:
        try:
            sizes.append(AssetEntry(file=f, sizeKB=file_kb(f)))
        except OSError as exc:
            logger.warning("skipping unreadable asset %s: %s", f, exc.strerror)
    return sizes


def aggregate_assets(files: list[str], budget_kb: float = DEFAULT_BUDGET_KB) -> AssetReport:
    """Size every file once; overBudget covers all files, not just the top list.

    Files that cannot be stat'ed (dangling symlinks, races) are left out.
    """
    sizes = _sized(files)

    by_type: dict[str, float] = {}
    total = 0.0
    for entry in sizes:
        ext = ext_of(entry.file) or "misc"
        by_type[ext] = by_type.get(ext, 0.0) + entry.sizeKB
        total += entry.sizeKB

    heaviest = sorted(sizes, key=lambda e: e.sizeKB, reverse=True)
    over = [
        OverBudgetEntry(file=e.file, sizeKB=e.sizeKB, budgetKB=budget_kb)
        for e in heaviest
        if e.sizeKB > budget_kb
    ]

    return AssetReport(
        totalKB=round2(total),
        fileCount=len(sizes),
        byType={k: round2(v) for k, v in by_type.items()},
        topHeavy=heaviest[:TOP_HEAVY_LIMIT],
        overBudget=over,
        budgetKB=budget_kb,
    )

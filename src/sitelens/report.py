"""Consolidated report: per-file health scores and quick wins from cached scans.

The report only reads the cache bucket stored under its own resolved target.
Families that have not been scanned yet count as empty; a report is never an
error because data is missing.

Scoring per file, starting from 100:

    - (errors * 5 + warnings * 2) * weights.a11y
    - missing_links * 3           * weights.links
    - over_budget_assets * 4      * weights.performance

clamped to [0, 100] and rounded to two decimals.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from sitelens.config import DEFAULT_TOP, MAX_TOP, QUICK_WIN_RULES
from sitelens.models import (
    QuickWin,
    RankingEntry,
    Report,
    ReportSummary,
    ScanBucket,
    Weights,
    clamp_int,
)
from sitelens.store import ResultCache

ERROR_PENALTY = 5
WARN_PENALTY = 2
MISSING_LINK_PENALTY = 3
OVER_BUDGET_PENALTY = 4


@dataclass
class FilePenalties:
    errors: int = 0
    warns: int = 0
    missing_links: int = 0
    over_budget: int = 0


@dataclass
class _Universe:
    """Files in first-seen order with their penalty inputs."""

    order: list[str] = field(default_factory=list)
    penalties: dict[str, FilePenalties] = field(default_factory=dict)

    def touch(self, file: str) -> FilePenalties:
        if file not in self.penalties:
            self.order.append(file)
            self.penalties[file] = FilePenalties()
        return self.penalties[file]


def score_file(p: FilePenalties, weights: Weights) -> float:
    a11y = (p.errors * ERROR_PENALTY + p.warns * WARN_PENALTY) * weights.a11y
    links = p.missing_links * MISSING_LINK_PENALTY * weights.links
    perf = p.over_budget * OVER_BUDGET_PENALTY * weights.performance
    score = 100.0 - (a11y + links + perf)
    return round(min(100.0, max(0.0, score)), 2)


def _collect(bucket: ScanBucket) -> _Universe:
    universe = _Universe()

    for result in bucket.accessibility or []:
        p = universe.touch(result.file)
        counts = result.counts_by_severity()
        p.errors += counts["ERROR"]
        p.warns += counts["WARN"]

    for link in bucket.links or []:
        p = universe.touch(link.file)
        if link.status == "missing":
            p.missing_links += 1

    if bucket.assets is not None:
        for heavy in bucket.assets.topHeavy:
            universe.touch(heavy.file)
        for over in bucket.assets.overBudget:
            universe.touch(over.file).over_budget += 1

    return universe


def rank(universe: _Universe, weights: Weights) -> list[RankingEntry]:
    """Descending score; the sort is stable so ties keep first-seen order."""
    entries = [RankingEntry(file=f, score=score_file(universe.penalties[f], weights)) for f in universe.order]
    return sorted(entries, key=lambda e: -e.score)


def quick_wins(bucket: ScanBucket) -> list[QuickWin]:
    wins: list[QuickWin] = []
    for result in bucket.accessibility or []:
        for issue in result.issues:
            if issue.rule in QUICK_WIN_RULES:
                wins.append(QuickWin(file=result.file, rule=issue.rule, message=issue.message))
    return wins


def summary_text(files: int, broken: int, over_budget: int, shown: int) -> str:
    return (
        "SiteLens consolidated report\n"
        f"- Files evaluated: {files}\n"
        f"- Broken links: {broken}\n"
        f"- Assets over budget: {over_budget}\n"
        f"- Quick wins shown: {shown}\n"
    )


def build_report(
    resolved: str,
    cache: ResultCache,
    weights: Weights | None = None,
    top: int = DEFAULT_TOP,
) -> Report:
    """Compose the report for ``resolved`` from whatever the cache holds."""
    weights = weights or Weights()
    top = clamp_int(top, DEFAULT_TOP, 1, MAX_TOP)
    bucket = cache.get(resolved) or ScanBucket()

    universe = _collect(bucket)
    ranking = rank(universe, weights)[:top]
    wins = quick_wins(bucket)[:top]

    broken = sum(1 for link in bucket.links or [] if link.status == "missing")
    over_budget = len(bucket.assets.overBudget) if bucket.assets is not None else 0
    files = len(universe.order)

    return Report(
        target=resolved,
        ranking=ranking,
        quickWins=wins,
        summary=ReportSummary(
            filesEvaluated=files,
            brokenLinks=broken,
            overBudgetAssets=over_budget,
            quickWinsShown=len(wins),
            text=summary_text(files, broken, over_budget, len(wins)),
        ),
        families=bucket.families(),
    )

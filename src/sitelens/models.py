"""Data models: issues, scan results, cache buckets, report shapes."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any

from sitelens.config import DEFAULT_BUDGET_KB


class Severity(str, Enum):
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"


def _drop_none(d: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in d.items() if v is not None}


@dataclass(frozen=True)
class Issue:
    rule: str
    severity: Severity
    message: str
    selector: str | None = None
    line: int | None = None

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["severity"] = self.severity.value
        return _drop_none(d)


@dataclass
class A11yResult:
    file: str
    issues: list[Issue] = field(default_factory=list)

    def counts_by_severity(self) -> dict[str, int]:
        counts = {s.value: 0 for s in Severity}
        for issue in self.issues:
            counts[issue.severity.value] += 1
        return counts

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "issues": [i.to_dict() for i in self.issues],
            "summary": {"countsBySeverity": self.counts_by_severity()},
        }


@dataclass
class LinkResult:
    file: str
    link: str
    ok: bool
    status: str  # "ok" | "missing" | "skipped"
    external: bool | None = None
    line: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(asdict(self))


@dataclass
class AssetEntry:
    file: str
    sizeKB: float


@dataclass
class OverBudgetEntry:
    file: str
    sizeKB: float
    budgetKB: float


@dataclass
class AssetReport:
    totalKB: float
    fileCount: int
    byType: dict[str, float]
    topHeavy: list[AssetEntry] = field(default_factory=list)
    overBudget: list[OverBudgetEntry] = field(default_factory=list)
    budgetKB: float = DEFAULT_BUDGET_KB

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": {
                "totalKB": self.totalKB,
                "fileCount": self.fileCount,
                "byType": dict(self.byType),
                "budgetKB": self.budgetKB,
            },
            "topHeavy": [asdict(e) for e in self.topHeavy],
            "overBudget": [asdict(e) for e in self.overBudget],
        }


@dataclass
class ScanBucket:
    """Latest results per scan family for one resolved target; any subset may be set."""

    accessibility: list[A11yResult] | None = None
    links: list[LinkResult] | None = None
    assets: AssetReport | None = None

    def families(self) -> list[str]:
        return [name for name in ("accessibility", "links", "assets") if getattr(self, name) is not None]


@dataclass
class RankingEntry:
    file: str
    score: float


@dataclass
class QuickWin:
    file: str
    rule: str
    message: str


@dataclass
class ReportSummary:
    filesEvaluated: int
    brokenLinks: int
    overBudgetAssets: int
    quickWinsShown: int
    text: str


@dataclass
class Report:
    target: str
    ranking: list[RankingEntry]
    quickWins: list[QuickWin]
    summary: ReportSummary
    families: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# --- Parameter coercion ---


def is_number(value: Any) -> bool:
    """Finite int/float; booleans are not numbers here."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return isinstance(value, int) or math.isfinite(value)


def as_float(value: Any) -> float | None:
    """Float form of a number, or None when it is not one or does not fit."""
    if not is_number(value):
        return None
    try:
        return float(value)
    except OverflowError:
        return None


def clamp_int(value: Any, default: int, lo: int, hi: int) -> int:
    """Coerce to an int in [lo, hi]; non-numeric input yields ``default``."""
    if not is_number(value):
        return default
    return max(lo, min(hi, int(value)))


def coerce_budget(value: Any) -> float:
    budget = as_float(value)
    if budget is None:
        return DEFAULT_BUDGET_KB
    return max(0.0, budget)


@dataclass(frozen=True)
class Weights:
    a11y: float = 1.0
    links: float = 1.0
    performance: float = 1.0

    @classmethod
    def from_args(cls, raw: Any) -> "Weights":
        """Build weights from tool arguments; bad members fall back to 1.0."""
        if not isinstance(raw, dict):
            return cls()
        values = {}
        for name in ("a11y", "links", "performance"):
            v = as_float(raw.get(name))
            values[name] = 1.0 if v is None else max(0.0, v)
        return cls(**values)

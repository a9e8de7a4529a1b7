"""Accessibility rule checks: alt text, form labels, landmarks, headings, contrast."""

from __future__ import annotations

import logging
from typing import Callable

from bs4 import BeautifulSoup

from sitelens.documents import (
    contrast_ratio,
    css_color_to_rgb,
    inputs_needing_label,
    list_headings,
    parse_inline_colors,
    read_html,
)
from sitelens.errors import ParseError
from sitelens.models import A11yResult, Issue, Severity

logger = logging.getLogger(__name__)

LANDMARK_TAGS = ("main", "nav", "header", "footer", "aside")
LANDMARK_ROLES = frozenset({"main", "navigation", "banner", "contentinfo", "complementary"})

AA_CONTRAST = 4.5
MIN_CONTRAST = 3.0


def scan_alt_text(doc: BeautifulSoup) -> list[Issue]:
    issues: list[Issue] = []
    for img in doc.find_all("img"):
        alt = img.get("alt")
        if alt is None or not str(alt).strip():
            issues.append(Issue(
                rule="img-alt",
                severity=Severity.ERROR,
                message="<img> is missing alternative text (alt).",
                selector="img",
                line=img.sourceline,
            ))
    return issues


def scan_form_labels(doc: BeautifulSoup) -> list[Issue]:
    return [
        Issue(
            rule="form-labels",
            severity=Severity.ERROR,
            message="Form control has no associated <label>.",
            selector=el.name,
            line=el.sourceline,
        )
        for el in inputs_needing_label(doc)
    ]


def scan_landmarks(doc: BeautifulSoup) -> list[Issue]:
    if doc.find(list(LANDMARK_TAGS)) is not None:
        return []
    for el in doc.find_all(attrs={"role": True}):
        role = el.get("role")
        if isinstance(role, str) and role.strip().lower() in LANDMARK_ROLES:
            return []
    return [Issue(
        rule="landmarks",
        severity=Severity.WARN,
        message=(
            "No main landmarks found (main/nav/header/footer/aside "
            "or equivalent roles)."
        ),
    )]


def scan_heading_order(doc: BeautifulSoup) -> list[Issue]:
    issues: list[Issue] = []
    headings = list_headings(doc)
    if not headings:
        return issues

    prev = headings[0][0]
    for level, tag in headings[1:]:
        if level > prev + 1:
            issues.append(Issue(
                rule="headings-order",
                severity=Severity.WARN,
                message=f"Heading level jumps from h{prev} to h{level}.",
                selector=tag.name,
                line=tag.sourceline,
            ))
        prev = level
    return issues


def scan_inline_contrast(doc: BeautifulSoup) -> list[Issue]:
    issues: list[Issue] = []
    for el in doc.find_all(style=True):
        color, background = parse_inline_colors(str(el.get("style") or ""))
        fg = css_color_to_rgb(color)
        bg = css_color_to_rgb(background)
        if fg is None or bg is None:
            continue
        ratio = contrast_ratio(fg, bg)
        if ratio < AA_CONTRAST:
            issues.append(Issue(
                rule="contrast",
                severity=Severity.ERROR if ratio < MIN_CONTRAST else Severity.WARN,
                message=(
                    f"Insufficient contrast (~{ratio:.2f}:1, AA requires "
                    f">= 4.5:1 for normal text)."
                ),
                selector=el.name,
                line=el.sourceline,
            ))
    return issues


RULES: tuple[Callable[[BeautifulSoup], list[Issue]], ...] = (
    scan_alt_text,
    scan_form_labels,
    scan_landmarks,
    scan_heading_order,
    scan_inline_contrast,
)


def run_a11y(file: str) -> A11yResult:
    """Run every rule over one file; a parse failure becomes a single issue."""
    try:
        doc = read_html(file)
    except ParseError as exc:
        logger.warning("parse failed for %s: %s", file, exc.message)
        return A11yResult(file=file, issues=[Issue(
            rule="parse-error",
            severity=Severity.ERROR,
            message="Could not parse the HTML document.",
        )])

    issues: list[Issue] = []
    for rule in RULES:
        issues.extend(rule(doc))
    return A11yResult(file=file, issues=issues)


def scan_files(files: list[str]) -> list[A11yResult]:
    return [run_a11y(f) for f in files]

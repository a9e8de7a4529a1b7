"""HTML document helpers: parsing, link extraction, labels, headings, colours."""

from __future__ import annotations

import re
from dataclasses import dataclass

from bs4 import BeautifulSoup, Tag
from bs4.builder import ParserRejectedMarkup

from sitelens.errors import ParseError

# (tag, attribute) pairs scanned for link targets, in reporting order.
LINK_SOURCES: tuple[tuple[str, str], ...] = (
    ("a", "href"),
    ("link", "href"),
    ("script", "src"),
    ("img", "src"),
    ("source", "src"),
    ("video", "src"),
    ("audio", "src"),
)

LABELLED_INPUT_TYPES = frozenset({"text", "email", "password", "checkbox", "radio"})

_COLOR_RE = re.compile(r"(?:^|;)\s*color\s*:\s*([^;]+)", re.IGNORECASE)
_BACKGROUND_RE = re.compile(r"(?:^|;)\s*background(?:-color)?\s*:\s*([^;]+)", re.IGNORECASE)
_HEX_RE = re.compile(r"^#([0-9a-f]{3}|[0-9a-f]{6})$", re.IGNORECASE)
_RGB_RE = re.compile(r"^rgb\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*\)$")
_HEADING_RE = re.compile(r"^h[1-6]$")


@dataclass(frozen=True)
class LinkRef:
    tag: str
    attr: str
    value: str
    line: int | None = None


def read_html(path: str) -> BeautifulSoup:
    """Parse an HTML file; raises ParseError when it cannot be read or parsed."""
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as exc:
        raise ParseError(f"Could not read {path!r}: {exc.strerror or exc}", {"file": path}) from exc

    text = data.decode("utf-8", errors="replace")
    try:
        return BeautifulSoup(text, "html.parser")
    except ParserRejectedMarkup as exc:
        raise ParseError(f"Could not parse {path!r}.", {"file": path}) from exc


def collect_links(doc: BeautifulSoup) -> list[LinkRef]:
    links: list[LinkRef] = []
    for tag_name, attr in LINK_SOURCES:
        for el in doc.find_all(tag_name):
            value = el.get(attr)
            if isinstance(value, str) and value.strip():
                links.append(LinkRef(tag_name, attr, value.strip(), el.sourceline))
    return links


def has_label(doc: BeautifulSoup, el: Tag) -> bool:
    """True when el has a label[for=id] or sits inside a <label>."""
    el_id = el.get("id")
    if isinstance(el_id, str) and el_id.strip():
        if doc.find("label", attrs={"for": el_id.strip()}) is not None:
            return True
    return el.find_parent("label") is not None


def inputs_needing_label(doc: BeautifulSoup) -> list[Tag]:
    needing: list[Tag] = []
    for el in doc.find_all(["input", "select", "textarea"]):
        if el.name == "input":
            input_type = (el.get("type") or "").strip().lower()
            if input_type not in LABELLED_INPUT_TYPES:
                continue
        if not has_label(doc, el):
            needing.append(el)
    return needing


def list_headings(doc: BeautifulSoup) -> list[tuple[int, Tag]]:
    """(level, tag) pairs in document order."""
    return [(int(h.name[1]), h) for h in doc.find_all(_HEADING_RE)]


def parse_inline_colors(style: str) -> tuple[str | None, str | None]:
    color = _COLOR_RE.search(style)
    background = _BACKGROUND_RE.search(style)
    return (
        color.group(1).strip() if color else None,
        background.group(1).strip() if background else None,
    )


def css_color_to_rgb(value: str | None) -> tuple[int, int, int] | None:
    """Parse #rgb, #rrggbb or rgb(r, g, b); anything else is unsupported."""
    if not value:
        return None
    c = value.strip().lower()
    m = _HEX_RE.match(c)
    if m:
        h = m.group(1)
        if len(h) == 3:
            h = "".join(ch * 2 for ch in h)
        return int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)
    m = _RGB_RE.match(c)
    if m:
        return int(m.group(1)), int(m.group(2)), int(m.group(3))
    return None


def relative_luminance(rgb: tuple[int, int, int]) -> float:
    channels = []
    for v in rgb:
        c = v / 255
        channels.append(c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4)
    r, g, b = channels
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def contrast_ratio(fg: tuple[int, int, int], bg: tuple[int, int, int]) -> float:
    l1 = relative_luminance(fg)
    l2 = relative_luminance(bg)
    hi, lo = (l1, l2) if l1 >= l2 else (l2, l1)
    return (hi + 0.05) / (lo + 0.05)

"""Configuration: allowlisted roots and scan constants."""

from __future__ import annotations

import os

from sitelens.paths import canonical_key, normalize

SERVER_NAME = "SiteLens"
SERVER_VERSION = "1.0.0"

ROOTS_ENV = "SITELENS_ROOTS"
ROOTS_ENV_FALLBACK = "ALLOWED_ROOTS"
LOG_LEVEL_ENV = "SITELENS_LOG_LEVEL"

DEFAULT_BUDGET_KB = 200.0
MAX_DEPTH = 20
DEFAULT_TOP = 10
MAX_TOP = 100
TOP_HEAVY_LIMIT = 20

QUICK_WIN_RULES: tuple[str, ...] = ("img-alt", "form-labels")

HTML_EXTENSIONS: tuple[str, ...] = (".html", ".htm")
DEFAULT_ASSET_EXTENSIONS: tuple[str, ...] = (
    ".css", ".js", ".png", ".jpg", ".jpeg", ".svg", ".webp", ".ico",
    ".woff", ".woff2", ".ttf", ".otf",
)
DEFAULT_LINK_EXTENSIONS: tuple[str, ...] = (
    ".html", ".htm", ".css", ".js", ".png", ".jpg", ".jpeg", ".svg", ".webp", ".ico",
)


def raw_roots_from_env() -> str:
    return (
        os.environ.get(ROOTS_ENV, "").strip()
        or os.environ.get(ROOTS_ENV_FALLBACK, "").strip()
    )


def load_roots(raw: str | None = None) -> tuple[str, ...]:
    """Load allowlisted roots.

    ``raw`` is the --roots option; when empty the SITELENS_ROOTS (then
    ALLOWED_ROOTS) environment variable is used.
    Format: semicolon-separated directory paths.
    Example: SITELENS_ROOTS=/srv/site;/home/me/blog

    An empty configuration yields no roots; tools then fail with
    NoRootsConfigured. A configured root that is not a directory fails closed.
    """
    text = (raw or "").strip() or raw_roots_from_env()
    if not text:
        return ()

    roots: list[str] = []
    seen: set[str] = set()
    for path in text.split(";"):
        path = path.strip()
        if not path:
            continue
        abs_path = normalize(path)
        if not os.path.isdir(abs_path):
            raise RuntimeError(f"Configured root does not exist or is not a directory: {abs_path}")
        key = canonical_key(abs_path)
        if key in seen:
            continue
        seen.add(key)
        roots.append(abs_path)

    return tuple(roots)


def log_level() -> str:
    return os.environ.get(LOG_LEVEL_ENV, "INFO").upper()

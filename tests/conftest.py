"""Shared test fixtures for SiteLens tests."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from sitelens.paths import normalize
from sitelens.store import ResultCache


@pytest.fixture
def site(tmp_path: Path) -> tuple[str, tuple[str, ...]]:
    """A temporary site directory registered as the only allowed root."""
    root = tmp_path / "site"
    root.mkdir()
    root_abs = normalize(str(root))
    return root_abs, (root_abs,)


@pytest.fixture
def cache() -> ResultCache:
    return ResultCache()


@pytest.fixture
def make_file() -> Callable[..., str]:
    """Write a file (creating parents) and return its absolute path."""

    def _make(root: str, rel: str, content: str | bytes = "") -> str:
        path = Path(root) / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
        return normalize(str(path))

    return _make

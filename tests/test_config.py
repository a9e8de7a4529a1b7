"""Tests for root configuration loading and parameter coercion."""

from __future__ import annotations

import math
import os

import pytest

from sitelens.config import load_roots
from sitelens.models import Weights, clamp_int, coerce_budget


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("SITELENS_ROOTS", raising=False)
    monkeypatch.delenv("ALLOWED_ROOTS", raising=False)


def test_no_roots_is_empty_not_an_error():
    assert load_roots() == ()
    assert load_roots("  ;  ") == ()


def test_option_order_and_dedupe(tmp_path):
    a, b = tmp_path / "a", tmp_path / "b"
    a.mkdir()
    b.mkdir()
    raw = f"{b};;{a}; {b}{os.sep} "
    assert load_roots(raw) == (str(b), str(a))


def test_env_fallbacks(tmp_path, monkeypatch):
    monkeypatch.setenv("ALLOWED_ROOTS", str(tmp_path))
    assert load_roots() == (str(tmp_path),)
    other = tmp_path / "other"
    other.mkdir()
    monkeypatch.setenv("SITELENS_ROOTS", str(other))
    assert load_roots() == (str(other),)
    assert load_roots(str(tmp_path)) == (str(tmp_path),)


def test_missing_root_fails_closed(tmp_path):
    with pytest.raises(RuntimeError):
        load_roots(str(tmp_path / "missing"))


def test_weights_from_args():
    assert Weights.from_args(None) == Weights()
    assert Weights.from_args({"a11y": "x", "links": 2, "performance": True}) == Weights(1.0, 2.0, 1.0)
    assert Weights.from_args({"a11y": -3}) == Weights(0.0, 1.0, 1.0)


@pytest.mark.parametrize("raw,expected", [
    (None, 10), ("5", 10), (True, 10), (math.nan, 10),
    (0, 1), (500, 100), (7.9, 7), (42, 42),
])
def test_clamp_int(raw, expected):
    assert clamp_int(raw, 10, 1, 100) == expected


def test_coerce_budget():
    assert coerce_budget(None) == 200.0
    assert coerce_budget(-5) == 0.0
    assert coerce_budget(64) == 64.0


def test_huge_integers_are_clamped_not_fatal():
    huge = 10 ** 400
    assert clamp_int(huge, 10, 1, 100) == 100
    assert clamp_int(-huge, 10, 1, 100) == 1
    assert coerce_budget(huge) == 200.0
    assert Weights.from_args({"a11y": huge, "links": -huge}) == Weights(1.0, 1.0, 1.0)

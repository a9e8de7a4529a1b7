"""Tests for ResultCache: field-wise merge, key normalization, isolation."""

from __future__ import annotations

import os

from sitelens.models import A11yResult, AssetReport, Issue, LinkResult, ScanBucket, Severity


def _a11y(file: str) -> list[A11yResult]:
    return [A11yResult(file=file, issues=[Issue("img-alt", Severity.ERROR, "missing alt")])]


def _links(file: str, status: str = "missing") -> list[LinkResult]:
    return [LinkResult(file=file, link="x.html", ok=status == "ok", status=status)]


def test_get_unknown_target(cache, tmp_path):
    assert cache.get(str(tmp_path)) is None


def test_accessibility_update_preserves_links(cache, tmp_path):
    target = str(tmp_path)
    links = _links("a.html")
    cache.put(target, ScanBucket(links=links))
    cache.put(target, ScanBucket(accessibility=_a11y("a.html")))

    bucket = cache.get(target)
    assert bucket.links == links
    assert bucket.accessibility[0].file == "a.html"
    assert bucket.assets is None


def test_last_writer_wins_per_family(cache, tmp_path):
    target = str(tmp_path)
    cache.put(target, ScanBucket(links=_links("a.html", "missing")))
    cache.put(target, ScanBucket(assets=AssetReport(totalKB=0.0, fileCount=0, byType={})))
    cache.put(target, ScanBucket(links=_links("a.html", "ok")))

    bucket = cache.get(target)
    assert [l.status for l in bucket.links] == ["ok"]
    assert bucket.assets is not None


def test_keys_are_separator_normalized(cache, tmp_path):
    target = str(tmp_path / "site")
    cache.put(target + os.sep, ScanBucket(links=_links("a.html")))
    messy = str(tmp_path) + os.sep + os.sep + "site"
    assert cache.get(messy) is not None
    assert len(cache) == 1


def test_distinct_targets_do_not_share_buckets(cache, tmp_path):
    site = str(tmp_path / "site")
    page = os.path.join(site, "index.html")
    cache.put(site, ScanBucket(accessibility=_a11y(page)))
    assert cache.get(page) is None


def test_returned_bucket_is_a_copy(cache, tmp_path):
    target = str(tmp_path)
    cache.put(target, ScanBucket(links=_links("a.html")))
    bucket = cache.get(target)
    bucket.links = None
    assert cache.get(target).links is not None


def test_clear(cache, tmp_path):
    cache.put(str(tmp_path), ScanBucket(links=[]))
    assert cache.targets()
    cache.clear()
    assert cache.targets() == []

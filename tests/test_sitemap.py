"""Tests for tree walking and HTML file discovery."""

from __future__ import annotations

import os

from sitelens.files import list_html_files, walk_tree


def _names(node):
    return [os.path.basename(c["path"]) for c in node["children"]]


def test_walk_tree_sorted_with_depth_limit(site, make_file):
    root, _ = site
    make_file(root, "x.css", "body{}")
    make_file(root, "a/b/c.html", "<p>c</p>")
    make_file(root, "a/page.HTM", "<p>p</p>")

    tree = walk_tree(root, max_depth=0)
    assert tree["type"] == "dir"
    assert _names(tree) == ["a", "x.css"]
    assert tree["children"][0]["children"] == []

    full = walk_tree(root)
    a = full["children"][0]
    assert _names(a) == ["b", "page.HTM"]
    assert _names(a["children"][0]) == ["c.html"]


def test_walk_tree_html_only(site, make_file):
    root, _ = site
    make_file(root, "x.css", "body{}")
    make_file(root, "index.html", "<p>i</p>")
    assert _names(walk_tree(root, include_html_only=True)) == ["index.html"]


def test_walk_tree_on_file(site, make_file):
    root, _ = site
    path = make_file(root, "index.html", "x")
    assert walk_tree(path) == {"path": path, "type": "file"}


def test_list_html_files(site, make_file):
    root, roots = site
    make_file(root, "b.html", "")
    make_file(root, "a/z.htm", "")
    make_file(root, "a/readme.md", "")
    make_file(root, "A.HTML", "")
    rels = [os.path.relpath(f, root).replace(os.sep, "/") for f in list_html_files(root, roots)]
    assert rels == ["A.HTML", "b.html", "a/z.htm"]


def test_list_html_files_on_single_file(site, make_file):
    root, roots = site
    page = make_file(root, "index.html", "")
    other = make_file(root, "style.css", "")
    assert list_html_files(page, roots) == [page]
    assert list_html_files(other, roots) == []

"""Create a small defective site for manual SiteLens checks.

Usage: python scripts/create_fixtures.py <root_dir>

Creates pages that trigger each SiteLens finding family:
  - index.html        (img-alt ERROR, broken link to missing.html)
  - contact.html      (form-labels ERROR, landmarks WARN, contrast ERROR)
  - blog/post.html    (headings-order WARN, root-absolute links)
  - assets/hero.jpg   (over the default 200 KB budget)
  - assets/site.css   (small asset, link target)
"""

from __future__ import annotations

import os
import sys

PAGES: dict[str, str] = {
    "index.html": (
        "<!doctype html>\n<html>\n<head><link rel=\"stylesheet\" href=\"assets/site.css\"></head>\n"
        "<body>\n<main>\n<img src=\"assets/hero.jpg\">\n"
        "<a href=\"missing.html\">Gone</a>\n<a href=\"blog/post.html\">Blog</a>\n"
        "<a href=\"https://example.com/\">External</a>\n</main>\n</body>\n</html>\n"
    ),
    "contact.html": (
        "<!doctype html>\n<html>\n<body>\n<form>\n<input type=\"email\" name=\"email\">\n"
        "<p style=\"color: #777; background-color: #888\">Low contrast</p>\n"
        "</form>\n</body>\n</html>\n"
    ),
    "blog/post.html": (
        "<!doctype html>\n<html>\n<body>\n<main>\n<h1>Post</h1>\n<h3>Skipped a level</h3>\n"
        "<a href=\"/index.html\">Home</a>\n<a href=\"/contact.html#form\">Contact</a>\n"
        "</main>\n</body>\n</html>\n"
    ),
}

ASSETS: dict[str, bytes] = {
    "assets/hero.jpg": b"\xff\xd8\xff" + b"\0" * (256 * 1024),
    "assets/site.css": b"body { font-family: sans-serif; }\n",
}


def build_site(root: str) -> list[str]:
    """Write the fixture pages and assets under root; returns created paths."""
    created: list[str] = []
    for rel, text in PAGES.items():
        created.append(_write(root, rel, text.encode("utf-8")))
    for rel, data in ASSETS.items():
        created.append(_write(root, rel, data))
    return created


def _write(root: str, rel: str, data: bytes) -> str:
    path = os.path.join(root, *rel.split("/"))
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "wb") as f:
        f.write(data)
    return path


def main() -> None:
    if len(sys.argv) < 2:
        print("Usage: python create_fixtures.py <root_dir>", file=sys.stderr)
        sys.exit(1)

    root = sys.argv[1]
    if not os.path.isdir(root):
        print(f"Root does not exist: {root}", file=sys.stderr)
        sys.exit(1)

    for path in build_site(os.path.abspath(root)):
        print(f"  created: {os.path.relpath(path, root)}")
    print(f"  set SITELENS_ROOTS={os.path.abspath(root)} and run: sitelens")


if __name__ == "__main__":
    main()

"""
Extraction of embedded resource references from page markup.
"""
from __future__ import annotations

import re
from typing import List, Optional, Tuple

from bs4 import BeautifulSoup

from pagecheck.models import ResourceReference, build_references

# Target of <meta http-equiv="refresh" content="5; url=/next">
META_REFRESH_URL = re.compile(r"url\s*=\s*(.+)", re.IGNORECASE)

# (tag, url attribute, kind) in report order
TAG_KINDS: Tuple[Tuple[str, str, str], ...] = (
    ("a", "href", "anchor"),
    ("img", "src", "image"),
    ("script", "src", "script"),
    ("link", "href", "stylesheet"),
    ("iframe", "src", "iframe"),
)


def _is_stylesheet(tag) -> bool:
    rel = tag.get("rel") or []
    if isinstance(rel, str):
        rel = rel.split()
    return "stylesheet" in (r.lower() for r in rel)


def meta_refresh_target(content: Optional[str]) -> Optional[str]:
    """Pull the URL out of a meta refresh content attribute."""
    match = META_REFRESH_URL.search(content or "")
    if not match:
        return None
    return match.group(1).strip().strip("'\"").strip()


def extract_resources(html: str) -> List[ResourceReference]:
    """Collect links, images, scripts, stylesheets, iframes and meta refresh targets."""
    soup = BeautifulSoup(html, "lxml")
    pairs: List[Tuple[str, Optional[str]]] = []

    for tag_name, attr, kind in TAG_KINDS:
        for tag in soup.find_all(tag_name, attrs={attr: True}):
            if kind == "stylesheet" and not _is_stylesheet(tag):
                continue
            pairs.append((kind, tag.get(attr)))

    for meta in soup.find_all("meta", attrs={"http-equiv": True}):
        if meta["http-equiv"].strip().lower() != "refresh":
            continue
        target = meta_refresh_target(meta.get("content"))
        if target is not None:
            pairs.append(("meta-refresh", target))

    return build_references(pairs)

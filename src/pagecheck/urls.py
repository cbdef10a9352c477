"""
URL resolution and skippable-reference detection.
"""
from __future__ import annotations

from typing import Optional
from urllib.parse import urljoin, urlparse, urlunparse

# Prefixes that never point at a fetchable network resource
SKIP_PREFIXES: tuple[str, ...] = ("javascript:", "mailto:", "tel:")


def is_skippable(raw: Optional[str]) -> bool:
    """Return True for placeholders such as '#', 'javascript:', 'mailto:' or ''."""
    if raw is None:
        return True
    lowered = raw.strip().lower()
    return lowered in ("", "#") or lowered.startswith(SKIP_PREFIXES)


def resolve_url(base: str, raw: Optional[str]) -> Optional[str]:
    """
    Resolve a raw reference against the page URL.

    - Joins relative and scheme-relative references against base
    - Normalizes scheme/host case
    - Removes default ports (:80, :443)
    - Keeps querystring and fragment, including an empty trailing "#"

    Returns None when the reference cannot be turned into an absolute URL.
    """
    if raw is None:
        return None

    reference = raw.strip()

    try:
        parsed = urlparse(urljoin(base, reference))
        port = parsed.port  # raises ValueError for a non-numeric or out-of-range port
    except ValueError:
        return None

    # urljoin drops an empty fragment, so "/page#" would collide with "/page"
    empty_fragment = "#" if reference.endswith("#") and not parsed.fragment else ""

    scheme = parsed.scheme.lower()
    if not scheme:
        return None
    if scheme not in ("http", "https"):
        return urlunparse(parsed._replace(scheme=scheme)) + empty_fragment

    hostname = (parsed.hostname or "").lower()
    if not hostname:
        return None
    if ":" in hostname:
        hostname = f"[{hostname}]"

    if (scheme == "http" and port == 80) or (scheme == "https" and port == 443):
        netloc = hostname
    elif port is not None:
        netloc = f"{hostname}:{port}"
    else:
        netloc = hostname

    userinfo = parsed.netloc.rpartition("@")[0]
    if userinfo:
        netloc = f"{userinfo}@{netloc}"

    return urlunparse((
        scheme,
        netloc,
        parsed.path or "/",
        parsed.params,
        parsed.query,
        parsed.fragment,
    )) + empty_fragment

"""
Top-level page fetch.
"""
from __future__ import annotations

import logging
import time
from typing import Optional, Tuple
from urllib.parse import urlparse

import requests

from pagecheck.models import CheckerConfig, PageFetchInfo
from pagecheck.probe import build_session

LOGGER = logging.getLogger(__name__)


class PageFetchError(RuntimeError):
    """The page under analysis could not be retrieved."""

    def __init__(self, url: str, info: PageFetchInfo):
        super().__init__(f"Failed to fetch page {url}: {info.error}")
        self.url = url
        self.info = info


def _elapsed_ms(start: float) -> int:
    return int(round((time.perf_counter() - start) * 1000))


def validate_page_url(url: str) -> None:
    """Raise ValueError unless url is an absolute http(s) URL."""
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"Invalid URL: {url}")


def fetch_page(
    url: str,
    config: CheckerConfig,
    session: Optional[requests.Session] = None,
) -> Tuple[str, str, PageFetchInfo]:
    """
    Download the page whose resources will be checked.

    Returns:
        Tuple of (html, final URL after redirects, fetch info).

    Raises:
        ValueError: url is not an absolute http(s) URL.
        PageFetchError: Network failure or an HTTP error status.
    """
    validate_page_url(url)
    if session is None:
        with build_session(config) as owned:
            return fetch_page(url, config, session=owned)

    start = time.perf_counter()
    try:
        resp = session.get(url, timeout=config.timeout_s, allow_redirects=True)
    except requests.RequestException as e:
        info = PageFetchInfo(status="error", time_ms=_elapsed_ms(start), error=str(e))
        raise PageFetchError(url, info) from e

    time_ms = _elapsed_ms(start)
    if resp.status_code >= 400:
        info = PageFetchInfo(
            status="error",
            http_status=resp.status_code,
            time_ms=time_ms,
            error=f"HTTP {resp.status_code} {resp.reason or ''}".strip(),
        )
        raise PageFetchError(url, info)

    LOGGER.info("Fetched %s (%d) in %d ms", resp.url, resp.status_code, time_ms)
    info = PageFetchInfo(status="ok", http_status=resp.status_code, time_ms=time_ms)
    return resp.text, resp.url or url, info

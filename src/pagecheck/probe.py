"""
Two-phase reachability probe: HEAD first, then a streamed GET that stops at the headers.
"""
from __future__ import annotations

import logging
import threading
import time
from typing import Callable, List, Optional
from urllib.parse import urljoin

import requests

from pagecheck.models import CheckerConfig, ProbeOutcome

LOGGER = logging.getLogger(__name__)


class _AttemptFailed(Exception):
    """One probe attempt did not produce a usable response."""

    def __init__(self, message: str, elapsed_ms: int, http_status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.elapsed_ms = elapsed_ms
        self.http_status = http_status


def build_session(config: CheckerConfig) -> requests.Session:
    """Create an HTTP session carrying the configured User-Agent and redirect bound."""
    session = requests.Session()
    session.headers["User-Agent"] = config.user_agent
    session.max_redirects = config.max_redirects
    return session


class Prober:
    """
    Checks one URL at a time; safe to call from several worker threads.

    Each thread gets its own session. Call close() (or use as a context
    manager) to release the pooled connections once the run is over.
    """

    def __init__(
        self,
        config: Optional[CheckerConfig] = None,
        session_factory: Optional[Callable[[], requests.Session]] = None,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self.config = config or CheckerConfig()
        self._session_factory = session_factory or (lambda: build_session(self.config))
        self._clock = clock
        self._local = threading.local()
        self._sessions: List[requests.Session] = []
        self._sessions_lock = threading.Lock()

    def __enter__(self) -> "Prober":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __call__(self, url: str) -> ProbeOutcome:
        return self.probe(url)

    def close(self) -> None:
        with self._sessions_lock:
            sessions, self._sessions = self._sessions, []
        for session in sessions:
            session.close()

    def probe(self, url: str) -> ProbeOutcome:
        """
        Check a URL with HEAD, falling back to GET when HEAD fails.

        The reported status and latency always come from the last attempt.
        A GET never downloads the body: the connection is closed as soon as
        the headers are in.
        """
        session = self._session()
        try:
            return self._attempt(session, "HEAD", url)
        except _AttemptFailed as exc:
            LOGGER.debug("HEAD %s failed (%s), falling back to GET", url, exc.message)

        try:
            return self._attempt(session, "GET", url)
        except _AttemptFailed as exc:
            LOGGER.info("Probe failed for %s: %s", url, exc.message)
            return ProbeOutcome(
                succeeded=False,
                elapsed_ms=exc.elapsed_ms,
                http_status=exc.http_status,
                error_message=exc.message,
            )

    def _session(self) -> requests.Session:
        session = getattr(self._local, "session", None)
        if session is None:
            session = self._session_factory()
            self._local.session = session
            with self._sessions_lock:
                self._sessions.append(session)
        return session

    def _elapsed_ms(self, start: float) -> int:
        return max(0, int(round((self._clock() - start) * 1000)))

    def _send(self, session: requests.Session, method: str, url: str, deadline: float) -> requests.Response:
        remaining = deadline - self._clock()
        if remaining <= 0:
            raise requests.Timeout(f"No time left to request {url}")
        return session.request(
            method,
            url,
            timeout=remaining,
            allow_redirects=False,
            stream=True,
        )

    def _follow(self, session: requests.Session, method: str, url: str, deadline: float) -> requests.Response:
        """Send the request and follow redirects by hand, all within one deadline."""
        response = self._send(session, method, url, deadline)
        hops = 0
        while response.is_redirect:
            location = urljoin(response.url or url, response.headers["location"])
            response.close()
            if hops >= self.config.max_redirects:
                raise requests.TooManyRedirects(f"Exceeded {self.config.max_redirects} redirects")
            hops += 1
            response = self._send(session, method, location, deadline)
        return response

    def _attempt(self, session: requests.Session, method: str, url: str) -> ProbeOutcome:
        timeout_s = self.config.timeout_s
        timeout_message = f"Timeout after {timeout_s:g}s"
        start = self._clock()
        try:
            response = self._follow(session, method, url, start + timeout_s)
        except requests.Timeout:
            raise _AttemptFailed(timeout_message, self._elapsed_ms(start))
        except requests.TooManyRedirects:
            raise _AttemptFailed(
                f"Exceeded {self.config.max_redirects} redirects", self._elapsed_ms(start)
            )
        except requests.ConnectionError as e:
            raise _AttemptFailed(f"Connection failed: {e}", self._elapsed_ms(start))
        except requests.RequestException as e:
            raise _AttemptFailed(str(e) or type(e).__name__, self._elapsed_ms(start))

        # Headers are in; drop the connection before any body bytes are read
        try:
            elapsed_ms = self._elapsed_ms(start)
            status = response.status_code
            reason = getattr(response, "reason", None) or ""
        finally:
            response.close()

        # Per-read socket timeouts do not bound the whole phase
        if elapsed_ms > self.config.request_timeout_ms:
            raise _AttemptFailed(timeout_message, elapsed_ms)
        if status >= 400:
            raise _AttemptFailed(f"HTTP {status} {reason}".strip(), elapsed_ms, status)
        return ProbeOutcome(succeeded=True, elapsed_ms=elapsed_ms, http_status=status)

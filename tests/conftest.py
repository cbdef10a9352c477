import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT / "src") not in sys.path:
    sys.path.insert(0, str(ROOT / "src"))

import pytest

from pagecheck.models import ProbeOutcome


class FakeClock:
    """Manually advanced replacement for time.perf_counter."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class FakeResponse:
    def __init__(self, status_code: int, reason: str = "", location: str = None, url: str = "") -> None:
        self.status_code = status_code
        self.reason = reason
        self.url = url
        self.headers = {"location": location} if location else {}
        self.closed = False

    @property
    def is_redirect(self) -> bool:
        return "location" in self.headers and self.status_code in (301, 302, 303, 307, 308)

    def close(self) -> None:
        self.closed = True


class FakeSession:
    """
    Session stub answering each HTTP method with a scripted (delay, response-or-error).

    A list of such pairs is consumed one request at a time.
    """

    def __init__(self, clock: FakeClock, script: dict) -> None:
        self.clock = clock
        self.script = script
        self.calls: list = []
        self.closed = False

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        entry = self.script[method]
        delay, result = entry.pop(0) if isinstance(entry, list) else entry
        self.clock.now += delay
        if isinstance(result, BaseException):
            raise result
        return result

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def fake_probe():
    """Probe that fails for *.invalid hosts and succeeds elsewhere in 120 ms."""

    calls: list[str] = []

    def probe(url: str) -> ProbeOutcome:
        calls.append(url)
        if ".invalid" in url:
            return ProbeOutcome(succeeded=False, elapsed_ms=15, error_message="Connection failed: Name or service not known")
        return ProbeOutcome(succeeded=True, elapsed_ms=120, http_status=200)

    probe.calls = calls  # type: ignore[attr-defined]
    return probe

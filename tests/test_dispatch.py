import threading
import time

import pytest

from pagecheck.dispatch import dispatch
from pagecheck.models import ProbeOutcome


def test_every_url_checked_exactly_once():
    urls = [f"https://example.com/{i}" for i in range(25)]

    results = dispatch(urls, lambda url: ProbeOutcome(succeeded=True, elapsed_ms=1, http_status=200), 4)

    assert sorted(url for url, _ in results) == sorted(urls)


def test_never_exceeds_concurrency_limit():
    lock = threading.Lock()
    in_flight = 0
    peak = 0

    def probe(url):
        nonlocal in_flight, peak
        with lock:
            in_flight += 1
            peak = max(peak, in_flight)
        time.sleep(0.005)
        with lock:
            in_flight -= 1
        return ProbeOutcome(succeeded=True, elapsed_ms=5, http_status=200)

    results = dispatch([f"https://example.com/{i}" for i in range(40)], probe, 3)

    assert len(results) == 40
    assert 1 <= peak <= 3


def test_empty_input_returns_nothing():
    assert dispatch([], lambda url: pytest.fail("should not probe"), 8) == []


def test_probe_exception_recorded_as_failure():
    def probe(url):
        if url.endswith("boom"):
            raise RuntimeError("boom")
        return ProbeOutcome(succeeded=True, elapsed_ms=3, http_status=200)

    results = dict(dispatch(["https://example.com/ok", "https://example.com/boom"], probe, 2))

    assert results["https://example.com/ok"].succeeded
    failed = results["https://example.com/boom"]
    assert not failed.succeeded
    assert failed.http_status is None
    assert failed.error_message == "boom"


def test_on_result_called_for_each_url():
    seen = []

    dispatch(
        ["https://example.com/a", "https://example.com/b"],
        lambda url: ProbeOutcome(succeeded=True, elapsed_ms=1, http_status=200),
        8,
        on_result=lambda url, outcome: seen.append(url),
    )

    assert sorted(seen) == ["https://example.com/a", "https://example.com/b"]


@pytest.mark.parametrize("limit", [0, -1])
def test_invalid_concurrency_limit(limit):
    with pytest.raises(ValueError):
        dispatch(["https://example.com/"], lambda url: None, limit)


def test_failing_callback_does_not_stop_worker():
    urls = [f"https://example.com/{i}" for i in range(5)]

    def on_result(url, outcome):
        raise RuntimeError("display failed")

    results = dispatch(
        urls,
        lambda url: ProbeOutcome(succeeded=True, elapsed_ms=1, http_status=200),
        1,
        on_result=on_result,
    )

    assert sorted(url for url, _ in results) == sorted(urls)

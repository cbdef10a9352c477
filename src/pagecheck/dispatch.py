"""
Bounded worker pool that probes a queue of URLs.
"""
from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Callable, Deque, Iterable, List, Optional, Tuple

from pagecheck.models import ProbeOutcome

LOGGER = logging.getLogger(__name__)

ProbeFn = Callable[[str], ProbeOutcome]
ResultCallback = Callable[[str, ProbeOutcome], None]


def dispatch(
    urls: Iterable[str],
    probe: ProbeFn,
    concurrency_limit: int,
    on_result: Optional[ResultCallback] = None,
) -> List[Tuple[str, ProbeOutcome]]:
    """
    Probe every URL using at most `concurrency_limit` worker threads.

    Workers share one FIFO queue and stop as soon as they find it empty.
    Results come back in completion order, one per input URL.

    Args:
        urls: URLs to check.
        probe: Callable performing one check.
        concurrency_limit: Maximum number of probes in flight.
        on_result: Optional hook called (under the results lock) after each probe.
    """
    if concurrency_limit <= 0:
        raise ValueError(f"concurrency_limit must be positive, got {concurrency_limit}")

    pending: Deque[str] = deque(urls)
    pending_lock = threading.Lock()
    results: List[Tuple[str, ProbeOutcome]] = []
    results_lock = threading.Lock()

    def worker() -> None:
        while True:
            with pending_lock:
                if not pending:
                    return
                url = pending.popleft()

            try:
                outcome = probe(url)
            except Exception as e:
                LOGGER.exception("Unexpected error while probing %s", url)
                outcome = ProbeOutcome(succeeded=False, elapsed_ms=0, error_message=str(e) or type(e).__name__)

            with results_lock:
                results.append((url, outcome))
                if on_result is not None:
                    try:
                        on_result(url, outcome)
                    except Exception:
                        LOGGER.exception("Result callback failed for %s", url)

    pool_size = min(concurrency_limit, len(pending))
    LOGGER.debug("Dispatching %d URLs to %d workers", len(pending), pool_size)

    threads = [
        threading.Thread(target=worker, name=f"probe-worker-{i}", daemon=True)
        for i in range(pool_size)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    return results

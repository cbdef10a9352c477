"""
Resource verification: classify, probe with bounded concurrency, merge and summarize.
"""
from __future__ import annotations

import logging
from contextlib import ExitStack
from typing import Dict, List, Optional, Sequence

from pagecheck.dispatch import ProbeFn, ResultCallback, dispatch
from pagecheck.extract import extract_resources
from pagecheck.fetch import fetch_page
from pagecheck.models import (
    CHECKED,
    NOT_CHECKED,
    SKIPPED,
    UNRESOLVED,
    AnalysisReport,
    AnalysisSummary,
    CheckerConfig,
    ResourceReference,
    ResourceResult,
)
from pagecheck.probe import Prober, build_session
from pagecheck.urls import is_skippable, resolve_url

LOGGER = logging.getLogger(__name__)


def classify(base_url: str, references: Sequence[ResourceReference], max_checkable: int) -> List[ResourceResult]:
    """Resolve each reference and decide whether it will be probed."""
    results: List[ResourceResult] = []
    checkable = 0
    for ref in references:
        resolved = resolve_url(base_url, ref.raw)
        if is_skippable(ref.raw):
            classification = SKIPPED
        elif resolved is None:
            classification = UNRESOLVED
        elif checkable < max_checkable:
            classification = CHECKED
            checkable += 1
        else:
            classification = NOT_CHECKED
        results.append(ResourceResult(reference=ref, resolved_url=resolved, classification=classification))
    return results


def mark_duplicates(results: Sequence[ResourceResult]) -> None:
    """Point every repeat of a resolved URL at the id of its first occurrence."""
    first_seen: Dict[str, str] = {}
    for result in results:
        url = result.resolved_url
        if url is None:
            continue
        if url in first_seen:
            result.duplicate_of = first_seen[url]
        else:
            first_seen[url] = result.id


def summarize(results: Sequence[ResourceResult], slow_threshold_ms: int) -> AnalysisSummary:
    checked = [r for r in results if r.classification == CHECKED and r.outcome is not None]
    succeeded_times = [r.outcome.elapsed_ms for r in checked if r.outcome.succeeded]

    average = None
    if succeeded_times:
        average = int(round(sum(succeeded_times) / len(succeeded_times)))

    return AnalysisSummary(
        total=len(results),
        checked=len(checked),
        broken=sum(1 for r in checked if r.outcome.broken),
        slow=sum(1 for r in checked if r.outcome.elapsed_ms > slow_threshold_ms),
        duplicates=sum(1 for r in results if r.duplicate_of is not None),
        unnecessary=sum(1 for r in results if r.classification == SKIPPED),
        average_response_ms=average,
    )


def recommend(summary: AnalysisSummary, slow_threshold_ms: int) -> List[str]:
    recommendations = []
    if summary.broken:
        recommendations.append("Fix or remove broken resources (HTTP 4xx/5xx or network errors).")
    if summary.duplicates:
        recommendations.append("Remove duplicate links/resources to reduce requests.")
    if summary.slow:
        recommendations.append(
            f"Investigate slow resources (>{slow_threshold_ms}ms) and consider optimizing or lazy-loading them."
        )
    if summary.unnecessary:
        recommendations.append(
            "Remove unnecessary placeholders (javascript:, #, mailto:, tel:) "
            "or convert them to accessible buttons if they perform actions."
        )
    return recommendations


def analyze_resources(
    base_url: str,
    references: Sequence[ResourceReference],
    probe: Optional[ProbeFn] = None,
    config: Optional[CheckerConfig] = None,
    on_result: Optional[ResultCallback] = None,
) -> AnalysisReport:
    """
    Check every reference found on a page and summarize the outcome.

    Args:
        base_url: Absolute URL the references are resolved against.
        references: References in discovery order.
        probe: Callable checking one URL. Defaults to a Prober built from config.
        config: Limits and thresholds for this run.
        on_result: Optional hook called as each URL finishes.

    Returns:
        Report whose results follow the discovery order of `references`.
    """
    config = config or CheckerConfig()
    ids = [ref.id for ref in references]
    if len(set(ids)) != len(ids):
        raise ValueError("Resource reference ids must be unique within one analysis")

    results = classify(base_url, references, config.max_checkable_resources)
    to_check = [r for r in results if r.classification == CHECKED]
    not_checked = sum(1 for r in results if r.classification == NOT_CHECKED)
    if not_checked:
        LOGGER.warning(
            "Limit of %d checkable resources reached; %d left unchecked",
            config.max_checkable_resources,
            not_checked,
        )

    # One probe per distinct URL; repeats share the outcome
    unique_urls = list(dict.fromkeys(r.resolved_url for r in to_check))
    LOGGER.info("Checking %d resources (%d unique URLs)", len(to_check), len(unique_urls))

    with ExitStack() as stack:
        if probe is None:
            probe = stack.enter_context(Prober(config))
        outcomes = dict(dispatch(unique_urls, probe, config.concurrency_limit, on_result=on_result))

    for result in to_check:
        result.outcome = outcomes[result.resolved_url]

    mark_duplicates(results)
    summary = summarize(results, config.slow_threshold_ms)
    return AnalysisReport(
        results=results,
        summary=summary,
        recommendations=recommend(summary, config.slow_threshold_ms),
    )


def analyze_page(
    url: str,
    config: Optional[CheckerConfig] = None,
    probe: Optional[ProbeFn] = None,
    on_result: Optional[ResultCallback] = None,
) -> AnalysisReport:
    """
    Fetch a page, extract its embedded resources and check them.

    Raises:
        ValueError: The URL is not an absolute http(s) URL.
        PageFetchError: The page itself could not be fetched.
    """
    config = config or CheckerConfig()
    with build_session(config) as session:
        html, final_url, fetch_info = fetch_page(url, config, session=session)

    references = extract_resources(html)
    LOGGER.info("Found %d resource references on %s", len(references), final_url)

    report = analyze_resources(final_url, references, probe=probe, config=config, on_result=on_result)
    report.page_url = final_url
    report.page_fetch = fetch_info
    return report

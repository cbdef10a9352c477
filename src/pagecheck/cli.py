"""
Command-line interface for the page resource checker.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional
from urllib.parse import urlparse

from pagecheck.core import analyze_page
from pagecheck.fetch import PageFetchError, validate_page_url
from pagecheck.models import AnalysisReport, CheckerConfig, ProbeOutcome


def print_summary(report: AnalysisReport) -> None:
    """Print analysis summary to stderr."""
    summary = report.summary
    sys.stderr.write("=" * 50 + "\n")
    sys.stderr.write("RESOURCE SUMMARY\n")
    sys.stderr.write("=" * 50 + "\n\n")

    sys.stderr.write(f"Total resources found:  {summary.total}\n")
    sys.stderr.write(f"Checked:                {summary.checked}\n")
    sys.stderr.write(f"Broken:                 {summary.broken}\n")
    sys.stderr.write(f"Slow:                   {summary.slow}\n")
    sys.stderr.write(f"Duplicates:             {summary.duplicates}\n")
    sys.stderr.write(f"Unnecessary:            {summary.unnecessary}\n")
    average = f"{summary.average_response_ms} ms" if summary.average_response_ms is not None else "N/A"
    sys.stderr.write(f"Avg response time:      {average}\n\n")

    if report.recommendations:
        sys.stderr.write("Recommendations:\n")
        for recommendation in report.recommendations:
            sys.stderr.write(f"  - {recommendation}\n")
    else:
        sys.stderr.write("No issues found.\n")

    sys.stderr.write("\n")


def print_check_line(url: str, outcome: ProbeOutcome) -> None:
    """Print single probe result line."""
    status_str = str(outcome.http_status) if outcome.http_status else "ERR"
    sys.stderr.write(f"  → {status_str} {url} ({outcome.elapsed_ms} ms)\n")
    sys.stderr.flush()


def generate_output_path(page_url: str) -> Path:
    """Generate output path: reports/{hostname}_{datetime}.json"""
    parsed = urlparse(page_url)
    hostname = parsed.hostname or "unknown"
    hostname_safe = hostname.replace(".", "_")
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    reports_dir = Path("reports")
    reports_dir.mkdir(exist_ok=True)

    return reports_dir / f"{hostname_safe}_{timestamp}.json"


def build_parser() -> argparse.ArgumentParser:
    defaults = CheckerConfig()
    parser = argparse.ArgumentParser(
        description="Check every resource embedded in a web page and output a JSON report."
    )
    parser.add_argument("url", help="Page URL (e.g. https://example.com)")
    parser.add_argument(
        "--timeout", type=float, default=defaults.timeout_s,
        help=f"Per-request timeout in seconds (default: {defaults.timeout_s:g})",
    )
    parser.add_argument(
        "--max-redirects", type=int, default=defaults.max_redirects,
        help=f"Redirects to follow per request (default: {defaults.max_redirects})",
    )
    parser.add_argument(
        "--concurrency", type=int, default=defaults.concurrency_limit,
        help=f"Requests in flight at once (default: {defaults.concurrency_limit})",
    )
    parser.add_argument(
        "--max-resources", type=int, default=defaults.max_checkable_resources,
        help=f"Maximum resources to check (default: {defaults.max_checkable_resources})",
    )
    parser.add_argument(
        "--slow-ms", type=int, default=defaults.slow_threshold_ms,
        help=f"Response time above which a resource is slow (default: {defaults.slow_threshold_ms})",
    )
    parser.add_argument("--user-agent", default=defaults.user_agent, help="User-Agent header")
    parser.add_argument("--out", help="Output file path, or '-' for stdout (default: auto-generated in reports/)")
    parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON")
    parser.add_argument("--verbose", action="store_true", help="Show progress and summary")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the checker CLI."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = CheckerConfig(
            request_timeout_ms=int(args.timeout * 1000),
            max_redirects=args.max_redirects,
            concurrency_limit=args.concurrency,
            max_checkable_resources=args.max_resources,
            slow_threshold_ms=args.slow_ms,
            user_agent=args.user_agent,
        )
        validate_page_url(args.url)
    except ValueError as e:
        sys.stderr.write(f"Error: {e}\n")
        return 2

    try:
        report = analyze_page(
            args.url,
            config=config,
            on_result=print_check_line if args.verbose else None,
        )
    except PageFetchError as e:
        sys.stderr.write(f"Error: {e}\n")
        payload = {"error": "Failed to fetch page", "details": e.info.to_dict()}
        sys.stderr.write(json.dumps(payload, ensure_ascii=False) + "\n")
        return 2

    # Print summary if verbose
    if args.verbose:
        print_summary(report)

    json_text = json.dumps(report.to_dict(), ensure_ascii=False, indent=2 if args.pretty else None)

    if args.out == "-":
        print(json_text)
    else:
        output_path = Path(args.out) if args.out else generate_output_path(report.page_url or args.url)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(json_text, encoding="utf-8")
        if args.verbose:
            sys.stderr.write(f"Report written to: {output_path}\n")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())

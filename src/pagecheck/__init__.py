"""
Page resource checker: fetches a page and probes every embedded resource
(links, images, scripts, stylesheets, iframes, meta refresh) for broken,
slow, duplicate and unnecessary references.
"""
from pagecheck.core import analyze_page, analyze_resources
from pagecheck.dispatch import dispatch
from pagecheck.fetch import PageFetchError
from pagecheck.models import (
    AnalysisReport,
    AnalysisSummary,
    CheckerConfig,
    ProbeOutcome,
    ResourceReference,
    ResourceResult,
    build_references,
)
from pagecheck.probe import Prober
from pagecheck.urls import is_skippable, resolve_url

__version__ = "1.0.0"
__all__ = [
    "analyze_page",
    "analyze_resources",
    "dispatch",
    "PageFetchError",
    "AnalysisReport",
    "AnalysisSummary",
    "CheckerConfig",
    "ProbeOutcome",
    "ResourceReference",
    "ResourceResult",
    "build_references",
    "Prober",
    "is_skippable",
    "resolve_url",
]

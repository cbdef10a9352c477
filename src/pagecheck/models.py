"""
Data structures shared by the resource checker.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

RESOURCE_KINDS: frozenset[str] = frozenset((
    "anchor", "image", "script", "stylesheet", "iframe", "meta-refresh",
))

UNRESOLVED = "unresolved"
SKIPPED = "skipped"
CHECKED = "checked"
NOT_CHECKED = "not_checked"

NOTES: Dict[str, str] = {
    UNRESOLVED: "Could not resolve URL",
    SKIPPED: "Skippable (mailto/tel/javascript/#)",
    NOT_CHECKED: "Not checked (limit reached)",
}


@dataclass(slots=True, frozen=True)
class CheckerConfig:
    """Tunables for one analysis run."""
    request_timeout_ms: int = 10_000
    max_redirects: int = 5
    concurrency_limit: int = 8
    max_checkable_resources: int = 300
    slow_threshold_ms: int = 2_000
    user_agent: str = "PageResourceChecker/1.0"

    def __post_init__(self) -> None:
        if self.request_timeout_ms <= 0:
            raise ValueError(f"request_timeout_ms must be positive, got {self.request_timeout_ms}")
        if self.concurrency_limit <= 0:
            raise ValueError(f"concurrency_limit must be positive, got {self.concurrency_limit}")
        if self.max_redirects < 0:
            raise ValueError(f"max_redirects must not be negative, got {self.max_redirects}")
        if self.max_checkable_resources < 0:
            raise ValueError(
                f"max_checkable_resources must not be negative, got {self.max_checkable_resources}"
            )
        if self.slow_threshold_ms < 0:
            raise ValueError(f"slow_threshold_ms must not be negative, got {self.slow_threshold_ms}")

    @property
    def timeout_s(self) -> float:
        return self.request_timeout_ms / 1000.0


@dataclass(slots=True, frozen=True)
class ResourceReference:
    """One embedded reference found in the page markup."""
    id: str
    kind: str
    raw: Optional[str]


@dataclass(slots=True, frozen=True)
class ProbeOutcome:
    """Network health of a single URL."""
    succeeded: bool
    elapsed_ms: int
    http_status: Optional[int] = None
    error_message: Optional[str] = None

    @property
    def broken(self) -> bool:
        return not self.succeeded or (self.http_status is not None and self.http_status >= 400)


@dataclass(slots=True)
class ResourceResult:
    """A reference after resolution and, when checkable, probing."""
    reference: ResourceReference
    resolved_url: Optional[str]
    classification: str
    outcome: Optional[ProbeOutcome] = None
    duplicate_of: Optional[str] = None

    @property
    def id(self) -> str:
        return self.reference.id

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the report's wire field names."""
        outcome = self.outcome
        if self.classification == CHECKED and outcome is not None:
            status = "ok" if outcome.succeeded else "error"
        else:
            status = self.classification
        return {
            "id": self.reference.id,
            "type": self.reference.kind,
            "raw": self.reference.raw,
            "resolved": self.resolved_url,
            "skippable": self.classification == SKIPPED,
            "duplicateOf": self.duplicate_of,
            "status": status,
            "httpStatus": outcome.http_status if outcome else None,
            "timeMs": outcome.elapsed_ms if outcome else None,
            "error": outcome.error_message if outcome else None,
            "note": NOTES.get(self.classification),
        }


@dataclass(slots=True, frozen=True)
class AnalysisSummary:
    """Page-level counts derived from the final result list."""
    total: int = 0
    checked: int = 0
    broken: int = 0
    slow: int = 0
    duplicates: int = 0
    unnecessary: int = 0
    average_response_ms: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalResources": self.total,
            "checked": self.checked,
            "brokenCount": self.broken,
            "slowCount": self.slow,
            "duplicateCount": self.duplicates,
            "unnecessaryCount": self.unnecessary,
            "averageResponseMs": self.average_response_ms,
        }


@dataclass(slots=True, frozen=True)
class PageFetchInfo:
    """How the top-level page fetch went."""
    status: str
    http_status: Optional[int] = None
    time_ms: Optional[int] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "httpStatus": self.http_status,
            "timeMs": self.time_ms,
            "error": self.error,
        }


@dataclass(slots=True)
class AnalysisReport:
    """Everything the presentation layer needs for one page."""
    results: List[ResourceResult] = field(default_factory=list)
    summary: AnalysisSummary = field(default_factory=AnalysisSummary)
    recommendations: List[str] = field(default_factory=list)
    page_url: Optional[str] = None
    page_fetch: Optional[PageFetchInfo] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        if self.page_url is not None:
            payload["page"] = {
                "url": self.page_url,
                "fetch": self.page_fetch.to_dict() if self.page_fetch else None,
            }
        payload["summary"] = self.summary.to_dict()
        payload["recommendations"] = list(self.recommendations)
        payload["resources"] = [r.to_dict() for r in self.results]
        return payload


def build_references(pairs: Iterable[Tuple[str, Optional[str]]]) -> List[ResourceReference]:
    """Turn (kind, raw) pairs into references with ids unique to this run."""
    references = []
    for index, (kind, raw) in enumerate(pairs):
        if kind not in RESOURCE_KINDS:
            raise ValueError(f"Unknown resource kind: {kind!r}")
        references.append(ResourceReference(id=f"r{index}", kind=kind, raw=raw))
    return references

"""
Check run domain objects for ghchecks.

CheckRun is an immutable snapshot of one CI job's result for a commit,
fetched fresh on every invocation. CheckRunPage is one page of the
GitHub listing, and StatusSummary is the aggregated view handed to
the renderer.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any, Tuple


class CheckStatus(Enum):
    """Lifecycle state of a check run."""
    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

    @classmethod
    def from_api(cls, value: Optional[str]) -> 'CheckStatus':
        # GitHub also reports waiting/requested/pending; all are "not started"
        if value == "completed":
            return cls.COMPLETED
        if value == "in_progress":
            return cls.IN_PROGRESS
        return cls.QUEUED


class CheckConclusion(Enum):
    """Outcome of a completed check run."""
    SUCCESS = "success"
    FAILURE = "failure"
    NEUTRAL = "neutral"
    CANCELLED = "cancelled"
    TIMED_OUT = "timed_out"
    ACTION_REQUIRED = "action_required"
    SKIPPED = "skipped"
    STALE = "stale"

    @classmethod
    def from_api(cls, value: Optional[str]) -> Optional['CheckConclusion']:
        if not value:
            return None
        try:
            return cls(value)
        except ValueError:
            return None


# Conclusions that make the overall summary fail
FAILING_CONCLUSIONS = frozenset({
    CheckConclusion.FAILURE,
    CheckConclusion.TIMED_OUT,
    CheckConclusion.ACTION_REQUIRED,
})


class OverallStatus(Enum):
    """Summary classification of a set of check runs."""
    ALL_PASSED = "all_passed"
    SOME_FAILED = "some_failed"
    PENDING = "pending"
    NO_RUNS = "no_runs"


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a GitHub ISO-8601 timestamp (with trailing 'Z')."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        return None


def _format_timestamp(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class CheckRun:
    """A single check run for a commit."""
    id: int
    name: str
    status: CheckStatus
    conclusion: Optional[CheckConclusion] = None
    details_url: str = ""
    html_url: str = ""
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @classmethod
    def from_api_response(cls, data: Dict[str, Any]) -> 'CheckRun':
        """Create from one entry of the GitHub check-runs listing."""
        return cls(
            id=int(data['id']),
            name=data.get('name', ''),
            status=CheckStatus.from_api(data.get('status')),
            conclusion=CheckConclusion.from_api(data.get('conclusion')),
            details_url=data.get('details_url') or '',
            html_url=data.get('html_url') or '',
            started_at=parse_timestamp(data.get('started_at')),
            completed_at=parse_timestamp(data.get('completed_at')),
        )

    @property
    def is_completed(self) -> bool:
        return self.status == CheckStatus.COMPLETED

    @property
    def is_failing(self) -> bool:
        return self.is_completed and self.conclusion in FAILING_CONCLUSIONS

    @property
    def url(self) -> str:
        """Best URL to open for this run."""
        return self.html_url or self.details_url

    @property
    def state_label(self) -> str:
        """Conclusion when completed, otherwise the status."""
        if self.is_completed and self.conclusion is not None:
            return self.conclusion.value
        return self.status.value

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'status': self.status.value,
            'conclusion': self.conclusion.value if self.conclusion else None,
            'details_url': self.details_url,
            'html_url': self.html_url,
            'started_at': _format_timestamp(self.started_at),
            'completed_at': _format_timestamp(self.completed_at),
        }


@dataclass(frozen=True)
class CheckRunPage:
    """One page of check runs as returned by the API."""
    runs: Tuple[CheckRun, ...]
    total_count: int
    next_page_token: Optional[str] = None

    @property
    def has_next(self) -> bool:
        return self.next_page_token is not None


@dataclass(frozen=True)
class StatusSummary:
    """Deduplicated, ordered check runs plus their overall classification."""
    runs: Tuple[CheckRun, ...]
    overall: OverallStatus

    def __len__(self) -> int:
        return len(self.runs)

    def counts(self) -> Dict[str, int]:
        """Number of runs per state label, in first-seen order."""
        counts: Dict[str, int] = {}
        for run in self.runs:
            label = run.state_label
            counts[label] = counts.get(label, 0) + 1
        return counts

    def find(self, name: str) -> Optional[CheckRun]:
        """Find a run by exact name, falling back to a case-insensitive match."""
        for run in self.runs:
            if run.name == name:
                return run
        lowered = name.lower()
        for run in self.runs:
            if run.name.lower() == lowered:
                return run
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'overall': self.overall.value,
            'total': len(self.runs),
            'counts': self.counts(),
        }

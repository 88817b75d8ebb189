"""
Check run aggregation for ghchecks.

Folds pages of check runs into one StatusSummary.
"""

from typing import Dict, Iterable, Sequence

from ..domain import (
    CheckRun,
    CheckRunPage,
    OverallStatus,
    StatusSummary,
)


def overall_status(runs: Sequence[CheckRun]) -> OverallStatus:
    """
    Classify a set of check runs.

    Precedence: no runs, then anything unfinished, then any failing
    conclusion (failure, timed_out, action_required). Neutral,
    cancelled and skipped runs do not fail the summary on their own.
    """
    if not runs:
        return OverallStatus.NO_RUNS
    if any(not run.is_completed for run in runs):
        return OverallStatus.PENDING
    if any(run.is_failing for run in runs):
        return OverallStatus.SOME_FAILED
    return OverallStatus.ALL_PASSED


def aggregate(pages: Iterable[CheckRunPage]) -> StatusSummary:
    """
    Flatten pages into a deduplicated, ordered summary.

    Runs keep the position they were first seen at; when an id appears
    again, the later snapshot replaces the earlier one.
    """
    by_id: Dict[int, CheckRun] = {}
    for page in pages:
        for run in page.runs:
            by_id[run.id] = run

    runs = tuple(by_id.values())
    return StatusSummary(runs=runs, overall=overall_status(runs))

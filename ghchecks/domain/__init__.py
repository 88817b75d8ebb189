"""
Domain layer for ghchecks.

Contains pure domain objects with no I/O or side effects:
- RepositoryIdentity: GitHub owner/name pair
- RefSpec: The commit or branch whose check runs are queried
- Credential: A GitHub access token
- CheckRun, CheckRunPage, StatusSummary: Check run results

These objects are immutable and provide serialization methods
for JSONL output.
"""

from .repository import RepositoryIdentity, RefSpec, RefKind, is_valid_slug
from .check_run import (
    CheckRun,
    CheckRunPage,
    CheckStatus,
    CheckConclusion,
    OverallStatus,
    StatusSummary,
    FAILING_CONCLUSIONS,
)
from .credential import Credential

__all__ = [
    'RepositoryIdentity',
    'RefSpec',
    'RefKind',
    'is_valid_slug',
    'CheckRun',
    'CheckRunPage',
    'CheckStatus',
    'CheckConclusion',
    'OverallStatus',
    'StatusSummary',
    'FAILING_CONCLUSIONS',
    'Credential',
]

"""
ghchecks - GitHub check runs for the commit you have checked out.

Quick Start:
    import ghchecks

    checks = ghchecks.GHChecks()

    # Current directory: repository from `origin`, commit from HEAD
    identity, ref, summary = checks.status()
    print(summary.overall.value)

    # Or explicitly
    identity, ref, summary = checks.status(owner="octocat", repo="hello-world",
                                           ref="main")
    for run in summary.runs:
        print(run.name, run.state_label, run.url)

Domain Objects:
    RepositoryIdentity - GitHub owner/name
    RefSpec - Commit or branch being queried
    CheckRun - One CI job result
    StatusSummary - Deduplicated runs plus overall verdict

Services:
    StatusService - Resolve, authenticate, fetch and aggregate
    CredentialStore - Stored token and device-flow login
"""

__version__ = "0.3.0"

from .api import GHChecks
from .domain import (
    RepositoryIdentity,
    RefSpec,
    RefKind,
    Credential,
    CheckRun,
    CheckRunPage,
    CheckStatus,
    CheckConclusion,
    OverallStatus,
    StatusSummary,
)
from .services import StatusService, CredentialStore, DeviceFlow, aggregate
from .config import load_config

__all__ = [
    "__version__",
    "GHChecks",
    "RepositoryIdentity",
    "RefSpec",
    "RefKind",
    "Credential",
    "CheckRun",
    "CheckRunPage",
    "CheckStatus",
    "CheckConclusion",
    "OverallStatus",
    "StatusSummary",
    "StatusService",
    "CredentialStore",
    "DeviceFlow",
    "aggregate",
    "load_config",
]

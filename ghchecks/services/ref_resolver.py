"""
Ref resolution for ghchecks.

Works out which commit to ask GitHub about: an explicit --ref, or
the commit HEAD points at.
"""

import logging
from typing import Optional

from ..domain import RefSpec, RefKind
from ..exit_codes import NoCommitsYet, RepositoryUnresolved
from ..infra import GitClient

logger = logging.getLogger(__name__)


def resolve_ref(
    git: GitClient,
    path: Optional[str] = None,
    ref: Optional[str] = None,
) -> RefSpec:
    """
    Produce the RefSpec to query.

    Args:
        git: Git client used to read local state
        path: Working copy path (None for the current directory)
        ref: Explicit --ref override (SHA or branch name)

    Returns:
        RefSpec; for HEAD, the full SHA with the branch name as display name

    Raises:
        NoCommitsYet: when HEAD does not resolve to a commit
        RepositoryUnresolved: when path is not inside a git working copy
    """
    if ref is not None and ref.strip():
        return RefSpec.parse(ref)

    if not git.is_git_repo(path):
        raise RepositoryUnresolved(
            f"{path or 'The current directory'} is not a git repository"
        )

    sha = git.head_sha(path)
    if not sha:
        raise NoCommitsYet()

    branch = git.head_ref_name(path)
    logger.debug(f"Found git ref for current branch: {sha} ({branch or 'detached'})")
    return RefSpec(value=sha, kind=RefKind.SHA, display_name=branch or sha[:7])

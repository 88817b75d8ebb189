"""
Repository resolution for ghchecks.

Derives the GitHub owner/repo pair from the git remote configuration,
with explicit --owner/--repo flags taking precedence. Pure parsing over
the strings handed in; the git lookup happens in the caller.
"""

import re
import logging
from typing import Optional, Tuple, Mapping
from urllib.parse import urlsplit

from ..domain import RepositoryIdentity, is_valid_slug
from ..exit_codes import RepositoryUnresolved

logger = logging.getLogger(__name__)

DEFAULT_REMOTE = "origin"

GITHUB_HOST = 'github.com'

# git@github.com:owner/repo.git (scp-like syntax, no scheme)
SCP_LIKE_PATTERN = re.compile(r'^(?:[^@/\s]+@)?(?P<host>[^:/\s]+):(?P<path>[^/\s].*)$')

URL_SCHEMES = {'https', 'http', 'ssh', 'git', 'git+ssh', 'ssh+git'}


def _split_path(path: str) -> Optional[Tuple[str, str]]:
    path = path.strip('/')
    if path.endswith('.git'):
        path = path[:-len('.git')]
    parts = path.split('/')
    if len(parts) != 2:
        return None
    owner, name = parts
    if not (is_valid_slug(owner) and is_valid_slug(name)):
        return None
    return owner, name


def parse_github_remote(url: str) -> Optional[Tuple[str, str]]:
    """
    Parse a git remote URL into (owner, repo).

    Handles:
        git@github.com:owner/repo.git
        ssh://git@github.com/owner/repo.git
        https://github.com/owner/repo(.git)

    Returns:
        (owner, repo) or None when the URL is not a GitHub repository URL
    """
    if not url:
        return None
    url = url.strip()

    if '://' in url:
        parts = urlsplit(url)
        if parts.scheme.lower() not in URL_SCHEMES:
            return None
        host = (parts.hostname or '').lower()
        path = parts.path
    else:
        match = SCP_LIKE_PATTERN.match(url)
        if not match:
            return None
        host = match.group('host').lower()
        path = match.group('path')

    if host != GITHUB_HOST:
        logger.debug(f"Remote host {host!r} is not GitHub: {url}")
        return None

    return _split_path(path)


def resolve_repository(
    remotes: Mapping[str, str],
    owner: Optional[str] = None,
    repo: Optional[str] = None,
    remote: str = DEFAULT_REMOTE,
) -> RepositoryIdentity:
    """
    Produce the RepositoryIdentity to query.

    Args:
        remotes: Configured remotes, name -> URL
        owner: Explicit --owner override
        repo: Explicit --repo override
        remote: Remote whose URL is parsed

    Returns:
        RepositoryIdentity

    Raises:
        RepositoryUnresolved: when neither the flags nor the remote
            yield a valid owner and repository name
    """
    if owner is not None and not is_valid_slug(owner):
        raise RepositoryUnresolved(f"Invalid GitHub owner: {owner!r}")
    if repo is not None and not is_valid_slug(repo):
        raise RepositoryUnresolved(f"Invalid GitHub repository name: {repo!r}")

    if owner and repo:
        return RepositoryIdentity(owner=owner, name=repo)

    url = remotes.get(remote)
    if not url:
        raise RepositoryUnresolved(
            f"No `{remote}` remote is configured. Please supply the owner and "
            f"repository name manually with `--owner` and `--repo`"
        )

    parsed = parse_github_remote(url)
    if parsed is None:
        raise RepositoryUnresolved(
            f"Unable to parse git remote {url!r} as a GitHub repository. Please supply "
            f"the owner and repository name manually with `--owner` and `--repo`"
        )

    parsed_owner, parsed_repo = parsed
    identity = RepositoryIdentity(owner=owner or parsed_owner, name=repo or parsed_repo)
    logger.debug(f"Resolved repository {identity} from {remote} remote")
    return identity

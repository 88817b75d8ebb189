"""
Status service for ghchecks.

Ties the pipeline together: resolve repository and ref, make sure we
are allowed to look, list the check runs and aggregate them.

Authentication policy:
- With no stored credential, an anonymous request is tried first.
  An anonymous 404 is not trusted (private repositories look missing),
  so it leads to login and one authenticated retry.
- A 401 drops the credential, logs in again and retries the listing
  exactly once. A token that was just issued by the login is not
  replaced; its rejection is final.
- An authenticated 404 is checked against the repository lookup to
  tell a missing repository from a commit GitHub has not seen.
"""

import logging
from typing import Optional, Tuple

from ..domain import Credential, RefSpec, RepositoryIdentity, StatusSummary
from ..exit_codes import (
    AuthenticationExpired,
    AuthorizationFailed,
    CommitNotFound,
    RepositoryNotFound,
)
from ..infra import GitClient, GitHubClient
from .aggregator import aggregate
from .credential_service import CredentialStore
from .ref_resolver import resolve_ref
from .remote_resolver import resolve_repository, DEFAULT_REMOTE

logger = logging.getLogger(__name__)


class StatusService:
    """
    Service for fetching the check-run status of a commit.

    Example:
        service = StatusService(GitHubClient(), credentials)
        identity, ref = service.resolve(path=".")
        summary = service.fetch_status(identity, ref)
        print(summary.overall)
    """

    def __init__(
        self,
        github: GitHubClient,
        credentials: CredentialStore,
        git: Optional[GitClient] = None,
        remote: str = DEFAULT_REMOTE,
    ):
        self.github = github
        self.credentials = credentials
        self.git = git or GitClient()
        self.remote = remote

    def resolve(
        self,
        path: Optional[str] = None,
        owner: Optional[str] = None,
        repo: Optional[str] = None,
        ref: Optional[str] = None,
    ) -> Tuple[RepositoryIdentity, RefSpec]:
        """
        Resolve what to query from flags and local git state.

        Raises:
            RepositoryUnresolved, NoCommitsYet
        """
        # Explicit flags make the remote lookup unnecessary
        remotes = {} if (owner and repo) else self.git.remotes(path)
        identity = resolve_repository(remotes, owner=owner, repo=repo, remote=self.remote)
        ref_spec = resolve_ref(self.git, path, ref)
        return identity, ref_spec

    def _list(
        self,
        identity: RepositoryIdentity,
        ref: RefSpec,
        credential: Optional[Credential],
    ) -> StatusSummary:
        return aggregate(self.github.list_check_runs(identity, ref, credential))

    def _not_found(
        self,
        identity: RepositoryIdentity,
        ref: RefSpec,
        credential: Credential,
    ) -> Exception:
        repository = self.github.get_repository(identity, credential)
        if repository is not None:
            return CommitNotFound(
                f"{ref.label} was not found in {identity}. Has it been pushed?"
            )
        return RepositoryNotFound(
            f"Repository {identity} was not found, or your GitHub account has no access to it"
        )

    def _list_authenticated(
        self,
        identity: RepositoryIdentity,
        ref: RefSpec,
        credential: Credential,
    ) -> StatusSummary:
        try:
            return self._list(identity, ref, credential)
        except RepositoryNotFound:
            raise self._not_found(identity, ref, credential)

    def fetch_status(self, identity: RepositoryIdentity, ref: RefSpec) -> StatusSummary:
        """
        Fetch and aggregate all check runs for ref.

        Raises:
            AuthorizationFailed: login failed, or a fresh token was rejected
            RepositoryNotFound, CommitNotFound, RateLimited,
            NetworkFailure, APIError
        """
        logger.debug(f"Fetching check runs for {identity}@{ref.value}")
        credential = self.credentials.load()

        if credential is None:
            try:
                return self._list(identity, ref, None)
            except RepositoryNotFound:
                logger.info(
                    f"{identity} is not visible anonymously; it may be private. Logging in"
                )
                credential = self.credentials.ensure_authenticated()

        try:
            return self._list_authenticated(identity, ref, credential)
        except AuthenticationExpired:
            # The credential file is written at most once per run
            if self.credentials.source == 'login':
                raise AuthorizationFailed(
                    "GitHub rejected the access token issued by the login",
                    reason="rejected",
                )
            logger.info("GitHub rejected the access token; re-authenticating")

        self.credentials.invalidate()
        credential = self.credentials.ensure_authenticated()
        try:
            return self._list_authenticated(identity, ref, credential)
        except AuthenticationExpired:
            raise AuthorizationFailed(
                "GitHub rejected the access token even after logging in again",
                reason="rejected",
            )

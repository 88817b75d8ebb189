"""
High-level Python API for ghchecks.

Wires configuration, infrastructure and services together.

Example:
    import ghchecks

    checks = ghchecks.GHChecks()
    identity, ref, summary = checks.status(path=".")
    print(identity, ref.label, summary.overall.value)
    for run in summary.runs:
        print(run.name, run.state_label)
"""

import logging
import webbrowser
from typing import Optional, Dict, Any, Callable, Tuple

from .config import load_config, get_credentials_path
from .domain import Credential, RefSpec, RepositoryIdentity, StatusSummary
from .infra import FileStore, GitClient, GitHubClient, OAuthClient, DeviceCode
from .services import CredentialStore, DeviceFlow, StatusService

logger = logging.getLogger(__name__)


def open_url(url: str) -> bool:
    """
    Open url in the user's default browser.

    Returns:
        True if a browser was launched
    """
    try:
        return webbrowser.open(url)
    except webbrowser.Error as e:
        logger.debug(f"Could not open browser for {url}: {e}")
        return False


def create_github_client(config: Dict[str, Any]) -> GitHubClient:
    """Build the Checks API client from the github config section."""
    github = config.get('github', {})
    rate_limit = github.get('rate_limit', {})
    return GitHubClient(
        api_url=github.get('api_url', 'https://api.github.com'),
        max_attempts=int(rate_limit.get('max_retries', 3)),
        base_delay=float(rate_limit.get('base_delay_seconds', 1.0)),
        max_delay=float(rate_limit.get('max_delay_seconds', 60)),
        per_page=int(github.get('per_page', 100)),
        timeout=float(github.get('timeout_seconds', 30)),
    )


def create_device_flow(
    config: Dict[str, Any],
    on_prompt: Optional[Callable[[DeviceCode], None]] = None,
) -> DeviceFlow:
    """Build the device authorization flow from config."""
    github = config.get('github', {})
    auth = config.get('auth', {})
    oauth = OAuthClient(
        client_id=github.get('client_id'),
        oauth_url=github.get('oauth_url', 'https://github.com'),
        timeout=float(github.get('timeout_seconds', 30)),
    )
    timeout = auth.get('timeout_seconds')
    return DeviceFlow(
        oauth,
        scopes=github.get('scopes') or ['repo'],
        on_prompt=on_prompt,
        timeout=float(timeout) if timeout else None,
    )


def create_credential_store(
    config: Dict[str, Any],
    on_prompt: Optional[Callable[[DeviceCode], None]] = None,
) -> CredentialStore:
    """Build the credential store backed by the configured credentials file."""
    return CredentialStore(
        FileStore(get_credentials_path(config)),
        device_flow=create_device_flow(config, on_prompt=on_prompt),
    )


class GHChecks:
    """
    High-level API for ghchecks.

    Example:
        checks = GHChecks()
        identity, ref, summary = checks.status(owner="octocat", repo="hello-world",
                                               ref="main")
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        on_prompt: Optional[Callable[[DeviceCode], None]] = None,
        git_client: Optional[GitClient] = None,
        github_client: Optional[GitHubClient] = None,
        credentials: Optional[CredentialStore] = None,
    ):
        """
        Initialize GHChecks.

        Args:
            config: Configuration dict (loads from file if None)
            on_prompt: Called with the device codes when login is needed
            git_client: Git client (default created)
            github_client: GitHub client (built from config if None)
            credentials: Credential store (built from config if None)
        """
        self.config = config if config is not None else load_config()
        self.credentials = credentials or create_credential_store(self.config, on_prompt)
        self.status_service = StatusService(
            github_client or create_github_client(self.config),
            self.credentials,
            git=git_client or GitClient(),
        )

    def resolve(
        self,
        path: Optional[str] = None,
        owner: Optional[str] = None,
        repo: Optional[str] = None,
        ref: Optional[str] = None,
    ) -> Tuple[RepositoryIdentity, RefSpec]:
        """Work out which repository and commit to query."""
        return self.status_service.resolve(path=path, owner=owner, repo=repo, ref=ref)

    def status(
        self,
        path: Optional[str] = None,
        owner: Optional[str] = None,
        repo: Optional[str] = None,
        ref: Optional[str] = None,
    ) -> Tuple[RepositoryIdentity, RefSpec, StatusSummary]:
        """Resolve the target and fetch its aggregated check runs."""
        identity, ref_spec = self.resolve(path=path, owner=owner, repo=repo, ref=ref)
        summary = self.status_service.fetch_status(identity, ref_spec)
        return identity, ref_spec, summary

    def login(self) -> Credential:
        """Run the device flow and store the new token."""
        return self.credentials.login()

    def logout(self) -> bool:
        """Remove the stored token. Returns True if one existed."""
        return self.credentials.logout()

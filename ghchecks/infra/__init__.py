"""
Infrastructure layer for ghchecks.

Contains abstractions for external systems:
- GitClient: Git command execution (read-only)
- GitHubClient: GitHub Checks API access
- OAuthClient: GitHub OAuth device-flow endpoints
- FileStore: JSON file persistence for the stored credential

These provide clean interfaces that can be mocked for testing.
"""

from .git_client import GitClient
from .github_client import GitHubClient, RateLimitStatus
from .oauth_client import OAuthClient, DeviceCode
from .file_store import FileStore

__all__ = [
    'GitClient',
    'GitHubClient',
    'RateLimitStatus',
    'OAuthClient',
    'DeviceCode',
    'FileStore',
]

"""
GitHub API client infrastructure for ghchecks.

Provides a clean abstraction over the GitHub Checks REST API:
- Lists check runs for a ref as a lazy sequence of pages
- Follows Link-header pagination
- Retries transient failures (network errors, 5xx, rate limiting)
  a bounded number of times, honoring server-specified delays
"""

import time
import logging
from dataclasses import dataclass
from typing import Optional, Dict, Any, Iterator, Callable
from urllib.parse import quote

import requests

from ..domain import CheckRun, CheckRunPage, Credential, RefSpec, RepositoryIdentity
from ..exit_codes import (
    APIError,
    AuthenticationExpired,
    CommitNotFound,
    NetworkFailure,
    RateLimited,
    RepositoryNotFound,
)

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
API_VERSION = "2022-11-28"
USER_AGENT = "ghchecks"


@dataclass
class RateLimitStatus:
    """GitHub API rate limit status."""
    remaining: int
    limit: int
    reset_time: int  # Unix timestamp
    used: int

    @property
    def minutes_until_reset(self) -> int:
        """Minutes until rate limit resets."""
        now = int(time.time())
        return max(0, (self.reset_time - now) // 60)

    @property
    def is_low(self) -> bool:
        """Check if rate limit is getting low (< 10 remaining)."""
        return self.remaining < 10


class GitHubClient:
    """
    GitHub Checks API client with bounded retries.

    The client holds no credential; every call takes the credential
    to use (None for an anonymous request).

    Example:
        client = GitHubClient()
        for page in client.list_check_runs(identity, ref, credential):
            for run in page.runs:
                print(run.name, run.state_label)
    """

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 60.0,
        per_page: int = 100,
        timeout: float = 30,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize GitHubClient.

        Args:
            api_url: Base URL of the GitHub REST API
            max_attempts: Attempts per request before giving up
            base_delay: Base delay for exponential backoff
            max_delay: Longest server-requested wait we are willing to honor
            per_page: Page size for listings (GitHub caps this at 100)
            timeout: Per-request timeout in seconds
            session: requests session to use (created if omitted)
            sleep: Sleep function, replaced in tests
            clock: Wall clock in Unix seconds, replaced in tests
        """
        self.api_url = api_url.rstrip('/')
        self.max_attempts = max(1, max_attempts)
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.per_page = per_page
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            'Accept': 'application/vnd.github+json',
            'User-Agent': USER_AGENT,
            'X-GitHub-Api-Version': API_VERSION,
        })
        self._sleep = sleep
        self._clock = clock
        self._rate_limit_status: Optional[RateLimitStatus] = None

    def _headers(self, credential: Optional[Credential]) -> Dict[str, str]:
        if credential is None:
            return {}
        return {'Authorization': f'Bearer {credential.token}'}

    def _update_rate_limit_from_headers(self, headers) -> None:
        """Update rate limit status from response headers."""
        try:
            remaining = int(headers.get('X-RateLimit-Remaining', -1))
            limit = int(headers.get('X-RateLimit-Limit', -1))
            reset_time = int(headers.get('X-RateLimit-Reset', 0))
            used = int(headers.get('X-RateLimit-Used', 0))
        except (ValueError, TypeError):
            return

        if remaining >= 0 and limit >= 0:
            self._rate_limit_status = RateLimitStatus(
                remaining=remaining,
                limit=limit,
                reset_time=reset_time,
                used=used
            )

            if self._rate_limit_status.is_low:
                logger.warning(
                    f"GitHub API rate limit low: {remaining}/{limit} remaining, "
                    f"resets in {self._rate_limit_status.minutes_until_reset} minutes"
                )

    def get_rate_limit_status(self) -> Optional[RateLimitStatus]:
        """Rate limit status seen on the last response, if any."""
        return self._rate_limit_status

    def _backoff(self, attempt: int) -> float:
        return min(self.base_delay * (2 ** attempt), self.max_delay)

    @staticmethod
    def _is_rate_limited(response: requests.Response) -> bool:
        if response.status_code == 429:
            return True
        if response.status_code == 403:
            if response.headers.get('Retry-After'):
                return True
            return response.headers.get('X-RateLimit-Remaining') == '0'
        return False

    def _rate_limit_delay(self, response: requests.Response, attempt: int) -> float:
        """Seconds the server asked us to wait, or exponential backoff."""
        retry_after = response.headers.get('Retry-After')
        if retry_after:
            try:
                return max(0.0, float(retry_after))
            except ValueError:
                pass

        reset_time = response.headers.get('X-RateLimit-Reset')
        if reset_time:
            try:
                return max(0.0, float(reset_time) - self._clock())
            except ValueError:
                pass

        return self._backoff(attempt)

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            return (response.text or '').strip()[:200] or response.reason or ''
        if isinstance(data, dict) and data.get('message'):
            return str(data['message'])
        return response.reason or ''

    def _request(
        self,
        method: str,
        url: str,
        credential: Optional[Credential] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> requests.Response:
        """
        Issue one logical request, retrying transient failures.

        Returns the response for any status below 500 that is neither
        a 401 nor rate limiting; callers interpret 4xx themselves.

        Raises:
            AuthenticationExpired: on 401
            RateLimited: when rate limiting outlasts the retry budget
            NetworkFailure: when network errors or 5xx exhaust the retries
        """
        last_error = "no response"
        rate_limited = False
        retry_after: Optional[float] = None

        for attempt in range(self.max_attempts):
            is_last = attempt == self.max_attempts - 1
            try:
                response = self.session.request(
                    method,
                    url,
                    headers=self._headers(credential),
                    params=params,
                    timeout=self.timeout,
                )
            except (requests.ConnectionError, requests.Timeout) as e:
                logger.warning(f"GitHub API request failed: {e}")
                last_error = str(e)
                rate_limited = False
                if not is_last:
                    self._sleep(self._backoff(attempt))
                continue

            self._update_rate_limit_from_headers(response.headers)

            if response.status_code == 401:
                raise AuthenticationExpired(
                    f"GitHub rejected the access token: {self._error_message(response)}"
                )

            if self._is_rate_limited(response):
                delay = self._rate_limit_delay(response, attempt)
                retry_after = delay
                if delay > self.max_delay:
                    raise RateLimited(
                        f"GitHub rate limit exceeded; retry in {int(delay)}s",
                        retry_after=delay,
                    )
                rate_limited = True
                last_error = self._error_message(response)
                if not is_last:
                    logger.info(f"Rate limited, waiting {delay:.0f}s (attempt {attempt + 1})")
                    self._sleep(delay)
                continue

            if response.status_code >= 500:
                rate_limited = False
                last_error = f"HTTP {response.status_code}: {self._error_message(response)}"
                logger.warning(f"GitHub API error {response.status_code} for {url}")
                if not is_last:
                    self._sleep(self._backoff(attempt))
                continue

            return response

        if rate_limited:
            raise RateLimited(
                f"GitHub rate limit exceeded after {self.max_attempts} attempts",
                retry_after=retry_after,
            )
        raise NetworkFailure(
            f"GitHub API request failed after {self.max_attempts} attempts: {last_error}"
        )

    def _check_runs_url(self, identity: RepositoryIdentity, ref: RefSpec) -> str:
        return (f"{self.api_url}/repos/{identity.owner}/{identity.name}"
                f"/commits/{quote(ref.value, safe='')}/check-runs")

    @staticmethod
    def _parse_page(response: requests.Response) -> CheckRunPage:
        try:
            data = response.json()
        except ValueError as e:
            raise APIError(f"GitHub returned invalid JSON: {e}", response.status_code)
        if not isinstance(data, dict) or not isinstance(data.get('check_runs', []), list):
            raise APIError("GitHub returned an unexpected check runs payload", response.status_code)

        try:
            runs = tuple(
                CheckRun.from_api_response(item)
                for item in data.get('check_runs', [])
            )
            total_count = int(data.get('total_count', len(runs)))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise APIError(f"GitHub returned a malformed check run: {e}", response.status_code)

        next_url = (response.links or {}).get('next', {}).get('url')
        return CheckRunPage(
            runs=runs,
            total_count=total_count,
            next_page_token=next_url,
        )

    def list_check_runs(
        self,
        identity: RepositoryIdentity,
        ref: RefSpec,
        credential: Optional[Credential] = None,
    ) -> Iterator[CheckRunPage]:
        """
        List check runs for a ref, one page per request.

        The returned generator fetches pages on demand and is not
        replayable; call again to start over.

        Args:
            identity: Repository to query
            ref: Commit SHA or branch name
            credential: Token to use, or None for an anonymous request

        Yields:
            CheckRunPage objects until GitHub reports no next page

        Raises:
            RepositoryNotFound: on 404
            CommitNotFound: on 422 (GitHub does not know the ref)
            AuthenticationExpired: on 401
        """
        url: Optional[str] = self._check_runs_url(identity, ref)
        params: Optional[Dict[str, Any]] = {'per_page': self.per_page}
        page_number = 0

        while url:
            page_number += 1
            logger.debug(f"Fetching check runs page {page_number} for {identity}@{ref.value}")
            response = self._request('GET', url, credential, params=params)

            if response.status_code == 404:
                raise RepositoryNotFound(
                    f"Repository {identity} not found (or not visible with the current credentials)"
                )
            if response.status_code == 422:
                raise CommitNotFound(
                    f"GitHub does not know {ref.label} in {identity}. Has it been pushed?"
                )
            if response.status_code >= 400:
                raise APIError(
                    f"GitHub API error {response.status_code}: {self._error_message(response)}",
                    response.status_code,
                )

            page = self._parse_page(response)
            yield page
            if not page.has_next:
                return

            # The next link already carries per_page and page
            url = page.next_page_token
            params = None

    def get_repository(
        self,
        identity: RepositoryIdentity,
        credential: Optional[Credential] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Look up repository metadata.

        Returns:
            Repository JSON, or None if not found / not visible
        """
        url = f"{self.api_url}/repos/{identity.owner}/{identity.name}"
        response = self._request('GET', url, credential)
        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            raise APIError(
                f"GitHub API error {response.status_code}: {self._error_message(response)}",
                response.status_code,
            )
        try:
            data = response.json()
        except ValueError as e:
            raise APIError(f"GitHub returned invalid JSON: {e}", response.status_code)
        if not isinstance(data, dict):
            raise APIError("GitHub returned an unexpected repository payload", response.status_code)
        return data

"""
GitHub OAuth device-flow endpoints for ghchecks.

Thin HTTP wrapper over:
- POST {oauth_url}/login/device/code
- POST {oauth_url}/login/oauth/access_token

The polling state machine lives in services.device_flow; this module
only moves JSON over the wire.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Dict, Any, Sequence

import requests

from ..exit_codes import AuthorizationFailed

logger = logging.getLogger(__name__)

DEFAULT_OAUTH_URL = "https://github.com"
DEVICE_GRANT_TYPE = "urn:ietf:params:oauth:grant-type:device_code"


@dataclass(frozen=True)
class DeviceCode:
    """Codes returned when a device authorization is started."""
    device_code: str
    user_code: str
    verification_uri: str
    expires_in: int
    interval: int

    @classmethod
    def from_api_response(cls, data: Dict[str, Any]) -> 'DeviceCode':
        try:
            return cls(
                device_code=data['device_code'],
                user_code=data['user_code'],
                verification_uri=data['verification_uri'],
                expires_in=int(data.get('expires_in', 900)),
                interval=int(data.get('interval', 5)),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise AuthorizationFailed(f"Unexpected device code response from GitHub: {e}")


class OAuthClient:
    """
    Client for GitHub's OAuth device authorization endpoints.

    Example:
        client = OAuthClient(client_id="Iv1.abc")
        codes = client.request_device_code(["repo"])
        response = client.poll_access_token(codes.device_code)
    """

    def __init__(
        self,
        client_id: str,
        oauth_url: str = DEFAULT_OAUTH_URL,
        timeout: float = 30,
        session: Optional[requests.Session] = None,
    ):
        self.client_id = client_id
        self.oauth_url = oauth_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            'Accept': 'application/json',
            'User-Agent': 'ghchecks',
        })

    def _post(self, path: str, data: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.oauth_url}{path}"
        try:
            response = self.session.post(url, data=data, timeout=self.timeout)
        except requests.RequestException as e:
            raise AuthorizationFailed(f"Could not reach GitHub: {e}")

        try:
            payload = response.json()
        except ValueError:
            raise AuthorizationFailed(
                f"GitHub returned HTTP {response.status_code} without a JSON body"
            )
        if not isinstance(payload, dict):
            raise AuthorizationFailed(
                f"GitHub returned HTTP {response.status_code} with an unexpected JSON body"
            )

        # Device flow errors arrive as 200 with an "error" field; anything
        # else non-2xx without one is unexpected
        if response.status_code >= 400 and 'error' not in payload:
            raise AuthorizationFailed(
                f"GitHub returned HTTP {response.status_code}: {payload.get('message', '')}"
            )
        return payload

    def request_device_code(self, scopes: Sequence[str] = ("repo",)) -> DeviceCode:
        """Start a device authorization and return the codes to show the user."""
        payload = self._post('/login/device/code', {
            'client_id': self.client_id,
            'scope': ' '.join(scopes),
        })
        if 'error' in payload:
            raise AuthorizationFailed(
                f"GitHub refused the device code request: "
                f"{payload.get('error_description') or payload['error']}"
            )
        logger.debug(f"Device code issued, expires in {payload.get('expires_in')}s")
        return DeviceCode.from_api_response(payload)

    def poll_access_token(self, device_code: str) -> Dict[str, Any]:
        """
        Poll the token endpoint once.

        Returns:
            Raw JSON: either an access token response or one carrying
            an "error" field such as "authorization_pending"
        """
        return self._post('/login/oauth/access_token', {
            'client_id': self.client_id,
            'device_code': device_code,
            'grant_type': DEVICE_GRANT_TYPE,
        })

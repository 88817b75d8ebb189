"""
OAuth device authorization flow for ghchecks.

The user visits a verification URL and types a short code while we
poll GitHub's token endpoint. Polling is an explicit state machine:

    PENDING --authorization_pending/slow_down--> PENDING
    PENDING --access_token--> AUTHORIZED
    PENDING --expired_token--> EXPIRED
    PENDING --access_denied--> DENIED

Clock and sleep are injected so tests can drive the loop without
real waits.
"""

import time
import logging
from enum import Enum
from typing import Optional, Dict, Any, Tuple, Callable, Sequence

from ..domain import Credential
from ..exit_codes import AuthorizationFailed
from ..infra.oauth_client import OAuthClient, DeviceCode

logger = logging.getLogger(__name__)

# RFC 8628: slow_down adds 5 seconds to the polling interval
SLOW_DOWN_INCREMENT = 5


class FlowState(Enum):
    """States of the device-flow poller."""
    PENDING = "pending"
    AUTHORIZED = "authorized"
    EXPIRED = "expired"
    DENIED = "denied"


def next_state(response: Dict[str, Any], interval: int) -> Tuple[FlowState, int]:
    """
    Classify one token-endpoint response.

    Args:
        response: JSON body from the token endpoint
        interval: Current polling interval in seconds

    Returns:
        (state, interval to use before the next poll)

    Raises:
        AuthorizationFailed: for any error the flow cannot continue past
    """
    if not isinstance(response, dict):
        raise AuthorizationFailed("GitHub returned an unexpected token response")
    if response.get('access_token'):
        return FlowState.AUTHORIZED, interval

    error = response.get('error')
    if error == 'authorization_pending':
        return FlowState.PENDING, interval
    if error == 'slow_down':
        suggested = response.get('interval')
        try:
            suggested = int(suggested) if suggested is not None else None
        except (TypeError, ValueError):
            suggested = None
        if suggested is None or suggested <= interval:
            suggested = interval + SLOW_DOWN_INCREMENT
        return FlowState.PENDING, suggested
    if error == 'expired_token':
        return FlowState.EXPIRED, interval
    if error == 'access_denied':
        return FlowState.DENIED, interval

    description = response.get('error_description') or error or 'no access token in response'
    raise AuthorizationFailed(f"GitHub authorization failed: {description}", reason=error or 'failed')


class DeviceFlow:
    """
    Drives the device authorization flow to a Credential.

    Example:
        flow = DeviceFlow(OAuthClient(client_id), on_prompt=show_code)
        credential = flow.run()
    """

    def __init__(
        self,
        oauth: OAuthClient,
        scopes: Sequence[str] = ("repo",),
        on_prompt: Optional[Callable[[DeviceCode], None]] = None,
        timeout: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize DeviceFlow.

        Args:
            oauth: Client for the device-flow endpoints
            scopes: OAuth scopes to request
            on_prompt: Called with the codes so the user can be told what to do
            timeout: Overall time budget in seconds for the poll loop
            clock: Monotonic clock
            sleep: Sleep function
        """
        self.oauth = oauth
        self.scopes = tuple(scopes)
        self.on_prompt = on_prompt
        self.timeout = timeout
        self._clock = clock
        self._sleep = sleep

    def start(self) -> DeviceCode:
        """Request the device and user codes."""
        return self.oauth.request_device_code(self.scopes)

    def poll(self, codes: DeviceCode) -> Credential:
        """
        Poll the token endpoint until the flow leaves PENDING.

        The first poll is immediate; each PENDING answer sleeps for the
        current interval before polling again.

        Raises:
            AuthorizationFailed: on expiry, denial, timeout, interrupt,
                or an unexpected error response
        """
        started = self._clock()
        expires_at = started + codes.expires_in
        deadline = started + self.timeout if self.timeout else None
        interval = codes.interval
        state = FlowState.PENDING

        try:
            while state is FlowState.PENDING:
                response = self.oauth.poll_access_token(codes.device_code)
                state, interval = next_state(response, interval)
                logger.debug(f"Device flow state: {state.value} (interval {interval}s)")

                if state is FlowState.AUTHORIZED:
                    try:
                        return Credential.from_token_response(response)
                    except (TypeError, ValueError) as e:
                        raise AuthorizationFailed(f"GitHub returned a malformed access token: {e}")
                if state is not FlowState.PENDING:
                    break

                now = self._clock()
                if now >= expires_at:
                    state = FlowState.EXPIRED
                    break
                if deadline is not None and now + interval > deadline:
                    raise AuthorizationFailed(
                        "Timed out waiting for authorization", reason="cancelled"
                    )
                self._sleep(interval)
        except KeyboardInterrupt:
            raise AuthorizationFailed("Authorization cancelled", reason="cancelled")

        if state is FlowState.DENIED:
            raise AuthorizationFailed("Authorization was denied", reason="denied")
        raise AuthorizationFailed(
            "The device code expired before authorization completed. Run `ghchecks login` again",
            reason="expired",
        )

    def run(self) -> Credential:
        """Start the flow, prompt the user, and poll to completion."""
        try:
            codes = self.start()
        except KeyboardInterrupt:
            raise AuthorizationFailed("Authorization cancelled", reason="cancelled")
        if self.on_prompt is not None:
            self.on_prompt(codes)
        return self.poll(codes)

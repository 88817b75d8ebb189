"""
Credential service for ghchecks.

Owns the GitHub access token for one command invocation:
- Loads it once (environment token, then the credentials file)
- Runs the device authorization flow when none is usable
- Persists a newly issued token exactly once
- Drops a token GitHub has rejected so it can be replaced
"""

import os
import logging
from datetime import datetime, timezone
from typing import Optional, Callable, Mapping

from ..domain import Credential
from ..exit_codes import AuthorizationFailed
from ..infra import FileStore
from .device_flow import DeviceFlow

logger = logging.getLogger(__name__)

# Checked in order; the first one set wins over the credentials file
ENV_TOKEN_VARS = ('GHCHECKS_GITHUB_TOKEN', 'GITHUB_TOKEN')


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CredentialStore:
    """
    Holds and validates the GitHub credential.

    Example:
        store = CredentialStore(FileStore(path), device_flow=flow)
        credential = store.ensure_authenticated()
    """

    def __init__(
        self,
        file_store: FileStore,
        device_flow: Optional[DeviceFlow] = None,
        environ: Optional[Mapping[str, str]] = None,
        now: Callable[[], datetime] = _utcnow,
    ):
        """
        Initialize CredentialStore.

        Args:
            file_store: Where the credential is persisted
            device_flow: Flow used when a new token is needed
            environ: Environment to read tokens from (defaults to os.environ)
            now: Wall clock used for expiry checks
        """
        self.file_store = file_store
        self.device_flow = device_flow
        self.environ = os.environ if environ is None else environ
        self._now = now
        self._credential: Optional[Credential] = None
        self._source: Optional[str] = None
        self._loaded = False

    @property
    def source(self) -> Optional[str]:
        """Where the current credential came from: env, file or login."""
        return self._source

    def _load_from_env(self) -> Optional[Credential]:
        for var in ENV_TOKEN_VARS:
            token = self.environ.get(var)
            if token and token.strip():
                logger.debug(f"Using GitHub token from ${var}")
                return Credential(token=token.strip())
        return None

    def _load_from_file(self) -> Optional[Credential]:
        data = self.file_store.read()
        if data is None:
            return None
        try:
            credential = Credential.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Ignoring malformed credentials file {self.file_store.path}: {e}")
            return None

        if credential.is_expired(self._now()):
            logger.info("Stored GitHub token has expired")
            return None
        return credential

    def load(self) -> Optional[Credential]:
        """
        Load the credential, reading storage only on the first call.

        Returns:
            Credential, or None when no usable one exists
        """
        if self._loaded:
            return self._credential
        self._loaded = True

        credential = self._load_from_env()
        if credential is not None:
            self._credential, self._source = credential, 'env'
            return credential

        credential = self._load_from_file()
        if credential is not None:
            self._credential, self._source = credential, 'file'
        return credential

    def login(self) -> Credential:
        """
        Run the device flow and persist the resulting token.

        Raises:
            AuthorizationFailed: when the flow does not complete; nothing
                is persisted in that case
        """
        if self.device_flow is None:
            raise AuthorizationFailed(
                "Not logged in to GitHub. Run `ghchecks login` first", reason="no_credential"
            )

        credential = self.device_flow.run()
        self.file_store.write(credential.to_dict())
        logger.debug(f"Saved GitHub token to {self.file_store.path}")

        self._credential, self._source = credential, 'login'
        self._loaded = True
        return credential

    def ensure_authenticated(self) -> Credential:
        """Return a usable credential, logging in if necessary."""
        credential = self.load()
        if credential is not None:
            return credential
        return self.login()

    def invalidate(self) -> None:
        """Forget the current credential after GitHub rejected it."""
        if self._source == 'env':
            logger.warning("GitHub rejected the token from the environment; logging in instead")
        elif self._source == 'file':
            self.file_store.delete()
        self._credential = None
        self._source = None
        self._loaded = True

    def logout(self) -> bool:
        """
        Remove the persisted credential.

        Returns:
            True if a stored credential was removed
        """
        self._credential = None
        self._source = None
        return self.file_store.delete()

"""
Credential domain object for ghchecks.

A Credential is a GitHub access token plus what we know about it.
It is read-only once created; re-authentication produces a new one.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any, FrozenSet, Iterable


def parse_scopes(value: Any) -> FrozenSet[str]:
    """Accept the comma-separated OAuth scope string or a list of scopes."""
    if not value:
        return frozenset()
    if isinstance(value, str):
        parts: Iterable[str] = value.replace(' ', ',').split(',')
    else:
        parts = value
    return frozenset(p.strip() for p in parts if p and p.strip())


@dataclass(frozen=True)
class Credential:
    """A GitHub access token."""
    token: str
    scopes: FrozenSet[str] = field(default_factory=frozenset)
    expires_at: Optional[datetime] = None
    token_type: str = "bearer"
    refresh_token: Optional[str] = None

    def __post_init__(self):
        if not self.token:
            raise ValueError("Credential token must not be empty")

    def __repr__(self) -> str:
        # Never leak the token into logs or tracebacks
        return (f"Credential(token='***', scopes={sorted(self.scopes)!r}, "
                f"expires_at={self.expires_at!r})")

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        now = now or datetime.now(timezone.utc)
        return now >= self.expires_at

    @classmethod
    def from_token_response(cls, data: Dict[str, Any],
                            now: Optional[datetime] = None) -> 'Credential':
        """Create from a successful OAuth access-token response."""
        expires_at = None
        expires_in = data.get('expires_in')
        if expires_in:
            now = now or datetime.now(timezone.utc)
            expires_at = now + timedelta(seconds=int(expires_in))

        return cls(
            token=data['access_token'],
            scopes=parse_scopes(data.get('scope')),
            expires_at=expires_at,
            token_type=data.get('token_type') or 'bearer',
            refresh_token=data.get('refresh_token'),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Credential':
        """Create from the persisted form written by to_dict()."""
        expires_at = None
        if data.get('expires_at'):
            expires_at = datetime.fromisoformat(data['expires_at'])
            if expires_at.tzinfo is None:
                expires_at = expires_at.replace(tzinfo=timezone.utc)

        return cls(
            token=data['token'],
            scopes=parse_scopes(data.get('scopes')),
            expires_at=expires_at,
            token_type=data.get('token_type') or 'bearer',
            refresh_token=data.get('refresh_token'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'token': self.token,
            'scopes': sorted(self.scopes),
            'expires_at': self.expires_at.isoformat() if self.expires_at else None,
            'token_type': self.token_type,
            'refresh_token': self.refresh_token,
        }

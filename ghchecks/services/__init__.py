"""
Service layer for ghchecks.

Contains business logic that orchestrates domain objects and infrastructure:
- resolve_repository / resolve_ref: What to query
- CredentialStore / DeviceFlow: Who we are
- aggregate: Folding check-run pages into a summary
- StatusService: The whole pipeline

Services are the primary API for commands to use.
"""

from .remote_resolver import resolve_repository, parse_github_remote
from .ref_resolver import resolve_ref
from .device_flow import DeviceFlow, FlowState, next_state
from .credential_service import CredentialStore
from .aggregator import aggregate, overall_status
from .status_service import StatusService

__all__ = [
    'resolve_repository',
    'parse_github_remote',
    'resolve_ref',
    'DeviceFlow',
    'FlowState',
    'next_state',
    'CredentialStore',
    'aggregate',
    'overall_status',
    'StatusService',
]

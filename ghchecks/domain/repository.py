"""
Repository and ref domain objects for ghchecks.

RepositoryIdentity names a GitHub repository; RefSpec names the
commit whose check runs are queried. Both are immutable once resolved.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Dict, Any

# GitHub owner and repository slugs: alphanumerics, '-', '_' and '.'
SLUG_PATTERN = re.compile(r'^[A-Za-z0-9._-]+$')

# Abbreviated or full hex object name
SHA_PATTERN = re.compile(r'^[0-9a-fA-F]{7,40}$')


def is_valid_slug(value: Optional[str]) -> bool:
    """Check whether value is a usable GitHub owner or repository name."""
    if not value or value in ('.', '..'):
        return False
    return bool(SLUG_PATTERN.match(value))


@dataclass(frozen=True)
class RepositoryIdentity:
    """A GitHub repository, identified by owner and name."""
    owner: str
    name: str

    def __post_init__(self):
        if not is_valid_slug(self.owner):
            raise ValueError(f"Invalid GitHub owner: {self.owner!r}")
        if not is_valid_slug(self.name):
            raise ValueError(f"Invalid GitHub repository name: {self.name!r}")

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def html_url(self) -> str:
        return f"https://github.com/{self.owner}/{self.name}"

    def __str__(self) -> str:
        return self.full_name

    def to_dict(self) -> Dict[str, Any]:
        return {
            'owner': self.owner,
            'name': self.name,
        }


class RefKind(Enum):
    """What a RefSpec value refers to."""
    SHA = "sha"
    BRANCH_NAME = "branch"


@dataclass(frozen=True)
class RefSpec:
    """
    The git ref to query check runs for.

    display_name is the human-friendly form shown in output
    (e.g. the branch name when querying HEAD).
    """
    value: str
    kind: RefKind = RefKind.SHA
    display_name: Optional[str] = None

    def __post_init__(self):
        if not self.value or not self.value.strip():
            raise ValueError("Ref must not be empty")

    @classmethod
    def parse(cls, value: str) -> 'RefSpec':
        """Classify a user-supplied ref as a SHA or a branch name."""
        value = value.strip()
        kind = RefKind.SHA if SHA_PATTERN.match(value) else RefKind.BRANCH_NAME
        return cls(value=value, kind=kind)

    @property
    def label(self) -> str:
        """Name used when talking about this ref to the user."""
        if self.display_name:
            return self.display_name
        if self.kind == RefKind.SHA:
            return self.value[:7]
        return self.value

    def __str__(self) -> str:
        return self.label

    def to_dict(self) -> Dict[str, Any]:
        return {
            'value': self.value,
            'kind': self.kind.value,
            'display_name': self.display_name,
        }

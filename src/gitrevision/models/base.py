"""Base types used across the gitrevision pipeline."""

from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Lookup(Generic[T]):
    """Outcome of a lookup that may legitimately find nothing.

    A miss is an expected result (no repository, unknown ref, absent object)
    and carries a short diagnostic instead of raising.
    """

    found: bool
    value: Optional[T] = None
    diagnostic: str = ""

    @classmethod
    def hit(cls, value: T) -> "Lookup[T]":
        return cls(found=True, value=value)

    @classmethod
    def miss(cls, diagnostic: str) -> "Lookup[T]":
        return cls(found=False, diagnostic=diagnostic)


@dataclass(frozen=True)
class RepositoryHandle:
    """Location of a repository's metadata directory."""

    path: Optional[Path]
    is_valid: bool
    common_dir: Optional[Path] = None

    @property
    def object_root(self) -> Optional[Path]:
        """Directory holding refs, packed-refs and objects."""
        return self.common_dir or self.path


@dataclass(frozen=True)
class ResolvedRef:
    """The commit HEAD points at, and the branch when HEAD is symbolic."""

    hash: str
    branch: Optional[str] = None

    @property
    def is_detached(self) -> bool:
        return self.branch is None


class PackObjectType(IntEnum):
    """Object type codes stored in pack entry headers."""

    INVALID = 0
    COMMIT = 1
    TREE = 2
    BLOB = 3
    TAG = 4
    RESERVED = 5
    OFS_DELTA = 6
    REF_DELTA = 7


@dataclass(frozen=True)
class PackObjectHeader:
    """Decoded type/size header of a pack entry."""

    type: PackObjectType
    size: int


@dataclass(frozen=True)
class Identity:
    """Author or committer of a commit."""

    name: str
    email: str
    date: str  # "YYYY-MM-DD HH:MM:SS" plus the raw timezone offset, if any

    def as_dict(self) -> dict:
        return {"name": self.name, "email": self.email, "date": self.date}


@dataclass(frozen=True)
class ParsedCommit:
    """Identity and message fields extracted from a commit body."""

    author: Identity
    committer: Identity
    message: str


@dataclass(frozen=True)
class CommitMetadata:
    """Everything reported about the checked-out revision."""

    hash: str
    branch: Optional[str]
    author: Identity
    committer: Identity
    message: str
    is_remote_commit: bool
    is_remote_branch: bool

"""Session-scoped memo of expensive revision lookups."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from gitrevision.models.base import RepositoryHandle


@dataclass
class RevisionCache:
    """Per-session cache, keyed by commit hash.

    Every map is last-writer-wins. Only definitive outcomes are stored:
    a commit body that was found or is known to be absent, and remote
    verdicts the server actually gave. Transient failures never land here.
    """

    repository: Optional[RepositoryHandle] = None
    commit_bodies: Dict[str, Optional[List[str]]] = field(default_factory=dict)
    remote_commits: Dict[str, bool] = field(default_factory=dict)
    remote_branches: Dict[str, bool] = field(default_factory=dict)

    def has_commit_body(self, commit_hash: str) -> bool:
        return commit_hash in self.commit_bodies

    def get_commit_body(self, commit_hash: str) -> Optional[List[str]]:
        """Cached body lines, or None when the commit is known to be absent."""
        body = self.commit_bodies.get(commit_hash)
        return list(body) if body is not None else None

    def store_commit_body(self, commit_hash: str, body: Optional[List[str]]) -> None:
        self.commit_bodies[commit_hash] = list(body) if body is not None else None

    def clear(self) -> None:
        self.repository = None
        self.commit_bodies.clear()
        self.remote_commits.clear()
        self.remote_branches.clear()

"""
Verification of a local revision against the project's public API.

Each lookup has three outcomes that are kept apart: the server knows the
commit or branch, the server says it does not, or the server could not be
asked. Only the first two are remembered for the session.
"""

from dataclasses import dataclass
from typing import Optional

import httpx
from loguru import logger
from pydantic import ValidationError

from gitrevision.config import DEFAULT_REMOTE_TIMEOUT, DEFAULT_REMOTE_URL
from gitrevision.models.cache import RevisionCache
from gitrevision.models.remote import RemoteCommit


@dataclass(frozen=True)
class RemoteCommitResult:
    """Whether the commit exists upstream, plus its body when it was fetched."""

    is_remote_commit: bool
    body: Optional[RemoteCommit] = None


class RemoteVerifier:
    """Read-only client for ``/api/commit/<hash>/`` and ``/api/tree/<branch>/``."""

    def __init__(
        self,
        cache: RevisionCache,
        base_url: str = DEFAULT_REMOTE_URL,
        timeout: float = DEFAULT_REMOTE_TIMEOUT,
        enabled: bool = True,
        client: Optional[httpx.Client] = None,
    ):
        self.cache = cache
        self.base_url = base_url.rstrip("/")
        self.enabled = enabled
        self._owns_client = client is None
        self.client = client or httpx.Client(timeout=timeout, follow_redirects=True)

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "RemoteVerifier":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _get(self, path: str) -> Optional[httpx.Response]:
        """GET a path; None means the server could not be asked, including a malformed URL."""
        url = f"{self.base_url}{path}"
        try:
            response = self.client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.info(f"Remote revision API unreachable ({url}): {e}")
            return None

        if response.status_code >= 500:
            logger.info(f"Remote revision API unavailable ({url}): HTTP {response.status_code}")
            return None
        return response

    def verify_commit(self, commit_hash: str, local_body_present: bool) -> RemoteCommitResult:
        """Check whether ``commit_hash`` exists upstream.

        With no local body the request is always made, so the server's copy
        of the commit can stand in for it.
        """
        if not self.enabled:
            return RemoteCommitResult(is_remote_commit=False)

        if local_body_present and commit_hash in self.cache.remote_commits:
            return RemoteCommitResult(is_remote_commit=self.cache.remote_commits[commit_hash])

        response = self._get(f"/api/commit/{commit_hash}/")
        if response is None:
            return RemoteCommitResult(is_remote_commit=False)

        if not response.is_success:
            self.cache.remote_commits[commit_hash] = False
            return RemoteCommitResult(is_remote_commit=False)

        self.cache.remote_commits[commit_hash] = True
        if local_body_present:
            return RemoteCommitResult(is_remote_commit=True)

        try:
            body = RemoteCommit.model_validate_json(response.content)
        except ValidationError as e:
            logger.warning(f"Remote commit {commit_hash} has an unexpected body: {e}")
            body = None
        return RemoteCommitResult(is_remote_commit=True, body=body)

    def verify_branch(self, commit_hash: str, branch: str) -> bool:
        """Check whether ``branch`` exists upstream. Verdicts are kept per commit."""
        if not self.enabled:
            return False

        if commit_hash in self.cache.remote_branches:
            return self.cache.remote_branches[commit_hash]

        response = self._get(f"/api/tree/{branch}/")
        if response is None:
            return False

        exists = response.is_success
        self.cache.remote_branches[commit_hash] = exists
        return exists

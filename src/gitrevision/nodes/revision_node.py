"""
gitrevision node: detect the checked-out revision of a working tree.

Runs locator, ref resolution, object lookup and commit parsing in order,
consulting the remote API along the way, and records the outcome as
``version_git*`` keys on the state.
"""

import os
from typing import Optional

from loguru import logger

from gitrevision.config import Settings
from gitrevision.models.base import CommitMetadata
from gitrevision.models.cache import RevisionCache
from gitrevision.models.errors import RevisionError
from gitrevision.models.state import RevisionState
from gitrevision.nodes.commit_parser import parse_commit
from gitrevision.nodes.locator import locate_repository
from gitrevision.nodes.object_store import fetch_commit_body, is_commit_hash
from gitrevision.nodes.refs import resolve_head, with_common_dir
from gitrevision.nodes.remote import RemoteCommitResult, RemoteVerifier

REVISION_KEYS = (
    "version_git_commithash",
    "version_git_branch",
    "version_git_message",
    "version_git_author",
    "version_git_committer",
    "version_git_isremotecommit",
    "version_git_isremotebranch",
)


def check_git_revision(repo_path: str, cache: RevisionCache, verifier: RemoteVerifier) -> Optional[CommitMetadata]:
    """Detect the revision checked out in ``repo_path``.

    Returns:
        The commit metadata, or None when there is no repository, HEAD cannot
        be resolved, or neither the local storage nor the remote API has the
        commit.

    Raises:
        RevisionError: repository storage is present but unreadable or corrupt.
    """
    handle = locate_repository(repo_path, cache)
    if not handle.is_valid:
        return None
    handle = with_common_dir(handle)

    head = resolve_head(handle)
    if not head.found:
        logger.debug(f"Cannot resolve HEAD: {head.diagnostic}")
        return None
    commit_hash = head.value.hash
    branch = head.value.branch

    body = fetch_commit_body(handle, commit_hash, cache)
    if not body.found:
        logger.debug(f"No local commit body: {body.diagnostic}")

    if is_commit_hash(commit_hash):
        remote = verifier.verify_commit(commit_hash, local_body_present=body.found)
    else:
        remote = RemoteCommitResult(is_remote_commit=False)

    is_remote_branch = False
    if remote.is_remote_commit and branch is not None:
        is_remote_branch = verifier.verify_branch(commit_hash, branch)

    if body.found:
        parsed = parse_commit(body.value)
        if not parsed.found:
            logger.warning(f"Commit {commit_hash}: {parsed.diagnostic}")
            return None
        author = parsed.value.author
        committer = parsed.value.committer
        message = parsed.value.message
    elif remote.body is not None:
        author = remote.body.author.to_identity()
        committer = remote.body.committer.to_identity()
        message = remote.body.message.strip()
    else:
        return None

    return CommitMetadata(
        hash=commit_hash,
        branch=branch,
        author=author,
        committer=committer,
        message=message,
        is_remote_commit=remote.is_remote_commit,
        is_remote_branch=is_remote_branch,
    )


def _without_revision(state: RevisionState) -> RevisionState:
    new_state: RevisionState = {key: value for key, value in state.items() if key not in REVISION_KEYS}
    new_state["version_git"] = 0
    return new_state


def revision_node(
    state: RevisionState,
    cache: Optional[RevisionCache] = None,
    verifier: Optional[RemoteVerifier] = None,
    settings: Optional[Settings] = None,
) -> RevisionState:
    """Detect the revision and update state with what was found.

    Never raises for repository or network problems: every failure ends in
    ``version_git == 0`` and, for corrupt storage, an entry in ``errors``.
    """
    settings = settings or Settings()
    if not settings.show_git_revision:
        return _without_revision(state)

    logger.info("Executing Revision Node")

    repo_path = state.get("repo_path") or os.getcwd()
    cache = cache if cache is not None else RevisionCache()
    owns_verifier = verifier is None
    if verifier is None:
        verifier = RemoteVerifier(
            cache,
            base_url=settings.remote_url,
            timeout=settings.remote_timeout,
            enabled=settings.remote_enabled,
        )

    try:
        metadata = check_git_revision(repo_path, cache, verifier)
    except RevisionError as e:
        logger.warning(f"Revision detection aborted: {e}")
        new_state = _without_revision(state)
        new_state["errors"] = list(state.get("errors", [])) + [{"node": "revision_node", "error": str(e)}]
        return new_state
    finally:
        if owns_verifier:
            verifier.close()

    if metadata is None:
        logger.info("No git revision data available")
        return _without_revision(state)

    logger.info(f"Detected revision {metadata.hash} on {metadata.branch or 'detached HEAD'}")

    new_state: RevisionState = {
        **state,
        "version_git": 1,
        "version_git_commithash": metadata.hash,
        "version_git_branch": metadata.branch,
        "version_git_message": metadata.message,
        "version_git_author": metadata.author.as_dict(),
        "version_git_committer": metadata.committer.as_dict(),
        "version_git_isremotecommit": metadata.is_remote_commit,
        "version_git_isremotebranch": metadata.is_remote_branch,
    }
    return new_state

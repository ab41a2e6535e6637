"""
gitrevision state container handed to the configuration store.
"""

from typing import Any, Dict, List, Optional, TypedDict


class RevisionState(TypedDict, total=False):
    """State produced by the revision node.

    Using TypedDict so callers can merge it into their own configuration
    mapping. total=False means all fields are optional; when ``version_git``
    is 0 none of the other ``version_git_*`` keys are set.
    """

    # Input
    repo_path: str  # Working tree whose .git is inspected

    # Output
    version_git: int  # 1 when revision data was found, 0 otherwise
    version_git_commithash: str
    version_git_branch: Optional[str]  # None for a detached HEAD
    version_git_message: str
    version_git_author: Dict[str, str]  # name, email, date
    version_git_committer: Dict[str, str]  # name, email, date
    version_git_isremotecommit: bool
    version_git_isremotebranch: bool

    # Global State
    errors: List[Dict[str, Any]]

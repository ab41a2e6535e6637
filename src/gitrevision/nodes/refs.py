"""
HEAD resolution.

Turns the ``HEAD`` pseudo-ref into a commit hash, following a symbolic ref
into ``refs/`` and falling back to the ``packed-refs`` table.
"""

from dataclasses import replace
from pathlib import Path
from typing import Optional

from loguru import logger

from gitrevision.models.base import Lookup, RepositoryHandle, ResolvedRef

SYMREF_PREFIX_LENGTH = len("ref: ")
BRANCH_PREFIX = "refs/heads/"


def _read_text(path: Path) -> Optional[str]:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None


def with_common_dir(handle: RepositoryHandle) -> RepositoryHandle:
    """Apply the ``commondir`` redirect used by linked worktrees.

    Returns a handle whose ``common_dir`` is where refs and objects live.
    """
    if handle.common_dir is not None or handle.path is None:
        return handle

    contents = _read_text(handle.path / "commondir")
    if contents is None:
        return replace(handle, common_dir=handle.path)

    common_dir = handle.path / contents.strip()
    logger.debug(f"Using common dir {common_dir}")
    return replace(handle, common_dir=common_dir)


def branch_name(ref_path: str) -> str:
    """Branch shown for a symbolic ref: the part after refs/heads/, else the basename."""
    if ref_path.startswith(BRANCH_PREFIX):
        return ref_path[len(BRANCH_PREFIX) :]
    return ref_path.rsplit("/", 1)[-1]


def find_packed_ref(packed_refs: str, ref_path: str) -> Optional[str]:
    """Look up a ref in the contents of a ``packed-refs`` file."""
    for line in packed_refs.splitlines():
        if not line or line.startswith("#"):
            continue
        parts = line.split()
        # Peeled tag lines ("^<hash>") have a single field
        if len(parts) != 2:
            continue
        if parts[1] == ref_path:
            return parts[0]
    return None


def resolve_head(handle: RepositoryHandle) -> Lookup[ResolvedRef]:
    """Resolve HEAD to a commit hash and, when on a branch, its name."""
    if not handle.is_valid or handle.path is None:
        return Lookup.miss("not a repository")

    head = _read_text(handle.path / "HEAD")
    if not head or not head.strip():
        return Lookup.miss("HEAD is missing or empty")

    handle = with_common_dir(handle)
    root = handle.object_root

    if "/" not in head:
        return Lookup.hit(ResolvedRef(hash=head.strip()))

    ref_path = head.strip()[SYMREF_PREFIX_LENGTH:]
    branch = branch_name(ref_path)

    ref_file = root / ref_path
    if ref_file.exists():
        contents = _read_text(ref_file)
        if not contents or not contents.strip():
            return Lookup.miss(f"cannot read {ref_file}")
        return Lookup.hit(ResolvedRef(hash=contents.strip(), branch=branch))

    packed_refs = _read_text(root / "packed-refs")
    if packed_refs is None:
        return Lookup.miss(f"{ref_path} is neither a loose nor a packed ref")

    commit_hash = find_packed_ref(packed_refs, ref_path)
    if commit_hash is None:
        return Lookup.miss(f"{ref_path} not found in packed-refs")

    logger.debug(f"Resolved {ref_path} through packed-refs")
    return Lookup.hit(ResolvedRef(hash=commit_hash, branch=branch))

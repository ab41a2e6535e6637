"""
Repository discovery for a working tree.

Finds the metadata directory behind ``<base>/.git``, which is either the
directory itself or a ``gitdir:`` pointer file written by
``git init --separate-git-dir`` and by linked worktrees.
"""

import re
from pathlib import Path
from typing import Optional, Union

from loguru import logger

from gitrevision.models.base import RepositoryHandle
from gitrevision.models.cache import RevisionCache

GIT_DIR_NAME = ".git"
GITDIR_POINTER = re.compile(r"^gitdir: (.*)$")

NOT_A_REPOSITORY = RepositoryHandle(path=None, is_valid=False)


def _read_gitdir_pointer(pointer: Path, base_path: Path) -> Optional[Path]:
    """Return the directory a ``.git`` file points to, if it is one."""
    try:
        contents = pointer.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(f"Cannot read {pointer}: {e}")
        return None

    match = GITDIR_POINTER.match(contents)
    if not match:
        logger.debug(f"{pointer} is not a gitdir pointer")
        return None

    target = Path(match.group(1))
    if not target.is_absolute():
        target = base_path / target
    return target if target.is_dir() else None


def _locate(base_path: Path) -> RepositoryHandle:
    git = base_path / GIT_DIR_NAME

    if git.is_dir():
        if (git / "config").is_file():
            return RepositoryHandle(path=git, is_valid=True)
        logger.debug(f"{git} has no config file")
        return NOT_A_REPOSITORY

    if git.is_file():
        target = _read_gitdir_pointer(git, base_path)
        if target is not None:
            return RepositoryHandle(path=target, is_valid=True)
        return NOT_A_REPOSITORY

    return NOT_A_REPOSITORY


def locate_repository(base_path: Union[str, Path], cache: Optional[RevisionCache] = None) -> RepositoryHandle:
    """Find the repository metadata directory for a working tree.

    The outcome, valid or not, is remembered in ``cache`` so repeated calls
    within a session do not touch the filesystem.
    """
    if cache is not None and cache.repository is not None:
        return cache.repository

    handle = _locate(Path(base_path))
    if handle.is_valid:
        logger.debug(f"Repository metadata found at {handle.path}")
    else:
        logger.debug(f"No repository at {base_path}")

    if cache is not None:
        cache.repository = handle
    return handle

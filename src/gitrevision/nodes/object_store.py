"""
Commit body retrieval straight from a repository's object storage.

Loose objects are tried first, then every pack listed by the repository.
Only non-delta commit entries are understood, which covers the commit HEAD
points at in practically every repository.
"""

import re
import zlib
from pathlib import Path
from typing import List, Optional

from loguru import logger

from gitrevision.models.base import Lookup, RepositoryHandle
from gitrevision.models.cache import RevisionCache
from gitrevision.models.errors import DecompressionError, MalformedIndexError, ObjectReadError, RevisionError
from gitrevision.nodes.pack_index import find_offset
from gitrevision.nodes.pack_object import read_object_at

COMMIT_HASH = re.compile(r"^[0-9a-f]{40}$")


def is_commit_hash(value: str) -> bool:
    return bool(COMMIT_HASH.match(value))


def _split_body(payload: bytes) -> List[str]:
    return payload.decode("utf-8", errors="replace").split("\n")


def read_loose_object(objects_dir: Path, commit_hash: str) -> Optional[List[str]]:
    """Read a loose object and return its body lines, or None if there is none.

    The ``"<type> <size>\\0"`` header is dropped.
    """
    path = objects_dir / commit_hash[:2] / commit_hash[2:]
    if not path.exists():
        return None

    try:
        compressed = path.read_bytes()
    except OSError as e:
        raise ObjectReadError(f"Cannot read loose object {path}: {e}")

    try:
        raw = zlib.decompress(compressed)
    except zlib.error as e:
        raise DecompressionError(f"Corrupt loose object {path}: {e}")

    _, _, body = raw.partition(b"\0")
    return _split_body(body)


def list_pack_names(objects_dir: Path) -> List[str]:
    """Names of the pack files to search.

    ``objects/info/packs`` is used when it lists anything; some clients do
    not maintain it, so the pack directory is listed otherwise.
    """
    pack_names = []
    packs_file = objects_dir / "info" / "packs"
    try:
        packs = packs_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        packs = ""

    for line in packs.splitlines():
        if not line.strip():
            continue
        if line[0] != "P":
            continue
        pack_names.append(line[2:].strip())

    if pack_names:
        return pack_names

    pack_dir = objects_dir / "pack"
    if not pack_dir.is_dir():
        return []
    return sorted(entry.name for entry in pack_dir.glob("*.pack") if entry.is_file())


def read_packed_object(objects_dir: Path, commit_hash: str) -> Optional[List[str]]:
    """Search the packs for ``commit_hash`` and return its body lines.

    A pack that cannot be used is skipped. If no pack holds the commit and
    one of them failed to read or inflate, that failure is raised since the
    commit may well have been in it.
    """
    pack_dir = objects_dir / "pack"
    last_error: Optional[RevisionError] = None

    for pack_name in list_pack_names(objects_dir):
        index_path = pack_dir / pack_name.replace(".pack", ".idx")
        try:
            index_data = index_path.read_bytes()
        except OSError:
            logger.debug(f"No readable index for {pack_name}")
            continue

        try:
            location = find_offset(index_data, commit_hash)
        except MalformedIndexError as e:
            logger.warning(f"Skipping {pack_name}: {e}")
            continue

        if not location.found:
            continue

        try:
            with open(pack_dir / pack_name, "rb") as pack_file:
                entry = read_object_at(pack_file, location.value)
        except OSError as e:
            last_error = ObjectReadError(f"Cannot open {pack_name}: {e}")
            logger.warning(str(last_error))
            continue
        except RevisionError as e:
            last_error = e
            logger.warning(f"Cannot read {commit_hash} from {pack_name}: {e}")
            continue

        if not entry.found:
            logger.debug(f"{pack_name}: {entry.diagnostic}")
            continue

        logger.debug(f"Found {commit_hash} in {pack_name}")
        return _split_body(entry.value)

    if last_error is not None:
        raise last_error
    return None


def fetch_commit_body(
    handle: RepositoryHandle, commit_hash: str, cache: Optional[RevisionCache] = None
) -> Lookup[List[str]]:
    """Return the lines of the commit object ``commit_hash``.

    Args:
        handle: Repository to read; its ``object_root`` holds ``objects/``.
        commit_hash: 40 lowercase hex digits; anything else is a miss.
        cache: Session cache. Found bodies and definitive misses are stored;
            read and decompression failures are not.

    Raises:
        ObjectReadError: an object file exists but could not be read.
        DecompressionError: an object exists but is corrupt.
    """
    if not is_commit_hash(commit_hash):
        return Lookup.miss(f"{commit_hash!r} is not a commit hash")

    if cache is not None and cache.has_commit_body(commit_hash):
        logger.debug(f"Commit body cache hit for {commit_hash}")
        body = cache.get_commit_body(commit_hash)
        if body is None:
            return Lookup.miss(f"{commit_hash} not found (cached)")
        return Lookup.hit(body)

    if not handle.is_valid or handle.object_root is None:
        return Lookup.miss("not a repository")

    objects_dir = handle.object_root / "objects"
    body = read_loose_object(objects_dir, commit_hash)
    if body is None:
        body = read_packed_object(objects_dir, commit_hash)

    if cache is not None:
        cache.store_commit_body(commit_hash, body)

    if body is None:
        return Lookup.miss(f"{commit_hash} not found")
    return Lookup.hit(body)

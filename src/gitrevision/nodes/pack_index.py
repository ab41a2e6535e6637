"""
Version 2 pack index reader.

Layout of a ``.idx`` file::

    magic "\\377tOc" | version (>L) | fanout 256 x >L
    | names N x 20 bytes | crc32 N x >L | offsets N x >L | large offsets M x >Q
    | pack checksum | index checksum

Only the pieces needed to map one object name to its pack offset are read.
"""

import struct
from typing import List

from gitrevision.models.base import Lookup
from gitrevision.models.errors import MalformedIndexError

INDEX_MAGIC = b"\377tOc"
INDEX_VERSION = 2
FANOUT_OFFSET = 8
FANOUT_ENTRIES = 256
NAMES_OFFSET = FANOUT_OFFSET + FANOUT_ENTRIES * 4
SHA_LENGTH = 20
LARGE_OFFSET_FLAG = 0x80000000


def read_fanout(index_data: bytes) -> List[int]:
    """Validate the header and return the cumulative fanout table."""
    if index_data[:4] != INDEX_MAGIC:
        raise MalformedIndexError("Not a version 2 pack index (bad magic)")
    if len(index_data) < NAMES_OFFSET:
        raise MalformedIndexError("Pack index truncated before end of fanout table")

    (version,) = struct.unpack_from(">L", index_data, 4)
    if version != INDEX_VERSION:
        raise MalformedIndexError(f"Unsupported pack index version {version}")

    return list(struct.unpack_from(f">{FANOUT_ENTRIES}L", index_data, FANOUT_OFFSET))


def _unpack_offset(index_data: bytes, total: int, position: int) -> int:
    offsets_start = NAMES_OFFSET + (SHA_LENGTH + 4) * total
    (offset,) = struct.unpack_from(">L", index_data, offsets_start + position * 4)
    if offset & LARGE_OFFSET_FLAG:
        large_start = offsets_start + 4 * total
        (offset,) = struct.unpack_from(">Q", index_data, large_start + (offset & (LARGE_OFFSET_FLAG - 1)) * 8)
    return offset


def find_offset(index_data: bytes, commit_hash: str) -> Lookup[int]:
    """Find the pack file offset of ``commit_hash``.

    Args:
        index_data: Full contents of a version 2 ``.idx`` file.
        commit_hash: 40 lowercase hex digits.

    Returns:
        A hit with the byte offset into the companion pack, or a miss when the
        index does not list the object.

    Raises:
        MalformedIndexError: unknown magic, unsupported version, truncated data.
    """
    fanout = read_fanout(index_data)
    total = fanout[-1]

    if len(index_data) < NAMES_OFFSET + (SHA_LENGTH + 8) * total:
        raise MalformedIndexError(f"Pack index truncated, expected {total} entries")

    first_byte = int(commit_hash[:2], 16)
    start = fanout[first_byte - 1] if first_byte else 0
    end = min(fanout[first_byte], total)
    target = bytes.fromhex(commit_hash)

    # Linear scan of the bucket; buckets are small and this keeps the reader simple
    for position in range(start, end):
        name_start = NAMES_OFFSET + position * SHA_LENGTH
        if index_data[name_start : name_start + SHA_LENGTH] == target:
            try:
                return Lookup.hit(_unpack_offset(index_data, total, position))
            except struct.error as e:
                raise MalformedIndexError(f"Pack index truncated in offset tables: {e}")

    return Lookup.miss(f"{commit_hash} not in index")

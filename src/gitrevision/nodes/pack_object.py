"""Reading single entries out of a pack file."""

import zlib
from typing import BinaryIO

from gitrevision.models.base import Lookup, PackObjectHeader, PackObjectType
from gitrevision.models.errors import DecompressionError, ObjectReadError

CONTINUATION_BIT = 0x80
READ_CHUNK_SIZE = 64 * 1024


def _read_byte(stream: BinaryIO) -> int:
    byte = stream.read(1)
    if not byte:
        raise ObjectReadError("Unexpected end of pack while reading an entry header")
    return byte[0]


def read_object_header(stream: BinaryIO) -> PackObjectHeader:
    """Decode the variable-length type/size header at the stream position.

    The first byte holds the continuation flag (bit 7), the type (bits 4-6)
    and the low four size bits. Each following byte adds seven more size
    bits. The whole header is consumed so the stream ends up at the start of
    the compressed data.
    """
    byte = _read_byte(stream)
    type_num = (byte >> 4) & 0x07
    size = byte & 0x0F
    shift = 4

    while byte & CONTINUATION_BIT:
        byte = _read_byte(stream)
        size |= (byte & 0x7F) << shift
        shift += 7

    return PackObjectHeader(type=PackObjectType(type_num), size=size)


def inflate_stream(stream: BinaryIO) -> bytes:
    """Inflate one zlib stream, ignoring whatever follows it in the pack."""
    decompressor = zlib.decompressobj()
    chunks = []
    try:
        while not decompressor.eof:
            data = stream.read(READ_CHUNK_SIZE)
            if not data:
                break
            chunks.append(decompressor.decompress(data))
        chunks.append(decompressor.flush())
    except zlib.error as e:
        raise DecompressionError(f"Corrupt pack entry: {e}")

    if not decompressor.eof:
        raise DecompressionError("Pack entry ends before its zlib stream does")
    return b"".join(chunks)


def read_object_at(pack_file: BinaryIO, offset: int) -> Lookup[bytes]:
    """Read the commit stored at ``offset`` in an open pack file.

    Returns:
        A hit with the inflated commit payload, or a miss when the entry is
        any other object type (including deltas).

    Raises:
        ObjectReadError: the pack could not be read at that position.
        DecompressionError: the entry data is corrupt.
    """
    try:
        pack_file.seek(offset)
        header = read_object_header(pack_file)
    except OSError as e:
        raise ObjectReadError(f"Cannot read pack entry at offset {offset}: {e}")

    if header.type != PackObjectType.COMMIT:
        return Lookup.miss(f"entry at offset {offset} is a {header.type.name.lower()}, not a commit")

    try:
        payload = inflate_stream(pack_file)
    except OSError as e:
        raise ObjectReadError(f"Cannot read pack entry at offset {offset}: {e}")

    return Lookup.hit(payload)

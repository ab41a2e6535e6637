"""Tests for pack entry decoding."""

import io
import zlib

import pytest

from gitrevision.models.base import PackObjectType
from gitrevision.models.errors import DecompressionError, ObjectReadError
from gitrevision.nodes.pack_object import read_object_at, read_object_header

SIZES = [0, 15, 16, 127, 128, 2047, 2048, 2**18, 2**25 + 3, 2**40 + 1]


@pytest.mark.parametrize("size", SIZES)
@pytest.mark.parametrize("object_type", [PackObjectType.COMMIT, PackObjectType.BLOB, PackObjectType.REF_DELTA])
def test_header_round_trip(pack_header, object_type, size):
    stream = io.BytesIO(pack_header(object_type, size) + b"rest")

    header = read_object_header(stream)

    assert header.type == object_type
    assert header.size == size
    assert stream.read() == b"rest"


def test_single_byte_header_layout():
    # continuation 0, type 1 (commit), size 0b1010
    header = read_object_header(io.BytesIO(bytes([0b0001_1010])))

    assert header.type == PackObjectType.COMMIT
    assert header.size == 10


def test_truncated_header():
    with pytest.raises(ObjectReadError):
        read_object_header(io.BytesIO(bytes([0b1001_1111])))


def test_reads_commit_at_offset(make_pack):
    payload = b"tree 0000\n\nmessage\n"
    pack, offsets = make_pack([(3, b"blob data"), (1, payload), (3, b"more")])

    result = read_object_at(io.BytesIO(pack), offsets[1])

    assert result.found
    assert result.value == payload


def test_non_commit_is_a_miss(make_pack):
    pack, offsets = make_pack([(3, b"blob data")])

    result = read_object_at(io.BytesIO(pack), offsets[0])

    assert not result.found
    assert "blob" in result.diagnostic


def test_corrupt_entry(pack_header):
    data = pack_header(1, 20) + b"definitely not zlib data"

    with pytest.raises(DecompressionError):
        read_object_at(io.BytesIO(data), 0)


def test_truncated_entry(pack_header):
    data = pack_header(1, 200) + zlib.compress(b"x" * 200)[:10]

    with pytest.raises(DecompressionError):
        read_object_at(io.BytesIO(data), 0)

"""Shared fixtures: synthetic object storage and real repositories."""

import hashlib
import struct
import zlib
from pathlib import Path
from typing import Callable, Dict, List, Tuple

import pytest
from git import Actor, Repo

AUTHOR = Actor("Ada Author", "ada@example.org")
COMMITTER = Actor("Carl Committer", "carl@example.org")

SAMPLE_COMMIT = (
    b"tree 4b825dc642cb6eb9a060e54bf8d69288fbee4904\n"
    b"author Ada Author <ada@example.org> 1000000000 +0200\n"
    b"committer Carl Committer <carl@example.org> 1000000060 -0130\n"
    b"\n"
    b"Fix the frobnicator\n"
    b"\n"
    b"It no longer frobs twice.\n"
)


def encode_pack_header(type_num: int, size: int) -> bytes:
    """Encode a pack entry header: 4 size bits in the first byte, then 7 per byte."""
    header = bytearray()
    byte = (type_num << 4) | (size & 0x0F)
    size >>= 4
    while size:
        header.append(byte | 0x80)
        byte = size & 0x7F
        size >>= 7
    header.append(byte)
    return bytes(header)


def object_hash(type_name: str, payload: bytes) -> str:
    return hashlib.sha1(type_name.encode() + b" " + str(len(payload)).encode() + b"\0" + payload).hexdigest()


def build_pack(objects: List[Tuple[int, bytes]]) -> Tuple[bytes, List[int]]:
    """Build pack file bytes and the offset of each entry."""
    data = bytearray(b"PACK" + struct.pack(">LL", 2, len(objects)))
    offsets = []
    for type_num, payload in objects:
        offsets.append(len(data))
        data += encode_pack_header(type_num, len(payload))
        data += zlib.compress(payload)
    data += hashlib.sha1(bytes(data)).digest()
    return bytes(data), offsets


def build_index(entries: Dict[str, int], large_offsets: bool = False) -> bytes:
    """Build a version 2 pack index for ``{hex_sha: offset}``."""
    names = sorted(entries)
    fanout = [0] * 256
    for name in names:
        fanout[int(name[:2], 16)] += 1
    for i in range(1, 256):
        fanout[i] += fanout[i - 1]

    data = bytearray(b"\377tOc" + struct.pack(">L", 2))
    data += struct.pack(">256L", *fanout)
    for name in names:
        data += bytes.fromhex(name)
    for _ in names:
        data += struct.pack(">L", 0)

    large_table = []
    for name in names:
        if large_offsets:
            data += struct.pack(">L", 0x80000000 | len(large_table))
            large_table.append(entries[name])
        else:
            data += struct.pack(">L", entries[name])
    for offset in large_table:
        data += struct.pack(">Q", offset)

    data += b"\0" * 40
    return bytes(data)


def loose_object(type_name: str, payload: bytes) -> bytes:
    return zlib.compress(type_name.encode() + b" " + str(len(payload)).encode() + b"\0" + payload)


@pytest.fixture
def sample_commit_lines() -> List[str]:
    """SAMPLE_COMMIT split the way the object store returns commit bodies."""
    return SAMPLE_COMMIT.decode("utf-8").split("\n")


@pytest.fixture
def git_dir(tmp_path) -> Path:
    """A bare-bones metadata directory inside a working tree at tmp_path."""
    path = tmp_path / ".git"
    (path / "objects" / "pack").mkdir(parents=True)
    (path / "objects" / "info").mkdir()
    (path / "refs" / "heads").mkdir(parents=True)
    (path / "config").write_text("[core]\n")
    return path


@pytest.fixture
def write_loose() -> Callable[[Path, str, bytes], str]:
    """Write a loose object under ``<git_dir>/objects`` and return its hash."""

    def _write(path: Path, type_name: str, payload: bytes) -> str:
        sha = object_hash(type_name, payload)
        target = path / "objects" / sha[:2] / sha[2:]
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(loose_object(type_name, payload))
        return sha

    return _write


@pytest.fixture
def write_pack() -> Callable[..., List[str]]:
    """Write a pack/index pair under ``<git_dir>/objects/pack`` and return the object hashes."""

    def _write(path: Path, objects: List[Tuple[int, bytes]], name: str = "pack-test", **index_options) -> List[str]:
        type_names = {1: "commit", 2: "tree", 3: "blob", 4: "tag"}
        pack_data, offsets = build_pack(objects)
        hashes = [object_hash(type_names[type_num], payload) for type_num, payload in objects]
        pack_dir = path / "objects" / "pack"
        (pack_dir / f"{name}.pack").write_bytes(pack_data)
        (pack_dir / f"{name}.idx").write_bytes(build_index(dict(zip(hashes, offsets)), **index_options))
        return hashes

    return _write


def create_commit(repo: Repo, file_name: str, content: str, message: str):
    """Helper function to create a commit in the test repository."""
    file_path = Path(repo.working_dir) / file_name
    file_path.write_text(content)
    repo.index.add([file_name])
    return repo.index.commit(message, author=AUTHOR, committer=COMMITTER)


@pytest.fixture
def temp_git_repo(tmp_path) -> Repo:
    """Create a basic temporary Git repository with one commit."""
    repo_path = tmp_path / "test_repo"
    repo_path.mkdir()
    repo = Repo.init(repo_path)
    create_commit(repo, "test.txt", "Initial content", "Initial commit\n\nWith a longer body.")
    return repo


@pytest.fixture
def packed_git_repo(temp_git_repo) -> Repo:
    """Repository whose objects and refs have all been packed."""
    repo = temp_git_repo
    repo.git.repack("-a", "-d")
    repo.git.prune_packed()
    repo.git.pack_refs("--all")
    return repo


@pytest.fixture
def make_index() -> Callable[..., bytes]:
    return build_index


@pytest.fixture
def make_pack() -> Callable[[List[Tuple[int, bytes]]], Tuple[bytes, List[int]]]:
    return build_pack


@pytest.fixture
def pack_header() -> Callable[[int, int], bytes]:
    return encode_pack_header

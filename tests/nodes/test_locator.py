"""Tests for repository discovery."""

import shutil

from gitrevision.models.cache import RevisionCache
from gitrevision.nodes.locator import locate_repository


def test_git_directory_with_config(git_dir, tmp_path):
    handle = locate_repository(tmp_path)

    assert handle.is_valid
    assert handle.path == git_dir


def test_git_directory_without_config_is_not_a_repository(tmp_path):
    (tmp_path / ".git").mkdir()

    handle = locate_repository(tmp_path)

    assert not handle.is_valid
    assert handle.path is None


def test_no_git_entry(tmp_path):
    assert not locate_repository(tmp_path).is_valid


def test_gitdir_pointer_absolute(tmp_path):
    real_dir = tmp_path / "elsewhere" / "repo.git"
    real_dir.mkdir(parents=True)
    work_tree = tmp_path / "work"
    work_tree.mkdir()
    (work_tree / ".git").write_text(f"gitdir: {real_dir}\n")

    handle = locate_repository(work_tree)

    assert handle.is_valid
    assert handle.path == real_dir


def test_gitdir_pointer_relative_to_work_tree(tmp_path):
    work_tree = tmp_path / "work"
    (work_tree / "meta").mkdir(parents=True)
    (work_tree / ".git").write_text("gitdir: meta\n")

    handle = locate_repository(work_tree)

    assert handle.is_valid
    assert handle.path == work_tree / "meta"


def test_gitdir_pointer_to_missing_directory(tmp_path):
    (tmp_path / ".git").write_text(f"gitdir: {tmp_path / 'missing'}\n")

    assert not locate_repository(tmp_path).is_valid


def test_git_file_without_pointer(tmp_path):
    (tmp_path / ".git").write_text("this is not a pointer\n")

    assert not locate_repository(tmp_path).is_valid


def test_result_is_cached_for_the_session(git_dir, tmp_path):
    cache = RevisionCache()
    first = locate_repository(tmp_path, cache)
    shutil.rmtree(git_dir)

    second = locate_repository(tmp_path, cache)

    assert second == first
    assert second.is_valid
    assert not locate_repository(tmp_path).is_valid


def test_negative_result_is_cached(tmp_path):
    cache = RevisionCache()
    assert not locate_repository(tmp_path, cache).is_valid

    (tmp_path / ".git" / "objects").mkdir(parents=True)
    (tmp_path / ".git" / "config").write_text("")

    assert not locate_repository(tmp_path, cache).is_valid
    cache.clear()
    assert locate_repository(tmp_path, cache).is_valid

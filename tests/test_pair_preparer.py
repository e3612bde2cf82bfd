"""
Tests for pruning files without a scaled counterpart.
"""
from pathlib import Path

import pytest

from dataset_augmentor.errors import ConfigError, SetupIoError
from dataset_augmentor.preparers.pair_preparer import (
    remove_empty_dirs, remove_unpaired_files, scale_size_folders,
)


def _touch(root: Path, *relative_paths: str) -> None:
    for relative in relative_paths:
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"")


def _files(root: Path):
    return sorted(str(p.relative_to(root).as_posix()) for p in root.rglob('*') if p.is_file())


def test_scale_size_folders():
    assert scale_size_folders(Path("16x8/a/b.png"), 2, scale_up=True) == Path("32x16/a/b.png")
    assert scale_size_folders(Path("33x17/b.png"), 2, scale_up=False) == Path("16x8/b.png")
    assert scale_size_folders(Path("x/1x2x3/box.png"), 2, scale_up=True) == Path("x/1x2x3/box.png")


def test_keeps_only_pairs_and_prunes_empty_dirs(tmp_path):
    low, high = tmp_path / "low", tmp_path / "high"
    _touch(low, "16x16/stone.png", "16x16/dirt.png", "8x8/only_low.png")
    _touch(high, "32x32/stone.png", "32x32/grass.png", "64x64/dirt.png")

    removed = remove_unpaired_files(low, high, 2)

    assert removed == {"low": 2, "high": 2}
    assert _files(low) == ["16x16/stone.png"]
    assert _files(high) == ["32x32/stone.png"]
    assert not (low / "8x8").exists()
    assert not (high / "64x64").exists()
    assert low.is_dir() and high.is_dir()


def test_plain_folders_pair_by_name(tmp_path):
    low, high = tmp_path / "low", tmp_path / "high"
    _touch(low, "a.png", "b.png")
    _touch(high, "a.png")

    assert remove_unpaired_files(low, high, 3) == {"low": 1, "high": 0}
    assert _files(low) == ["a.png"]


def test_invalid_scale_factor(tmp_path):
    with pytest.raises(ConfigError):
        remove_unpaired_files(tmp_path, tmp_path, 0)


def test_missing_folder(tmp_path):
    (tmp_path / "low").mkdir()
    with pytest.raises(SetupIoError):
        remove_unpaired_files(tmp_path / "low", tmp_path / "absent", 2)


def test_remove_empty_dirs_removes_nested_chains(tmp_path):
    (tmp_path / "a" / "b" / "c").mkdir(parents=True)
    _touch(tmp_path, "keep/file.txt")

    assert remove_empty_dirs(tmp_path) == 3
    assert [p.name for p in tmp_path.iterdir()] == ["keep"]

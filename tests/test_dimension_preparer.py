"""
Tests for the optional dimension-grouping stage.
"""
import numpy as np
import pytest

from dataset_augmentor.errors import SetupIoError
from dataset_augmentor.preparers.dimension_preparer import build_filters, group_by_dimensions


@pytest.fixture
def mixed_sizes(tmp_path, write_png):
    raw = tmp_path / "raw"
    write_png(raw / "s1.png", np.zeros((8, 8, 3), dtype=np.uint8))
    write_png(raw / "sub" / "s2.png", np.zeros((8, 8, 3), dtype=np.uint8))
    write_png(raw / "wide.png", np.zeros((4, 10, 3), dtype=np.uint8))
    return raw


def test_groups_by_width_and_height(mixed_sizes, tmp_path):
    out = tmp_path / "grouped"

    written = group_by_dimensions(mixed_sizes, out)

    assert written == {"8x8": 2, "10x4": 1}
    assert sorted(p.name for p in (out / "8x8").iterdir()) == ["s1.png", "s2.png"]
    assert (out / "10x4" / "wide.png").is_file()


def test_min_count_drops_small_groups(mixed_sizes, tmp_path):
    out = tmp_path / "grouped"
    assert group_by_dimensions(mixed_sizes, out, min_count=2) == {"8x8": 2}
    assert not (out / "10x4").exists()


def test_square_only(mixed_sizes, tmp_path):
    assert group_by_dimensions(mixed_sizes, tmp_path / "grouped", square_only=True) == {"8x8": 2}


def test_unreadable_files_are_skipped(mixed_sizes, tmp_path, capsys):
    (mixed_sizes / "broken.png").write_bytes(b"nope")

    written = group_by_dimensions(mixed_sizes, tmp_path / "grouped")

    assert sum(written.values()) == 3
    assert "broken.png" in capsys.readouterr().out


def test_missing_input(tmp_path):
    with pytest.raises(SetupIoError):
        group_by_dimensions(tmp_path / "absent", tmp_path / "grouped")


def test_build_filters():
    assert build_filters() == []
    square, = build_filters(square_only=True)
    assert square((4, 4), []) and not square((4, 5), [])


def test_same_name_in_different_folders_is_kept_apart(tmp_path, write_png):
    raw = tmp_path / "raw"
    write_png(raw / "x.png", np.zeros((5, 5, 3), dtype=np.uint8))
    write_png(raw / "sub" / "x.png", np.full((5, 5, 3), 9, dtype=np.uint8))
    out = tmp_path / "grouped"

    assert group_by_dimensions(raw, out) == {"5x5": 2}
    assert sorted(p.name for p in (out / "5x5").iterdir()) == ["sub_x.png", "x.png"]


def test_count_matches_files_actually_written(tmp_path, write_png, capsys):
    raw = tmp_path / "raw"
    write_png(raw / "x.png", np.zeros((5, 5, 3), dtype=np.uint8))
    write_png(raw / "sub" / "x.png", np.zeros((5, 5, 3), dtype=np.uint8))
    # Its plain name equals the prefixed name of sub/x.png
    write_png(raw / "sub_x.png", np.zeros((5, 5, 3), dtype=np.uint8))
    out = tmp_path / "grouped"

    written = group_by_dimensions(raw, out)

    assert written == {"5x5": len(list((out / "5x5").iterdir()))} == {"5x5": 2}
    assert "already taken" in capsys.readouterr().out
